from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Collection, Dict, List, Optional

import yaml

from melodyquest.core.config import DATA_DIR
from melodyquest.core.errors import ConfigError
from melodyquest.core.quiz import Quiz, QuizChoice

SCENE_KINDS = ("story", "wheel", "camera", "quiz")


@dataclass(frozen=True)
class Scene:
    index: int
    key: str
    title: str
    body: str
    kind: str = "story"
    action: Optional[str] = None
    quiz: Optional[Quiz] = None

    @property
    def wires_primary_action(self) -> bool:
        # spin and camera buttons have their own handlers
        return self.action is not None and self.kind not in ("wheel", "camera")


class SceneRepository:
    def __init__(self, base_dir: Optional[Path] = None, alphabet: Optional[Collection[str]] = None) -> None:
        self._base_dir = base_dir or DATA_DIR / "scenes"
        self._alphabet = frozenset(alphabet) if alphabet is not None else None
        self._scenes = self._load_scenes()

    def all(self) -> List[Scene]:
        return list(self._scenes)

    def get(self, index: int) -> Scene:
        return self._scenes[index]

    def __len__(self) -> int:
        return len(self._scenes)

    def quizzes(self) -> Dict[int, Quiz]:
        return {scene.index: scene.quiz for scene in self._scenes if scene.quiz is not None}

    def _load_scenes(self) -> List[Scene]:
        base_dir = self._base_dir
        if not base_dir.exists():
            raise ConfigError(f"Scenes directory not found: {base_dir}")

        def _sort_key(p: Path) -> tuple[int, str]:
            m = re.match(r"^scene(\d+)$", p.stem)
            if m:
                return (int(m.group(1)), p.stem)
            return (10**9, p.stem)

        scenes: List[Scene] = []
        for scene_path in sorted(base_dir.glob("scene*.yaml"), key=_sort_key):
            raw = yaml.safe_load(scene_path.read_text(encoding="utf-8"))
            if not raw or not isinstance(raw, dict):
                raise ConfigError(f"{scene_path.name}: expected YAML with 'title' and 'body'")
            scenes.append(_parse_scene(scene_path.name, len(scenes), scene_path.stem, raw, self._alphabet))

        if not scenes:
            raise ConfigError(f"No scene files (scene*.yaml) found in {base_dir}")
        return scenes


def _parse_scene(
    name: str,
    index: int,
    key: str,
    raw: Dict[str, Any],
    alphabet: Optional[Collection[str]] = None,
) -> Scene:
    title = raw.get("title")
    if not title or not isinstance(title, str):
        raise ConfigError(f"{name}: missing or invalid 'title'")
    body = str(raw.get("body") or "").strip()
    kind = str(raw.get("kind", "story")).strip().lower()
    if kind not in SCENE_KINDS:
        raise ConfigError(f"{name}: unknown kind {kind!r}")
    action = raw.get("action")
    quiz = None
    if kind == "quiz":
        quiz = _parse_quiz(name, raw.get("quiz"), alphabet)
    return Scene(
        index=index,
        key=key,
        title=title.strip(),
        body=body,
        kind=kind,
        action=str(action).strip() if action else None,
        quiz=quiz,
    )


def _parse_quiz(name: str, raw: Any, alphabet: Optional[Collection[str]] = None) -> Quiz:
    if not isinstance(raw, dict):
        raise ConfigError(f"{name}: quiz scenes need a 'quiz' mapping")
    question = raw.get("question")
    if not question or not isinstance(question, str):
        raise ConfigError(f"{name}: quiz is missing 'question'")
    reward = raw.get("reward")
    if not reward:
        raise ConfigError(f"{name}: quiz is missing 'reward'")
    reward = str(reward).strip()
    if alphabet is not None and reward not in alphabet:
        raise ConfigError(f"{name}: quiz reward {reward!r} is not a known token")
    choices = [
        QuizChoice(text=str(item.get("text", "")).strip(), correct=bool(item.get("correct", False)))
        for item in raw.get("choices") or []
        if isinstance(item, dict)
    ]
    if len(choices) < 2:
        raise ConfigError(f"{name}: quiz needs at least two choices")
    if not any(choice.correct for choice in choices):
        raise ConfigError(f"{name}: quiz has no correct choice")
    return Quiz(question=question.strip(), choices=tuple(choices), reward=reward)


__all__ = ["Scene", "SceneRepository", "SCENE_KINDS"]
