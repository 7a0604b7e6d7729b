"""Scene progression state machine and reward bookkeeping."""

from __future__ import annotations

import logging
import random
import threading
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from melodyquest.core.config import DeploymentConfig
from melodyquest.core.errors import ConfigError, SceneOutOfRangeError
from melodyquest.core.ledger import CompletionFlags, RewardLedger
from melodyquest.core.quiz import Quiz, QuizOutcome
from melodyquest.core.storage import KeyValueStore, write_through
from melodyquest.core.wheel import WheelOutcomeResolver, WheelState, spin_delta

logger = logging.getLogger(__name__)

STAGE_KEY = "mq-stage"
SPUN_KEY = "mq-spun"
REWARD_FLAG_PREFIX = "mq-reward-"
QUIZ_FLAG_PREFIX = "mq-quiz-"


@dataclass
class ProgressionState:
    current_scene: int = 0


class Presenter:
    """Side effects the controller asks for. Every hook defaults to a no-op."""

    def render_scene(self, index: int) -> None:
        pass

    def set_back_enabled(self, enabled: bool) -> None:
        pass

    def set_forward_enabled(self, enabled: bool) -> None:
        pass

    def play_tone(self, token: str) -> None:
        pass

    def show_reward(self, token: str) -> None:
        pass

    def celebrate(self) -> None:
        pass

    def show_collected(self, tokens: List[str]) -> None:
        pass

    def on_reset(self) -> None:
        pass

    def show_notice(self, message: str) -> None:
        pass


def parse_scene_index(raw: Optional[str], scene_count: int) -> int:
    """Restore a persisted scene index, falling back to 0 when unusable."""
    if raw is None:
        return 0
    try:
        index = int(str(raw).strip())
    except ValueError:
        logger.warning("Ignoring persisted scene %r: not an integer", raw)
        return 0
    if not 0 <= index < scene_count:
        logger.warning("Ignoring persisted scene %s: outside 0..%s", index, scene_count - 1)
        return 0
    return index


class ProgressionController:
    """Owns the current scene, the reward ledger, completion flags and the wheel.

    All state changes go through this class and are written through to the
    injected :class:`KeyValueStore`. Storage failures are logged and the
    session carries on in memory.
    """

    def __init__(
        self,
        scene_count: int,
        store: KeyValueStore,
        config: Optional[DeploymentConfig] = None,
        *,
        presenter: Optional[Presenter] = None,
        quizzes: Optional[Mapping[int, Quiz]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        if scene_count <= 0:
            raise ValueError("scene_count must be positive")
        self._scene_count = scene_count
        self._store = store
        self._config = config or DeploymentConfig()
        self._presenter = presenter or Presenter()
        self._quizzes: Dict[int, Quiz] = dict(quizzes or {})
        for scene, quiz in self._quizzes.items():
            if quiz.reward not in self._config.alphabet:
                raise ConfigError(f"Scene {scene}: quiz reward {quiz.reward!r} is not a known token")
        self._rng = rng or random.Random()
        self._lock = threading.RLock()
        self._granting: set[str] = set()

        self._ledger = RewardLedger(store, self._config.alphabet, self._config.ledger_policy)
        self._reward_flags = CompletionFlags(store, REWARD_FLAG_PREFIX)
        self._quiz_flags = CompletionFlags(store, QUIZ_FLAG_PREFIX)
        self._wheel = WheelState()
        self._wheel_resolver = WheelOutcomeResolver(self._config.wheel_slices)
        self._state = ProgressionState()
        self.initialize()

    # -- state ------------------------------------------------------------

    @property
    def scene_count(self) -> int:
        return self._scene_count

    @property
    def current_scene(self) -> int:
        return self._state.current_scene

    @property
    def config(self) -> DeploymentConfig:
        return self._config

    @property
    def presenter(self) -> Presenter:
        return self._presenter

    @presenter.setter
    def presenter(self, presenter: Optional[Presenter]) -> None:
        self._presenter = presenter or Presenter()

    @property
    def collected(self) -> List[str]:
        return self._ledger.tokens

    @property
    def ledger(self) -> RewardLedger:
        return self._ledger

    @property
    def wheel(self) -> WheelState:
        return self._wheel

    @property
    def wheel_resolver(self) -> WheelOutcomeResolver:
        return self._wheel_resolver

    @property
    def navigation_ceiling(self) -> int:
        return min(self._config.navigation_ceiling, self._scene_count - 1)

    def reward_granted(self, scene: int) -> bool:
        return self._reward_flags.is_set(scene)

    def quiz_completed(self, scene: int) -> bool:
        return self._quiz_flags.is_set(scene)

    def initialize(self) -> ProgressionState:
        """Rehydrate every piece of state from the store."""
        with self._lock:
            self._state = ProgressionState(
                current_scene=parse_scene_index(self._store.get(STAGE_KEY), self._scene_count)
            )
            self._ledger.load()
            self._reward_flags.load(self._scene_count)
            self._quiz_flags.load(self._scene_count)
            self._wheel = WheelState(spun=self._store.get(SPUN_KEY) == "1")
            logger.debug(
                "Restored scene %s, ledger %s, wheel spun=%s",
                self._state.current_scene,
                self._ledger.tokens,
                self._wheel.spun,
            )
            return ProgressionState(self._state.current_scene)

    def snapshot(self) -> Dict[str, object]:
        return {
            "scene": self._state.current_scene,
            "collected": self._ledger.tokens,
            "rewardFlags": sorted(self._reward_flags.as_dict()),
            "quizFlags": sorted(self._quiz_flags.as_dict()),
            "wheel": {
                "rotation": self._wheel.cumulative_rotation,
                "spun": self._wheel.spun,
            },
        }

    # -- navigation -------------------------------------------------------

    def navigate_to(self, target: int) -> int:
        """Show scene ``target`` and run its one-time reward rule.

        Raises :class:`SceneOutOfRangeError` without touching any state when
        ``target`` is not a valid scene.
        """
        if isinstance(target, bool) or not isinstance(target, int):
            raise TypeError(f"Scene index must be an int, got {target!r}")
        with self._lock:
            if not 0 <= target < self._scene_count:
                logger.warning("Rejected navigation to scene %s", target)
                raise SceneOutOfRangeError(target, self._scene_count)
            self._state.current_scene = target
            write_through(self._store, STAGE_KEY, str(target))
            logger.info("Scene %s", target)
            self._presenter.render_scene(target)
            self._refresh_navigation()
            self._grant_scene_reward(target)
            return target

    def show_current(self) -> int:
        return self.navigate_to(self._state.current_scene)

    def step(self, delta: int) -> int:
        target = max(0, min(self._state.current_scene + delta, self.navigation_ceiling))
        return self.navigate_to(target)

    def can_go_back(self) -> bool:
        return self._state.current_scene > 0

    def can_go_forward(self) -> bool:
        current = self._state.current_scene
        if current in self._config.blocking_scenes:
            return False
        return current < self.navigation_ceiling

    def debug_jump(self, value: object) -> Optional[int]:
        """Developer entry point: jump anywhere valid, ignoring forward gating."""
        try:
            target = int(str(value).strip())
        except ValueError:
            logger.warning("debug_jump ignored non-integer %r", value)
            return None
        try:
            return self.navigate_to(target)
        except SceneOutOfRangeError as e:
            logger.warning("debug_jump ignored: %s", e)
            return None

    def _refresh_navigation(self) -> None:
        self._presenter.set_back_enabled(self.can_go_back())
        self._presenter.set_forward_enabled(self.can_go_forward())

    # -- rewards ----------------------------------------------------------

    def grant_reward(self, token: str) -> bool:
        """Collect ``token`` and trigger the reward presentation.

        Returns True when the ledger gained an entry.
        """
        with self._lock:
            if not self._ledger.accepts(token):
                logger.warning("Ignoring reward of unknown token %r", token)
                return False
            self._presenter.play_tone(token)
            added = self._ledger.add(token)
            self._presenter.show_reward(token)
            if added:
                self._presenter.show_collected(self._ledger.tokens)
                self._presenter.celebrate()
            logger.info("Reward %s (%s)", token, "new" if added else "already collected")
            return added

    def _grant_scene_reward(self, scene: int) -> bool:
        token = self._config.scene_rewards.get(scene)
        if token is None:
            return False
        return self._grant_once(self._reward_flags, scene, token)

    def _grant_once(self, flags: CompletionFlags, scene: int, token: str) -> bool:
        guard = flags.key(scene)
        if flags.is_set(scene) or guard in self._granting or not self._ledger.accepts(token):
            return False
        self._granting.add(guard)
        try:
            self.grant_reward(token)
            flags.set(scene)
        finally:
            self._granting.discard(guard)
        return True

    # -- wheel ------------------------------------------------------------

    def spin(self) -> Optional[float]:
        """Start a spin and return the new cumulative rotation to animate to.

        Returns None while a spin is in flight or after the wheel has been used.
        """
        with self._lock:
            if not self._wheel.can_spin():
                return None
            self._wheel.cumulative_rotation += spin_delta(self._rng)
            self._wheel.spinning = True
            return self._wheel.cumulative_rotation

    def complete_spin(self) -> Optional[str]:
        """Resolve the settled wheel, lock it and grant the slice's token."""
        with self._lock:
            if not self._wheel.spinning:
                return None
            token = self._wheel_resolver.resolve(self._wheel.cumulative_rotation)
            self._wheel.spinning = False
            self._wheel.spun = True
            self.grant_reward(token)
            write_through(self._store, SPUN_KEY, "1")
            return token

    # -- quizzes ----------------------------------------------------------

    def quiz(self, scene: int) -> Optional[Quiz]:
        return self._quizzes.get(scene)

    def answer_quiz(self, scene: int, choice_index: int) -> QuizOutcome:
        with self._lock:
            quiz = self._quizzes.get(scene)
            if quiz is None:
                raise KeyError(f"Scene {scene} has no quiz")
            if not quiz.is_correct(choice_index):
                return QuizOutcome(correct=False)
            if self._quiz_flags.is_set(scene):
                return QuizOutcome(correct=True, already_completed=True)
            granted = self._grant_once(self._quiz_flags, scene, quiz.reward)
            return QuizOutcome(correct=True, granted=granted)

    # -- reset ------------------------------------------------------------

    def reset(self) -> None:
        """Forget collected notes, completion flags and the wheel lock."""
        with self._lock:
            self._ledger.clear()
            self._reward_flags.clear(self._scene_count)
            self._quiz_flags.clear(self._scene_count)
            self._wheel.reset()
            write_through(self._store, SPUN_KEY, None)
            logger.info("Progress reset on scene %s", self._state.current_scene)
            self._presenter.show_collected([])
            self._presenter.on_reset()


__all__ = [
    "Presenter",
    "ProgressionController",
    "ProgressionState",
    "parse_scene_index",
    "STAGE_KEY",
    "SPUN_KEY",
]
