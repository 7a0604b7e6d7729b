from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from melodyquest.core.errors import ConfigError
from melodyquest.core.ledger import LedgerPolicy
from melodyquest.core.qr import ShortLink

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_CONFIG_PATH = DATA_DIR / "deployment.yaml"

DEFAULT_TOKENS: Dict[str, float] = {
    "A": 440.0,
    "B": 494.0,
    "C": 523.25,
    "D": 587.33,
    "E": 659.25,
    "F": 698.46,
}


@dataclass(frozen=True)
class DeploymentConfig:
    """Per-deployment knobs for navigation, rewards and scanning."""

    navigation_ceiling: int = 6
    blocking_scenes: Tuple[int, ...] = (4,)
    scene_rewards: Mapping[int, str] = field(default_factory=dict)
    commit_threshold: int = 2
    ledger_policy: LedgerPolicy = LedgerPolicy.DEDUPE
    tokens: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_TOKENS))
    wheel_slices: Tuple[str, ...] = ("C",) * 6
    short_links: Tuple[ShortLink, ...] = ()

    @property
    def alphabet(self) -> Tuple[str, ...]:
        return tuple(self.tokens)

    def tone_for(self, token: str) -> float:
        return float(self.tokens.get(token, 440.0))


def load_config(path: Optional[Path] = None) -> DeploymentConfig:
    """Load deployment YAML; ``MELODYQUEST_CONFIG`` overrides the bundled file."""
    if path is None:
        override = os.environ.get("MELODYQUEST_CONFIG")
        path = Path(override) if override else DEFAULT_CONFIG_PATH
    if not path.exists():
        raise ConfigError(f"Deployment config not found: {path}")
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path.name}: expected a YAML mapping")
    return parse_config(raw, source=path.name)


def parse_config(raw: Mapping[str, Any], source: str = "config") -> DeploymentConfig:
    tokens = _parse_tokens(raw.get("tokens"), source)
    alphabet = set(tokens)

    def _token(value: Any, what: str) -> str:
        token = str(value).strip()
        if token not in alphabet:
            raise ConfigError(f"{source}: {what} uses unknown token {value!r}")
        return token

    ceiling = _int(raw.get("navigation_ceiling", 6), "navigation_ceiling", source)
    if ceiling < 0:
        raise ConfigError(f"{source}: navigation_ceiling must not be negative")

    blocking = tuple(
        _int(value, "blocking_scenes", source) for value in (raw.get("blocking_scenes", [4]) or [])
    )

    scene_rewards: Dict[int, str] = {}
    for scene, token in (raw.get("scene_rewards") or {}).items():
        index = _int(scene, "scene_rewards", source)
        scene_rewards[index] = _token(token, f"scene_rewards[{index}]")

    threshold = _int(raw.get("commit_threshold", 2), "commit_threshold", source)
    if threshold < 1:
        raise ConfigError(f"{source}: commit_threshold must be at least 1")

    try:
        policy = LedgerPolicy(str(raw.get("ledger_policy", LedgerPolicy.DEDUPE.value)).lower())
    except ValueError:
        raise ConfigError(f"{source}: ledger_policy must be 'dedupe' or 'append'") from None

    wheel = raw.get("wheel") or {}
    slices_raw: List[Any] = wheel.get("slices") or ["C"] * 6
    slices = tuple(_token(value, "wheel.slices") for value in slices_raw)

    links = []
    for entry in raw.get("short_links") or []:
        if not isinstance(entry, dict) or not entry.get("host") or not entry.get("path"):
            raise ConfigError(f"{source}: short_links entries need 'host', 'path' and 'scene'")
        links.append(
            ShortLink(
                host=str(entry["host"]).strip(),
                path=str(entry["path"]).strip(),
                scene=_int(entry.get("scene"), "short_links.scene", source),
            )
        )

    return DeploymentConfig(
        navigation_ceiling=ceiling,
        blocking_scenes=blocking,
        scene_rewards=scene_rewards,
        commit_threshold=threshold,
        ledger_policy=policy,
        tokens=tokens,
        wheel_slices=slices,
        short_links=tuple(links),
    )


def _parse_tokens(raw: Any, source: str) -> Dict[str, float]:
    if raw is None:
        return dict(DEFAULT_TOKENS)
    if not isinstance(raw, dict) or not raw:
        raise ConfigError(f"{source}: 'tokens' must map token letters to frequencies")
    tokens: Dict[str, float] = {}
    for key, value in raw.items():
        token = str(key).strip()
        if len(token) != 1:
            raise ConfigError(f"{source}: token {key!r} must be a single character")
        try:
            tokens[token] = float(value)
        except (TypeError, ValueError):
            raise ConfigError(f"{source}: token {token} needs a numeric frequency") from None
    return tokens


def _int(value: Any, what: str, source: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{source}: {what} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{source}: {what} must be an integer, got {value!r}") from None


__all__ = ["DeploymentConfig", "load_config", "parse_config", "DEFAULT_TOKENS", "DATA_DIR"]
