"""Spin wheel geometry and state."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Sequence

POINTER_ANGLE = -90.0
FIRST_CENTER = -60.0
MIN_FULL_TURNS = 6
EXTRA_TURNS = 3


def normalize(angle: float) -> float:
    """Wrap ``angle`` into [0, 360)."""
    wrapped = angle % 360.0
    return 0.0 if wrapped == 360.0 else wrapped


def slice_center(index: int, slice_count: int = 6) -> float:
    step = 360.0 / slice_count
    return normalize(FIRST_CENTER + step * index)


def circular_distance(a: float, b: float) -> float:
    diff = abs(a - b)
    return min(diff, 360.0 - diff)


def resolve_slice(cumulative_rotation: float, slice_count: int = 6) -> int:
    """Index of the slice under the pointer after rotating the wheel.

    The pointer sits at -90 degrees, so the slice whose center satisfies
    ``center + rot == -90 (mod 360)`` wins. Ties go to the lower index.
    """
    if slice_count <= 0:
        raise ValueError("slice_count must be positive")
    rot = normalize(cumulative_rotation)
    target = normalize(POINTER_ANGLE - rot)
    best_index = 0
    best_diff = 360.0
    for i in range(slice_count):
        diff = circular_distance(slice_center(i, slice_count), target)
        if diff < best_diff:
            best_diff = diff
            best_index = i
    return best_index


def spin_delta(rng: Optional[random.Random] = None) -> float:
    """Degrees added by one spin: at least six full turns plus a random offset."""
    rng = rng or random
    return (MIN_FULL_TURNS + rng.randrange(EXTRA_TURNS)) * 360.0 + rng.random() * 360.0


class WheelOutcomeResolver:
    """Maps a cumulative rotation to the reward token printed on that slice."""

    def __init__(self, slices: Sequence[str]) -> None:
        if not slices:
            raise ValueError("a wheel needs at least one slice")
        self._slices = tuple(slices)

    @property
    def slice_count(self) -> int:
        return len(self._slices)

    @property
    def slices(self) -> Sequence[str]:
        return self._slices

    def slice_index(self, cumulative_rotation: float) -> int:
        return resolve_slice(cumulative_rotation, len(self._slices))

    def resolve(self, cumulative_rotation: float) -> str:
        return self._slices[self.slice_index(cumulative_rotation)]


@dataclass
class WheelState:
    """Rotation accumulator plus the persisted "already spun" lock."""

    cumulative_rotation: float = 0.0
    spun: bool = False
    spinning: bool = False

    def can_spin(self) -> bool:
        return not self.spun and not self.spinning

    def reset(self) -> None:
        self.cumulative_rotation = 0.0
        self.spun = False
        self.spinning = False


__all__ = [
    "WheelOutcomeResolver",
    "WheelState",
    "circular_distance",
    "normalize",
    "resolve_slice",
    "slice_center",
    "spin_delta",
]
