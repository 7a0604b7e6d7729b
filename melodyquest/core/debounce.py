from __future__ import annotations

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class DetectionDebouncer:
    """Stabilises per-frame QR decode results into one navigation.

    A text has to be seen ``commit_threshold`` times in a row before it is
    acted on, and after a commit every further observation is ignored until
    :meth:`reset`. Frames with nothing decoded do not break a streak.
    """

    def __init__(
        self,
        resolve: Callable[[str], Optional[int]],
        scene_count: int,
        commit_threshold: int = 2,
    ) -> None:
        if commit_threshold < 1:
            raise ValueError("commit_threshold must be at least 1")
        self._resolve = resolve
        self._scene_count = scene_count
        self._commit_threshold = commit_threshold
        self._last_text: Optional[str] = None
        self._consecutive_count = 0
        self._suppressed = False

    @property
    def commit_threshold(self) -> int:
        return self._commit_threshold

    @property
    def last_text(self) -> Optional[str]:
        return self._last_text

    @property
    def consecutive_count(self) -> int:
        return self._consecutive_count

    @property
    def suppressed(self) -> bool:
        return self._suppressed

    def observe(self, text: Optional[str]) -> Optional[int]:
        """Feed one decode result; return a scene index when a commit happens."""
        if self._suppressed or text is None:
            return None
        text = text.strip()
        if text == self._last_text:
            self._consecutive_count += 1
        else:
            self._last_text = text
            self._consecutive_count = 1

        if self._consecutive_count < self._commit_threshold:
            return None
        target = self._resolve(text)
        if target is None:
            return None
        if not 0 <= target < self._scene_count:
            logger.debug("Ignoring scan %r: scene %s out of range", text, target)
            return None
        self._suppressed = True
        logger.info("Committed scan %r -> scene %s", text, target)
        return target

    def reset(self) -> None:
        self._last_text = None
        self._consecutive_count = 0
        self._suppressed = False


__all__ = ["DetectionDebouncer"]
