"""Exception types shared by the Melody Quest core."""

from __future__ import annotations


class MelodyQuestError(Exception):
    """Base exception for all Melody Quest errors."""


class ConfigError(MelodyQuestError, ValueError):
    """Raised when deployment or scene YAML is invalid."""


class SceneOutOfRangeError(MelodyQuestError, ValueError):
    """Raised when a navigation target is outside the scene range."""

    def __init__(self, target: int, scene_count: int) -> None:
        self.target = target
        self.scene_count = scene_count
        super().__init__(f"Scene {target} is outside 0..{scene_count - 1}")


class PersistenceUnavailable(MelodyQuestError):
    """Raised by a storage backend when state cannot be written."""


class CaptureUnavailable(MelodyQuestError):
    """Raised when no camera or QR decoder can be used."""


class MalformedScanText(MelodyQuestError, ValueError):
    """Raised internally when scanned text is not a usable URL."""
