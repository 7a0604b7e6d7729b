"""Camera scan sessions for scenes that jump by QR code."""

from __future__ import annotations

import logging
from contextlib import ExitStack, contextmanager
from typing import Any, Callable, Dict, Iterator, Optional

from melodyquest.core.debounce import DetectionDebouncer
from melodyquest.core.errors import CaptureUnavailable

logger = logging.getLogger(__name__)


class Camera:
    """Abstract capture device that yields decoded QR text per frame."""

    def acquire(self) -> Any:  # pragma: no cover - interface
        raise NotImplementedError

    def decode(self, handle: Any) -> Optional[str]:  # pragma: no cover - interface
        raise NotImplementedError

    def release(self, handle: Any) -> None:  # pragma: no cover - interface
        raise NotImplementedError


@contextmanager
def acquired(camera: Camera) -> Iterator[Any]:
    handle = camera.acquire()
    try:
        yield handle
    finally:
        camera.release(handle)


class CaptureSession:
    """One scan loop bound to one scene.

    ``start()`` acquires the camera, the host calls ``tick()`` once per
    displayed frame until it returns False, and ``stop()`` releases the camera.
    A committed detection stops the session before navigating.
    """

    def __init__(
        self,
        scene: int,
        camera: Camera,
        debouncer: DetectionDebouncer,
        navigate: Callable[[int], object],
        on_unavailable: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.scene = scene
        self._camera = camera
        self._debouncer = debouncer
        self._navigate = navigate
        self._on_unavailable = on_unavailable
        self._stack: Optional[ExitStack] = None
        self._handle: Any = None
        self._disabled = False
        self.last_text: Optional[str] = None

    @property
    def active(self) -> bool:
        return self._stack is not None

    @property
    def disabled(self) -> bool:
        return self._disabled

    @property
    def handle(self) -> Any:
        return self._handle

    @property
    def debouncer(self) -> DetectionDebouncer:
        return self._debouncer

    def start(self) -> bool:
        """Acquire the camera; return True while the session is scanning."""
        if self._disabled or self.active:
            return self.active
        self._debouncer.reset()
        self.last_text = None
        stack = ExitStack()
        try:
            self._handle = stack.enter_context(acquired(self._camera))
        except CaptureUnavailable as e:
            self._disable(str(e))
            return False
        self._stack = stack
        logger.info("Scene %s: camera scan started", self.scene)
        return True

    def tick(self) -> bool:
        """Process at most one frame; return True if the host should reschedule."""
        if not self.active:
            return False
        try:
            text = self._camera.decode(self._handle)
            if text:
                self.last_text = text
            target = self._debouncer.observe(text)
        except CaptureUnavailable as e:
            self.stop()
            self._disable(str(e))
            return False
        except Exception:
            # release the camera before the error leaves the scan loop
            self.stop()
            raise
        if target is None:
            return True
        self.stop()
        self._navigate(target)
        return False

    def stop(self) -> None:
        if self._stack is None:
            return
        stack, self._stack = self._stack, None
        self._handle = None
        self._debouncer.reset()
        stack.close()
        logger.info("Scene %s: camera scan stopped", self.scene)

    def _disable(self, message: str) -> None:
        self._disabled = True
        logger.warning("Scene %s: camera unavailable: %s", self.scene, message)
        if self._on_unavailable is not None:
            self._on_unavailable(message)


class CaptureArena:
    """Creates and owns one :class:`CaptureSession` per camera scene."""

    def __init__(
        self,
        camera: Camera,
        resolve: Callable[[str], Optional[int]],
        scene_count: int,
        navigate: Callable[[int], object],
        *,
        commit_threshold: int = 2,
        on_unavailable: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._camera = camera
        self._resolve = resolve
        self._scene_count = scene_count
        self._navigate = navigate
        self._commit_threshold = commit_threshold
        self._on_unavailable = on_unavailable
        self._notified = False
        self._sessions: Dict[int, CaptureSession] = {}

    def session(self, scene: int) -> CaptureSession:
        session = self._sessions.get(scene)
        if session is None:
            debouncer = DetectionDebouncer(self._resolve, self._scene_count, self._commit_threshold)
            session = CaptureSession(
                scene,
                self._camera,
                debouncer,
                self._navigate,
                on_unavailable=self._notify_once,
            )
            self._sessions[scene] = session
        return session

    def active_sessions(self) -> list[CaptureSession]:
        return [session for session in self._sessions.values() if session.active]

    def stop_all(self) -> None:
        for session in self._sessions.values():
            session.stop()

    def _notify_once(self, message: str) -> None:
        if self._notified:
            return
        self._notified = True
        if self._on_unavailable is not None:
            self._on_unavailable(message)


__all__ = ["Camera", "CaptureArena", "CaptureSession", "acquired"]
