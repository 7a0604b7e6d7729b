"""Tests for melodyquest.core.capture – scoped camera sessions."""

from __future__ import annotations

from typing import List, Optional

import pytest

from melodyquest.core.capture import Camera, CaptureArena, CaptureSession, acquired
from melodyquest.core.debounce import DetectionDebouncer
from melodyquest.core.errors import CaptureUnavailable
from melodyquest.core.qr import QRTextResolver

SCENES = 8


class FakeCamera(Camera):
    """Replays a fixed list of decode results and counts acquire/release."""

    def __init__(self, frames: Optional[List[Optional[str]]] = None, available: bool = True) -> None:
        self.frames = list(frames or [])
        self.available = available
        self.acquired = 0
        self.released = 0
        self.fail_decode = False
        self.decode_error: Optional[Exception] = None

    @property
    def open_handles(self) -> int:
        return self.acquired - self.released

    def acquire(self) -> object:
        if not self.available:
            raise CaptureUnavailable("no camera")
        self.acquired += 1
        return object()

    def decode(self, handle: object) -> Optional[str]:
        if self.decode_error is not None:
            raise self.decode_error
        if self.fail_decode:
            raise CaptureUnavailable("camera unplugged")
        if not self.frames:
            return None
        return self.frames.pop(0)

    def release(self, handle: object) -> None:
        self.released += 1


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def navigated() -> List[int]:
    return []


@pytest.fixture()
def notices() -> List[str]:
    return []


def _arena(camera: FakeCamera, navigated: List[int], notices: List[str]) -> CaptureArena:
    return CaptureArena(
        camera,
        QRTextResolver(),
        SCENES,
        navigated.append,
        on_unavailable=notices.append,
    )


def _run(session: CaptureSession, limit: int = 20) -> int:
    ticks = 0
    while ticks < limit and session.tick():
        ticks += 1
    return ticks


# ---------------------------------------------------------------------------
# acquired()
# ---------------------------------------------------------------------------

class TestAcquired:
    def test_releases_on_error(self):
        camera = FakeCamera()
        with pytest.raises(RuntimeError):
            with acquired(camera):
                raise RuntimeError("boom")
        assert camera.open_handles == 0


# ---------------------------------------------------------------------------
# CaptureSession
# ---------------------------------------------------------------------------

class TestCaptureSession:
    def test_start_acquires(self, navigated: List[int], notices: List[str]):
        camera = FakeCamera()
        session = _arena(camera, navigated, notices).session(4)
        assert session.start() is True
        assert session.active
        assert camera.open_handles == 1

    def test_start_twice_acquires_once(self, navigated: List[int], notices: List[str]):
        camera = FakeCamera()
        session = _arena(camera, navigated, notices).session(4)
        session.start()
        session.start()
        assert camera.acquired == 1

    def test_commit_releases_before_navigating(self, notices: List[str]):
        camera = FakeCamera(["scene5", "scene5"])
        handles_at_navigation: List[int] = []

        def navigate(target: int) -> None:
            handles_at_navigation.append(camera.open_handles)

        arena = CaptureArena(camera, QRTextResolver(), SCENES, navigate, on_unavailable=notices.append)
        session = arena.session(4)
        session.start()
        _run(session)
        assert handles_at_navigation == [0]
        assert not session.active
        assert session.last_text == "scene5"

    def test_commit_navigates_once(self, navigated: List[int], notices: List[str]):
        camera = FakeCamera(["scene5", "scene5", "scene5", "scene5"])
        session = _arena(camera, navigated, notices).session(4)
        session.start()
        _run(session)
        assert navigated == [5]

    def test_out_of_range_keeps_scanning(self, navigated: List[int], notices: List[str]):
        camera = FakeCamera(["scene42"] * 5)
        session = _arena(camera, navigated, notices).session(4)
        session.start()
        assert _run(session, limit=5) == 5
        assert navigated == []
        assert session.active

    def test_stop_releases(self, navigated: List[int], notices: List[str]):
        camera = FakeCamera()
        session = _arena(camera, navigated, notices).session(4)
        session.start()
        session.stop()
        session.stop()
        assert camera.open_handles == 0
        assert camera.released == 1
        assert session.tick() is False

    def test_restart_resets_debouncer(self, navigated: List[int], notices: List[str]):
        camera = FakeCamera(["scene5"])
        session = _arena(camera, navigated, notices).session(4)
        session.start()
        session.tick()
        session.stop()
        camera.frames = ["scene5"]
        session.start()
        session.tick()
        assert navigated == []

    def test_unavailable_camera_disables(self, navigated: List[int], notices: List[str]):
        camera = FakeCamera(available=False)
        session = _arena(camera, navigated, notices).session(4)
        assert session.start() is False
        assert session.disabled
        assert notices == ["no camera"]
        assert session.start() is False

    def test_decode_failure_releases_and_disables(self, navigated: List[int], notices: List[str]):
        camera = FakeCamera()
        session = _arena(camera, navigated, notices).session(4)
        session.start()
        camera.fail_decode = True
        assert session.tick() is False
        assert session.disabled
        assert camera.open_handles == 0
        assert notices == ["camera unplugged"]

    def test_unexpected_decode_error_releases_camera(self, navigated: List[int], notices: List[str]):
        camera = FakeCamera()
        session = _arena(camera, navigated, notices).session(4)
        session.start()
        camera.decode_error = RuntimeError("driver crashed")
        with pytest.raises(RuntimeError):
            session.tick()
        assert camera.open_handles == 0
        assert not session.active
        assert not session.disabled
        assert notices == []
        assert session.tick() is False


# ---------------------------------------------------------------------------
# CaptureArena
# ---------------------------------------------------------------------------

class TestCaptureArena:
    def test_one_session_per_scene(self, navigated: List[int], notices: List[str]):
        arena = _arena(FakeCamera(), navigated, notices)
        assert arena.session(4) is arena.session(4)
        assert arena.session(4) is not arena.session(6)

    def test_sessions_have_own_debouncers(self, navigated: List[int], notices: List[str]):
        arena = _arena(FakeCamera(), navigated, notices)
        assert arena.session(4).debouncer is not arena.session(6).debouncer
        assert isinstance(arena.session(4).debouncer, DetectionDebouncer)

    def test_commit_threshold_passed_through(self, navigated: List[int]):
        arena = CaptureArena(FakeCamera(), QRTextResolver(), SCENES, navigated.append, commit_threshold=3)
        assert arena.session(4).debouncer.commit_threshold == 3

    def test_stop_all(self, navigated: List[int], notices: List[str]):
        camera = FakeCamera()
        arena = _arena(camera, navigated, notices)
        arena.session(4).start()
        arena.session(6).start()
        assert len(arena.active_sessions()) == 2
        arena.stop_all()
        assert arena.active_sessions() == []
        assert camera.open_handles == 0

    def test_unavailable_notice_shown_once(self, navigated: List[int], notices: List[str]):
        arena = _arena(FakeCamera(available=False), navigated, notices)
        arena.session(4).start()
        arena.session(6).start()
        assert notices == ["no camera"]
