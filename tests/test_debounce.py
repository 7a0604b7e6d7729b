"""Tests for melodyquest.core.debounce – QR detection debouncing."""

from __future__ import annotations

import pytest

from melodyquest.core.debounce import DetectionDebouncer
from melodyquest.core.qr import QRTextResolver


@pytest.fixture()
def debouncer() -> DetectionDebouncer:
    return DetectionDebouncer(QRTextResolver(), scene_count=8)


class TestDetectionDebouncer:
    def test_single_frame_does_not_commit(self, debouncer: DetectionDebouncer):
        assert debouncer.observe("scene5") is None
        assert debouncer.consecutive_count == 1

    def test_two_identical_frames_commit(self, debouncer: DetectionDebouncer):
        debouncer.observe("scene5")
        assert debouncer.observe("scene5") == 5
        assert debouncer.suppressed

    def test_different_text_restarts_streak(self, debouncer: DetectionDebouncer):
        debouncer.observe("scene5")
        assert debouncer.observe("scene6") is None
        assert debouncer.last_text == "scene6"
        assert debouncer.consecutive_count == 1

    def test_empty_frames_do_not_break_streak(self, debouncer: DetectionDebouncer):
        debouncer.observe("scene5")
        assert debouncer.observe(None) is None
        assert debouncer.observe("scene5") == 5

    def test_whitespace_is_trimmed(self, debouncer: DetectionDebouncer):
        debouncer.observe(" scene5")
        assert debouncer.observe("scene5 ") == 5

    def test_suppressed_after_commit(self, debouncer: DetectionDebouncer):
        debouncer.observe("scene5")
        debouncer.observe("scene5")
        assert debouncer.observe("scene5") is None
        assert debouncer.observe("scene6") is None

    def test_alternating_texts_never_commit(self, debouncer: DetectionDebouncer):
        for _ in range(5):
            assert debouncer.observe("scene2") is None
            assert debouncer.observe("scene3") is None
        assert not debouncer.suppressed

    def test_out_of_range_never_commits(self, debouncer: DetectionDebouncer):
        for _ in range(5):
            assert debouncer.observe("scene42") is None
        assert not debouncer.suppressed

    def test_unresolvable_never_commits(self, debouncer: DetectionDebouncer):
        for _ in range(3):
            assert debouncer.observe("hello world") is None

    def test_reset_clears_suppression(self, debouncer: DetectionDebouncer):
        debouncer.observe("scene5")
        debouncer.observe("scene5")
        debouncer.reset()
        assert debouncer.last_text is None
        assert debouncer.consecutive_count == 0
        debouncer.observe("scene7")
        assert debouncer.observe("scene7") == 7

    def test_custom_threshold(self):
        debouncer = DetectionDebouncer(QRTextResolver(), scene_count=8, commit_threshold=3)
        assert debouncer.observe("scene2") is None
        assert debouncer.observe("scene2") is None
        assert debouncer.observe("scene2") == 2

    def test_threshold_of_one(self):
        debouncer = DetectionDebouncer(QRTextResolver(), scene_count=8, commit_threshold=1)
        assert debouncer.observe("scene3") == 3

    def test_invalid_threshold(self):
        with pytest.raises(ValueError):
            DetectionDebouncer(QRTextResolver(), scene_count=8, commit_threshold=0)
