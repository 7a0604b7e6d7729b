from __future__ import annotations

import logging
import os
from typing import Any, Optional

import cv2
import numpy as np

from melodyquest.core.capture import Camera
from melodyquest.core.errors import CaptureUnavailable

logger = logging.getLogger(__name__)


def default_device_index() -> int:
    try:
        return int(os.environ.get("MELODYQUEST_CAMERA", "0"))
    except ValueError:
        return 0


class OpenCVCamera(Camera):
    """Webcam capture with OpenCV's built-in QR detector.

    ``last_frame`` keeps the most recent BGR frame for preview.
    """

    def __init__(self, device_index: Optional[int] = None) -> None:
        self._device_index = default_device_index() if device_index is None else device_index
        self._detector = cv2.QRCodeDetector()
        self.last_frame: Optional[np.ndarray] = None

    def acquire(self) -> Any:
        capture = cv2.VideoCapture(self._device_index)
        if not capture.isOpened():
            capture.release()
            raise CaptureUnavailable(f"Unable to open camera {self._device_index}")
        logger.info("Opened camera %s", self._device_index)
        return capture

    def decode(self, handle: Any) -> Optional[str]:
        ok, frame = handle.read()
        if not ok or frame is None:
            return None
        self.last_frame = frame
        try:
            text, _points, _straight = self._detector.detectAndDecode(frame)
        except cv2.error as e:
            logger.debug("QR decode failed: %s", e)
            return None
        text = (text or "").strip()
        return text or None

    def release(self, handle: Any) -> None:
        handle.release()
        self.last_frame = None
        logger.info("Released camera %s", self._device_index)
