"""Short sine tones for collected notes."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from PySide6.QtCore import QBuffer, QByteArray, QIODevice, QObject
from PySide6.QtMultimedia import QAudio, QAudioFormat, QAudioSink, QMediaDevices

from melodyquest.core.tones import SAMPLE_RATE, synthesize_tone

logger = logging.getLogger(__name__)


class TonePlayer(QObject):
    """Plays the configured tone for a token through the default output device."""

    def __init__(self, tones: Mapping[str, float], parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._tones = dict(tones)
        self._sink: Optional[QAudioSink] = None
        self._buffer: Optional[QBuffer] = None
        self._format = QAudioFormat()
        self._format.setSampleRate(SAMPLE_RATE)
        self._format.setChannelCount(1)
        self._format.setSampleFormat(QAudioFormat.SampleFormat.Int16)

    def play(self, token: str, duration_ms: int = 600) -> None:
        device = QMediaDevices.defaultAudioOutput()
        if device.isNull():
            logger.info("No audio output; skipping tone for %s", token)
            return
        samples = synthesize_tone(self._tones.get(token, 440.0), duration_ms)
        self.stop()
        self._buffer = QBuffer(self)
        self._buffer.setData(QByteArray(samples.tobytes()))
        self._buffer.open(QIODevice.OpenModeFlag.ReadOnly)
        self._sink = QAudioSink(device, self._format, self)
        self._sink.stateChanged.connect(self._on_state_changed)
        self._sink.start(self._buffer)

    def stop(self) -> None:
        if self._sink is not None:
            self._sink.stop()
            self._sink.deleteLater()
            self._sink = None
        if self._buffer is not None:
            self._buffer.close()
            self._buffer.deleteLater()
            self._buffer = None

    def _on_state_changed(self, state) -> None:
        if state == QAudio.State.IdleState:
            self.stop()
