"""Spin wheel drawing and rotation animation."""

from __future__ import annotations

from typing import Optional, Sequence

from PySide6.QtCore import Property, QEasingCurve, QPointF, QPropertyAnimation, QRectF, Qt, Signal
from PySide6.QtGui import QColor, QPainter, QPainterPath, QPen, QPolygonF
from PySide6.QtWidgets import QSizePolicy, QWidget

from melodyquest.core.wheel import slice_center
from melodyquest.ui.colors import QuestColors, slice_color

SPIN_DURATION_MS = 4000


class WheelWidget(QWidget):
    """Wheel of note slices with a fixed pointer at the top.

    Slice ``i`` is centered at ``-60 + 60*i`` degrees (clockwise from the
    +x axis, screen coordinates) before rotation; ``rotation`` turns the whole
    wheel clockwise. ``settled`` fires when a spin animation ends.
    """

    settled = Signal()

    def __init__(self, slices: Sequence[str], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._slices = list(slices)
        self._rotation = 0.0
        self.setMinimumSize(260, 260)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self._animation = QPropertyAnimation(self, b"rotation", self)
        self._animation.setDuration(SPIN_DURATION_MS)
        self._animation.setEasingCurve(QEasingCurve.OutCubic)
        self._animation.finished.connect(self.settled.emit)

    def _get_rotation(self) -> float:
        return self._rotation

    def _set_rotation(self, value: float) -> None:
        self._rotation = float(value)
        self.update()

    rotation = Property(float, _get_rotation, _set_rotation)

    def spin_to(self, rotation: float) -> None:
        self._animation.stop()
        self._animation.setStartValue(self._rotation)
        self._animation.setEndValue(float(rotation))
        self._animation.start()

    def reset(self) -> None:
        self._animation.stop()
        self._set_rotation(0.0)

    def paintEvent(self, event) -> None:
        side = min(self.width(), self.height()) - 24
        if side <= 0 or not self._slices:
            return
        cx, cy = self.width() / 2.0, self.height() / 2.0 + 8
        radius = side / 2.0
        step = 360.0 / len(self._slices)

        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.save()
        painter.translate(cx, cy)
        painter.rotate(self._rotation)
        box = QRectF(-radius, -radius, 2 * radius, 2 * radius)
        for i, token in enumerate(self._slices):
            center = slice_center(i, len(self._slices))
            path = QPainterPath()
            path.moveTo(0, 0)
            # Qt angles run counter-clockwise, screen rotation runs clockwise
            path.arcTo(box, -(center - step / 2.0), -step)
            path.closeSubpath()
            painter.setPen(QPen(QColor("white"), 3))
            painter.setBrush(QColor(slice_color(i)))
            painter.drawPath(path)

            painter.save()
            painter.rotate(center)
            painter.translate(radius * 0.65, 0)
            painter.rotate(90)
            painter.setPen(QColor(QuestColors.TEXT_PRIMARY))
            font = painter.font()
            font.setPointSize(max(12, int(radius / 7)))
            font.setBold(True)
            painter.setFont(font)
            painter.drawText(QRectF(-30, -20, 60, 40), Qt.AlignCenter, token)
            painter.restore()
        painter.setBrush(QColor(QuestColors.PRIMARY))
        painter.setPen(Qt.NoPen)
        painter.drawEllipse(QPointF(0, 0), radius * 0.12, radius * 0.12)
        painter.restore()

        pointer = QPolygonF(
            [
                QPointF(cx - 14, cy - radius - 12),
                QPointF(cx + 14, cy - radius - 12),
                QPointF(cx, cy - radius + 14),
            ]
        )
        painter.setBrush(QColor(QuestColors.PRIMARY_DARK))
        painter.drawPolygon(pointer)
        painter.end()
