"""Shared widgets: background, cards, collected-notes strip, reward toast, confetti."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional

from PySide6.QtCore import QElapsedTimer, QPoint, QRectF, Qt, QTimer
from PySide6.QtGui import QColor, QLinearGradient, QPainter, QRadialGradient
from PySide6.QtWidgets import (
    QFrame,
    QGraphicsDropShadowEffect,
    QHBoxLayout,
    QLabel,
    QVBoxLayout,
    QWidget,
)

from melodyquest.ui.colors import QuestColors


class StageBackground(QWidget):
    """Gradient background with soft spotlight glows."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)

        gradient = QLinearGradient(0, 0, self.width(), self.height())
        gradient.setColorAt(0.0, QColor(QuestColors.BG_TOP))
        gradient.setColorAt(0.5, QColor(QuestColors.BG_MIDDLE))
        gradient.setColorAt(1.0, QColor(QuestColors.BG_BOTTOM))
        painter.fillRect(self.rect(), gradient)

        painter.setPen(Qt.NoPen)
        for x_ratio, y_ratio, radius in ((0.85, 0.15, 220), (0.12, 0.82, 170)):
            glow = QRadialGradient(self.width() * x_ratio, self.height() * y_ratio, radius)
            glow.setColorAt(0, QColor(255, 255, 255, 70))
            glow.setColorAt(1, QColor(255, 255, 255, 0))
            painter.setBrush(glow)
            painter.drawEllipse(QPoint(int(self.width() * x_ratio), int(self.height() * y_ratio)), radius, radius)

        # faint notes in the corners
        painter.setOpacity(0.07)
        font = painter.font()
        font.setPointSize(90)
        font.setBold(True)
        painter.setFont(font)
        painter.setPen(QColor(QuestColors.PRIMARY_DARK))
        for glyph, x_ratio, y_ratio in (("♪", 0.08, 0.22), ("♫", 0.86, 0.35), ("♩", 0.14, 0.8)):
            painter.drawText(int(self.width() * x_ratio), int(self.height() * y_ratio), glyph)
        painter.end()


class GlassCard(QFrame):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("glassCard")
        self.setStyleSheet(
            f"""
            QFrame#glassCard {{
                background: {QuestColors.CARD_BG};
                border: 1px solid {QuestColors.CARD_BORDER};
                border-radius: 20px;
            }}
            """
        )
        shadow = QGraphicsDropShadowEffect(self)
        shadow.setBlurRadius(30)
        shadow.setOffset(0, 8)
        shadow.setColor(QColor(60, 0, 80, 40))
        self.setGraphicsEffect(shadow)


class CollectedNotesBar(QWidget):
    """Row of pills, one per collected note, in collection order."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._layout = QHBoxLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.setSpacing(8)
        self._title = QLabel("Collected:")
        self._title.setStyleSheet(f"color: {QuestColors.TEXT_SECONDARY}; font-weight: 600;")
        self._layout.addWidget(self._title)
        self._pills: List[QLabel] = []
        self._layout.addStretch(1)

    def set_tokens(self, tokens: List[str]) -> None:
        for pill in self._pills:
            self._layout.removeWidget(pill)
            pill.deleteLater()
        self._pills = []
        for position, token in enumerate(tokens, start=1):
            pill = QLabel(token)
            pill.setAlignment(Qt.AlignCenter)
            pill.setFixedSize(34, 34)
            pill.setStyleSheet(
                f"""
                QLabel {{
                    background: {QuestColors.PRIMARY};
                    color: white;
                    border-radius: 17px;
                    font-weight: 800;
                }}
                """
            )
            self._layout.insertWidget(position, pill)
            self._pills.append(pill)

    def tokens(self) -> List[str]:
        return [pill.text() for pill in self._pills]


class RewardToast(QFrame):
    """Short-lived "You collected" card shown over the stage."""

    DURATION_MS = 1800

    def __init__(self, parent: QWidget) -> None:
        super().__init__(parent)
        self.setObjectName("rewardToast")
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.setStyleSheet(
            f"""
            QFrame#rewardToast {{
                background: white;
                border: 2px solid {QuestColors.PRIMARY_LIGHT};
                border-radius: 18px;
            }}
            """
        )
        layout = QVBoxLayout(self)
        layout.setContentsMargins(24, 16, 24, 16)
        self._symbol = QLabel("♪")
        self._symbol.setAlignment(Qt.AlignCenter)
        self._symbol.setStyleSheet(f"font-size: 42px; color: {QuestColors.PRIMARY};")
        self._text = QLabel("")
        self._text.setAlignment(Qt.AlignCenter)
        self._text.setStyleSheet(f"font-size: 18px; font-weight: 700; color: {QuestColors.TEXT_PRIMARY};")
        layout.addWidget(self._symbol)
        layout.addWidget(self._text)
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self.hide)
        self.hide()

    def show_token(self, token: str) -> None:
        self._text.setText(f"You collected: {token}")
        self.adjustSize()
        parent = self.parentWidget()
        if parent is not None:
            self.move((parent.width() - self.width()) // 2, int(parent.height() * 0.3))
        self.raise_()
        self.show()
        self._timer.start(self.DURATION_MS)


@dataclass
class _Piece:
    x: float
    y: float
    dx: float
    angle: float
    spin: float
    color: QColor


class ConfettiOverlay(QWidget):
    """Transparent overlay that drops a burst of confetti and clears itself."""

    LIFETIME_MS = 1400

    def __init__(self, parent: QWidget) -> None:
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground, True)
        self._pieces: List[_Piece] = []
        self._clock = QElapsedTimer()
        self._timer = QTimer(self)
        self._timer.setInterval(16)
        self._timer.timeout.connect(self._advance)
        self.hide()

    def burst(self, count: int = 26) -> None:
        parent = self.parentWidget()
        if parent is not None:
            self.setGeometry(parent.rect())
        width = max(self.width(), 1)
        height = max(self.height(), 1)
        self._pieces = [
            _Piece(
                x=width * (0.5 + random.uniform(-0.2, 0.2)),
                y=height * (0.3 + random.uniform(0.0, 0.05)),
                dx=random.uniform(-60, 60),
                angle=random.uniform(0, 360),
                spin=random.uniform(-360, 360),
                color=QColor(random.choice(QuestColors.CONFETTI)),
            )
            for _ in range(count)
        ]
        self._clock.start()
        self.raise_()
        self.show()
        self._timer.start()

    def _advance(self) -> None:
        if self._clock.elapsed() >= self.LIFETIME_MS:
            self._timer.stop()
            self._pieces = []
            self.hide()
            return
        self.update()

    def paintEvent(self, event) -> None:
        if not self._pieces:
            return
        t = self._clock.elapsed() / 1000.0
        fall = 420.0 * t * t
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.setPen(Qt.NoPen)
        painter.setOpacity(max(0.0, 1.0 - self._clock.elapsed() / self.LIFETIME_MS))
        for piece in self._pieces:
            painter.save()
            painter.translate(piece.x + piece.dx * t, piece.y + fall)
            painter.rotate(piece.angle + piece.spin * t)
            painter.setBrush(piece.color)
            painter.drawRect(QRectF(-4, -7, 8, 14))
            painter.restore()
        painter.end()
