"""One page per scene kind: story, wheel, camera and quiz."""

from __future__ import annotations

from typing import List, Optional, Sequence

from PySide6.QtCore import Qt, QTimer, Signal
from PySide6.QtGui import QImage, QPixmap
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from melodyquest.core.scenes import Scene
from melodyquest.ui.colors import QuestColors
from melodyquest.ui.wheel_widget import WheelWidget

RETRY_DELAY_MS = 1500


def _primary_button_style() -> str:
    return f"""
        QPushButton {{
            background: qlineargradient(x1:0, y1:0, x2:1, y2:1,
                stop:0 {QuestColors.PRIMARY_LIGHT}, stop:1 {QuestColors.PRIMARY});
            color: white;
            padding: 12px 28px;
            border: none;
            border-radius: 14px;
            font-weight: 700;
            font-size: 16px;
        }}
        QPushButton:disabled {{
            background: #cfc4d4;
            color: #f5f0f7;
        }}
    """


def _choice_style(background: str = "white", color: str = QuestColors.TEXT_PRIMARY) -> str:
    return f"""
        QPushButton {{
            background: {background};
            color: {color};
            padding: 12px 20px;
            border: 1px solid #e0d4e6;
            border-radius: 12px;
            font-weight: 600;
            font-size: 15px;
        }}
    """


class ScenePage(QWidget):
    """Title, body text and an optional button that advances one scene."""

    advance = Signal()

    def __init__(self, scene: Scene, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.scene = scene
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(32, 24, 32, 24)
        self._layout.setSpacing(18)

        title = QLabel(scene.title)
        title.setAlignment(Qt.AlignCenter)
        title.setStyleSheet(f"font-size: 30px; font-weight: 900; color: {QuestColors.PRIMARY_DARK};")
        body = QLabel(scene.body)
        body.setWordWrap(True)
        body.setAlignment(Qt.AlignCenter)
        body.setStyleSheet(f"font-size: 17px; color: {QuestColors.TEXT_SECONDARY};")
        self._layout.addWidget(title)
        self._layout.addWidget(body)

        self.primary_button: Optional[QPushButton] = None
        if scene.wires_primary_action:
            self.primary_button = QPushButton(scene.action)
            self.primary_button.setStyleSheet(_primary_button_style())
            self.primary_button.clicked.connect(self.advance.emit)

        self._content = QVBoxLayout()
        self._content.setSpacing(14)
        self._layout.addLayout(self._content, stretch=1)
        self._layout.addStretch(1)
        if self.primary_button is not None:
            self._layout.addWidget(self.primary_button, alignment=Qt.AlignCenter)

    def on_reset(self) -> None:
        pass


class WheelPage(ScenePage):
    spin_requested = Signal()
    spin_settled = Signal()

    def __init__(self, scene: Scene, slices: Sequence[str], parent: Optional[QWidget] = None) -> None:
        super().__init__(scene, parent)
        self.wheel = WheelWidget(slices)
        self.wheel.settled.connect(self.spin_settled.emit)
        self.spin_button = QPushButton(self.scene.action or "Spin")
        self.spin_button.setStyleSheet(_primary_button_style())
        self.spin_button.clicked.connect(self.spin_requested.emit)
        self.result_label = QLabel("")
        self.result_label.setAlignment(Qt.AlignCenter)
        self.result_label.setStyleSheet(f"font-size: 20px; font-weight: 700; color: {QuestColors.PRIMARY};")
        self._content.addWidget(self.wheel, stretch=1)
        self._content.addWidget(self.spin_button, alignment=Qt.AlignCenter)
        self._content.addWidget(self.result_label)

    def start_spin(self, rotation: float) -> None:
        self.result_label.setText("")
        self.spin_button.setEnabled(False)
        self.wheel.spin_to(rotation)

    def show_result(self, token: str) -> None:
        self.result_label.setText(f"You won: {token}")

    def set_locked(self, locked: bool) -> None:
        self.spin_button.setEnabled(not locked)

    def on_reset(self) -> None:
        self.wheel.reset()
        self.result_label.setText("")
        self.spin_button.setEnabled(True)


class CameraPage(ScenePage):
    open_requested = Signal()
    stop_requested = Signal()

    def __init__(self, scene: Scene, parent: Optional[QWidget] = None) -> None:
        super().__init__(scene, parent)
        self.preview = QLabel("")
        self.preview.setAlignment(Qt.AlignCenter)
        self.preview.setMinimumSize(320, 240)
        self.preview.setStyleSheet("background: rgba(0, 0, 0, 0.08); border-radius: 12px;")
        self.preview.hide()
        self.scan_label = QLabel("")
        self.scan_label.setAlignment(Qt.AlignCenter)
        self.scan_label.setWordWrap(True)
        self.scan_label.setStyleSheet(f"font-size: 15px; color: {QuestColors.TEXT_PRIMARY};")
        self.scan_label.hide()

        row = QHBoxLayout()
        self.open_button = QPushButton(self.scene.action or "Open camera")
        self.open_button.setStyleSheet(_primary_button_style())
        self.open_button.clicked.connect(self.open_requested.emit)
        self.stop_button = QPushButton("Stop camera")
        self.stop_button.setStyleSheet(_choice_style())
        self.stop_button.setEnabled(False)
        self.stop_button.clicked.connect(self.stop_requested.emit)
        row.addStretch(1)
        row.addWidget(self.open_button)
        row.addWidget(self.stop_button)
        row.addStretch(1)

        self._content.addWidget(self.preview, stretch=1)
        self._content.addWidget(self.scan_label)
        self._content.addLayout(row)

    def set_scanning(self, scanning: bool) -> None:
        self.open_button.setEnabled(not scanning)
        self.stop_button.setEnabled(scanning)
        self.preview.setVisible(scanning)
        if not scanning:
            self.preview.clear()
            self.scan_label.clear()
            self.scan_label.hide()

    def set_unavailable(self) -> None:
        self.set_scanning(False)
        self.open_button.setEnabled(False)

    def show_detection(self, text: str) -> None:
        self.scan_label.setText(f"<strong>QR Code Found:</strong><br>{text}")
        self.scan_label.show()

    def show_frame(self, frame) -> None:
        # frame is an OpenCV BGR array
        height, width = frame.shape[:2]
        image = QImage(frame.data, width, height, frame.strides[0], QImage.Format_BGR888).copy()
        pixmap = QPixmap.fromImage(image).scaled(
            self.preview.size(), Qt.KeepAspectRatio, Qt.SmoothTransformation
        )
        self.preview.setPixmap(pixmap)


class QuizPage(ScenePage):
    answered = Signal(int)

    def __init__(self, scene: Scene, parent: Optional[QWidget] = None) -> None:
        super().__init__(scene, parent)
        quiz = self.scene.quiz
        self.question_label = QLabel(quiz.question if quiz else "")
        self.question_label.setAlignment(Qt.AlignCenter)
        self.question_label.setWordWrap(True)
        self.question_label.setStyleSheet(f"font-size: 22px; font-weight: 800; color: {QuestColors.TEXT_PRIMARY};")
        self._content.addWidget(self.question_label)

        self.choice_buttons: List[QPushButton] = []
        for index, choice in enumerate(quiz.choices if quiz else ()):
            button = QPushButton(choice.text)
            button.setStyleSheet(_choice_style())
            button.clicked.connect(lambda _checked=False, i=index: self.answered.emit(i))
            self._content.addWidget(button)
            self.choice_buttons.append(button)

        self.feedback_label = QLabel("")
        self.feedback_label.setAlignment(Qt.AlignCenter)
        self.feedback_label.hide()
        self._content.addWidget(self.feedback_label)

        self._retry_timer = QTimer(self)
        self._retry_timer.setSingleShot(True)
        self._retry_timer.timeout.connect(self._reopen)

    def show_correct(self, choice_index: int) -> None:
        self._retry_timer.stop()
        self._set_choices_enabled(False)
        self.choice_buttons[choice_index].setStyleSheet(_choice_style(QuestColors.CORRECT, "#fff"))
        self.feedback_label.setText(f'<strong style="color:{QuestColors.CORRECT};">✓ Correct!</strong>')
        self.feedback_label.show()

    def show_incorrect(self, choice_index: int) -> None:
        self._set_choices_enabled(False)
        self.choice_buttons[choice_index].setStyleSheet(_choice_style(QuestColors.INCORRECT, "#fff"))
        self.feedback_label.setText(f'<strong style="color:{QuestColors.INCORRECT};">✗ Try again!</strong>')
        self.feedback_label.show()
        self._retry_timer.start(RETRY_DELAY_MS)

    def show_completed(self) -> None:
        quiz = self.scene.quiz
        if quiz is None:
            return
        for index, choice in enumerate(quiz.choices):
            if choice.correct:
                self.show_correct(index)
                return

    def on_reset(self) -> None:
        self._retry_timer.stop()
        self._reopen()

    def _reopen(self) -> None:
        for button in self.choice_buttons:
            button.setStyleSheet(_choice_style())
        self._set_choices_enabled(True)
        self.feedback_label.hide()
        self.feedback_label.clear()

    def _set_choices_enabled(self, enabled: bool) -> None:
        for button in self.choice_buttons:
            button.setEnabled(enabled)


def build_page(scene: Scene, wheel_slices: Sequence[str]) -> ScenePage:
    if scene.kind == "wheel":
        return WheelPage(scene, wheel_slices)
    if scene.kind == "camera":
        return CameraPage(scene)
    if scene.kind == "quiz":
        return QuizPage(scene)
    return ScenePage(scene)
