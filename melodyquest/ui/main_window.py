from __future__ import annotations

import logging
from typing import Dict, List, Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QCloseEvent, QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QHBoxLayout,
    QInputDialog,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
)

from melodyquest.core.capture import Camera, CaptureArena
from melodyquest.core.progression import Presenter, ProgressionController
from melodyquest.core.qr import QRTextResolver
from melodyquest.core.scenes import SceneRepository
from melodyquest.ui.audio import TonePlayer
from melodyquest.ui.colors import QuestColors
from melodyquest.ui.scene_pages import CameraPage, QuizPage, ScenePage, WheelPage, build_page
from melodyquest.ui.widgets import (
    CollectedNotesBar,
    ConfettiOverlay,
    GlassCard,
    RewardToast,
    StageBackground,
)

logger = logging.getLogger(__name__)

SCAN_INTERVAL_MS = 16


def _nav_button_style() -> str:
    return f"""
        QPushButton {{
            background: white;
            color: {QuestColors.PRIMARY};
            padding: 10px 22px;
            border: 1px solid #e0d4e6;
            border-radius: 12px;
            font-weight: 700;
            font-size: 14px;
        }}
        QPushButton:hover {{
            border-color: {QuestColors.PRIMARY};
        }}
        QPushButton:disabled {{
            color: #c8bccd;
            border-color: #eee6f1;
        }}
    """


class MainWindow(QMainWindow, Presenter):
    """Stage window: one page per scene, a persistent nav bar and the notes strip.

    Acts as the controller's presenter, so every state change the controller
    makes is reflected here through the :class:`Presenter` hooks.
    """

    def __init__(
        self,
        scenes: SceneRepository,
        controller: ProgressionController,
        camera: Optional[Camera] = None,
    ) -> None:
        super().__init__()
        self._scenes = scenes
        self._controller = controller
        self._tone_player = TonePlayer(controller.config.tokens, self)
        self._resolver = QRTextResolver(controller.config.short_links)
        self._camera = camera
        self._capture: Optional[CaptureArena] = None
        if camera is not None:
            self._capture = CaptureArena(
                camera,
                self._resolver,
                controller.scene_count,
                controller.navigate_to,
                commit_threshold=controller.config.commit_threshold,
                on_unavailable=self._defer_notice,
            )
        self._pages: Dict[int, ScenePage] = {}
        self._scan_scene: Optional[int] = None
        self._scan_timer = QTimer(self)
        self._scan_timer.setInterval(SCAN_INTERVAL_MS)
        self._scan_timer.timeout.connect(self._scan_tick)

        self._build_ui()
        self._restore_page_state()
        self._controller.presenter = self
        self._controller.show_current()

    def _build_ui(self) -> None:
        self.setWindowTitle("Melody Quest")
        self.setMinimumSize(900, 680)

        root = StageBackground()
        self.setCentralWidget(root)
        root_layout = QVBoxLayout(root)
        root_layout.setContentsMargins(20, 16, 20, 16)
        root_layout.setSpacing(14)

        top_row = QHBoxLayout()
        self._notes_bar = CollectedNotesBar()
        self._reset_button = QPushButton("Reset")
        self._reset_button.setStyleSheet(_nav_button_style())
        self._reset_button.clicked.connect(self._controller.reset)
        top_row.addWidget(self._notes_bar, stretch=1)
        top_row.addWidget(self._reset_button)
        root_layout.addLayout(top_row)

        card = GlassCard()
        card_layout = QVBoxLayout(card)
        card_layout.setContentsMargins(8, 8, 8, 8)
        self._stack = QStackedWidget()
        card_layout.addWidget(self._stack)
        root_layout.addWidget(card, stretch=1)

        for scene in self._scenes.all():
            page = build_page(scene, self._controller.config.wheel_slices)
            page.advance.connect(self._advance)
            if isinstance(page, WheelPage):
                page.spin_requested.connect(lambda s=scene.index: self._spin(s))
                page.spin_settled.connect(lambda s=scene.index: self._spin_settled(s))
            elif isinstance(page, CameraPage):
                page.open_requested.connect(lambda s=scene.index: self._open_camera(s))
                page.stop_requested.connect(lambda s=scene.index: self._stop_camera(s))
                if self._capture is None:
                    page.set_unavailable()
            elif isinstance(page, QuizPage):
                page.answered.connect(lambda choice, s=scene.index: self._answer_quiz(s, choice))
            self._pages[scene.index] = page
            self._stack.addWidget(page)

        nav_row = QHBoxLayout()
        self._back_button = QPushButton("◀ Back")
        self._next_button = QPushButton("Next ▶")
        for button in (self._back_button, self._next_button):
            button.setStyleSheet(_nav_button_style())
            button.setFocusPolicy(Qt.NoFocus)
        self._back_button.clicked.connect(self._go_back)
        self._next_button.clicked.connect(self._go_forward)
        nav_row.addWidget(self._back_button)
        nav_row.addStretch(1)
        nav_row.addWidget(self._next_button)
        root_layout.addLayout(nav_row)

        QShortcut(QKeySequence(Qt.Key_Left), self, activated=self._go_back)
        QShortcut(QKeySequence(Qt.Key_Right), self, activated=self._go_forward)
        QShortcut(QKeySequence("Ctrl+J"), self, activated=self._prompt_jump)

        self._toast = RewardToast(root)
        self._confetti = ConfettiOverlay(root)

    def _restore_page_state(self) -> None:
        self._notes_bar.set_tokens(self._controller.collected)
        for index, page in self._pages.items():
            if isinstance(page, WheelPage):
                page.set_locked(self._controller.wheel.spun)
            elif isinstance(page, QuizPage) and self._controller.quiz_completed(index):
                page.show_completed()

    # -- Presenter hooks --------------------------------------------------

    def render_scene(self, index: int) -> None:
        self._stop_scanning()
        self._stack.setCurrentIndex(index)

    def set_back_enabled(self, enabled: bool) -> None:
        self._back_button.setEnabled(enabled)

    def set_forward_enabled(self, enabled: bool) -> None:
        self._next_button.setEnabled(enabled)

    def play_tone(self, token: str) -> None:
        self._tone_player.play(token)

    def show_reward(self, token: str) -> None:
        self._toast.show_token(token)

    def celebrate(self) -> None:
        self._confetti.burst(26)

    def show_collected(self, tokens: List[str]) -> None:
        self._notes_bar.set_tokens(tokens)

    def on_reset(self) -> None:
        for page in self._pages.values():
            page.on_reset()

    def show_notice(self, message: str) -> None:
        QMessageBox.warning(self, "Camera unavailable", f"Unable to access camera: {message}")

    def _defer_notice(self, message: str) -> None:
        QTimer.singleShot(0, lambda: self.show_notice(message))

    # -- input ------------------------------------------------------------

    def _go_back(self) -> None:
        if self._controller.can_go_back():
            self._controller.step(-1)

    def _go_forward(self) -> None:
        if self._controller.can_go_forward():
            self._controller.step(1)

    def _advance(self) -> None:
        self._controller.step(1)

    def _prompt_jump(self) -> None:
        text, ok = QInputDialog.getText(self, "Jump to scene", "Scene index:")
        if ok:
            self._controller.debug_jump(text)

    def _wheel_page(self, scene: int) -> Optional[WheelPage]:
        page = self._pages.get(scene)
        return page if isinstance(page, WheelPage) else None

    def _spin(self, scene: int) -> None:
        page = self._wheel_page(scene)
        if page is None:
            return
        rotation = self._controller.spin()
        if rotation is None:
            return
        page.start_spin(rotation)

    def _spin_settled(self, scene: int) -> None:
        page = self._wheel_page(scene)
        token = self._controller.complete_spin()
        if token is None or page is None:
            return
        page.show_result(token)
        page.set_locked(self._controller.wheel.spun)

    def _answer_quiz(self, scene: int, choice_index: int) -> None:
        page = self._pages.get(scene)
        if not isinstance(page, QuizPage):
            return
        outcome = self._controller.answer_quiz(scene, choice_index)
        if outcome.correct:
            page.show_correct(choice_index)
        else:
            page.show_incorrect(choice_index)

    # -- camera -----------------------------------------------------------

    def _open_camera(self, scene: int) -> None:
        page = self._pages.get(scene)
        if self._capture is None or not isinstance(page, CameraPage):
            return
        if self._capture.session(scene).start():
            self._scan_scene = scene
            page.set_scanning(True)
            self._scan_timer.start()
        else:
            page.set_unavailable()

    def _stop_camera(self, scene: int) -> None:
        if self._capture is not None:
            self._capture.session(scene).stop()
        self._scan_timer.stop()
        self._scan_scene = None
        page = self._pages.get(scene)
        if isinstance(page, CameraPage):
            page.set_scanning(False)

    def _stop_scanning(self) -> None:
        if self._scan_scene is not None:
            self._stop_camera(self._scan_scene)

    def _scan_tick(self) -> None:
        scene = self._scan_scene
        if scene is None or self._capture is None:
            self._scan_timer.stop()
            return
        session = self._capture.session(scene)
        page = self._pages[scene]
        keep_going = session.tick()
        if not keep_going:
            # a committed scan has already navigated away
            self._stop_camera(scene)
            if session.disabled and isinstance(page, CameraPage):
                page.set_unavailable()
            return
        if isinstance(page, CameraPage):
            frame = getattr(self._camera, "last_frame", None)
            if frame is not None:
                page.show_frame(frame)
            if session.last_text:
                page.show_detection(session.last_text)

    def closeEvent(self, event: QCloseEvent) -> None:
        """Release the camera when closing the app."""
        self._scan_timer.stop()
        if self._capture is not None:
            self._capture.stop_all()
        self._tone_player.stop()
        super().closeEvent(event)
