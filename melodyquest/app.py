"""Application entry point and setup for Melody Quest."""

import logging
import os
import sys

from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication, QMessageBox

from melodyquest.core.config import load_config
from melodyquest.core.errors import ConfigError
from melodyquest.core.opencv_camera import OpenCVCamera
from melodyquest.core.progression import ProgressionController
from melodyquest.core.scenes import SceneRepository
from melodyquest.core.storage import JsonFileStore
from melodyquest.ui.main_window import MainWindow


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    level_name = os.environ.get("MELODYQUEST_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run() -> None:
    """Load the deployment, restore saved progress and start the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Melody Quest")
    app.setApplicationDisplayName("Melody Quest")

    try:
        config = load_config()
        scenes = SceneRepository(alphabet=config.alphabet)
    except ConfigError as e:
        logging.error("Cannot start: %s", e)
        QMessageBox.critical(None, "Melody Quest", str(e))
        sys.exit(1)

    store = JsonFileStore()
    store.open()
    controller = ProgressionController(
        len(scenes),
        store,
        config,
        quizzes=scenes.quizzes(),
    )

    window = MainWindow(scenes=scenes, controller=controller, camera=OpenCVCamera())
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        window.resize(min(1100, geometry.width()), min(820, geometry.height()))
    window.show()

    try:
        exit_code = app.exec()
    finally:
        store.close()
    sys.exit(exit_code)


if __name__ == "__main__":
    run()
