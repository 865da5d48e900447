"""Allow running WorkSession as a module: python -m worksession."""

import logging
import sys

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QApplication

from .database.db import init_db
from .paths import APP_NAME
from .settings import load_settings, save_settings, settings_path
from .app import WorkSessionController
from .ui.status_button import StatusButton


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("worksession")


def main() -> None:
    logger = setup_logging()

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(APP_NAME)

    init_db()
    settings = load_settings()
    if not settings_path().exists():
        # Give the user a file to edit; it is watched from here on
        save_settings(settings)
    controller = WorkSessionController(settings=settings)

    button = StatusButton()
    button.setWindowTitle(APP_NAME)
    button.setWindowFlags(Qt.WindowType.Tool | Qt.WindowType.WindowStaysOnTopHint)
    controller.status.display_changed.connect(button.render_view)
    button.command_requested.connect(controller.dispatch)

    controller.startup()
    controller.watch_settings_file(settings_path())
    button.render_view(controller.status.view)
    app.aboutToQuit.connect(controller.shutdown)

    button.show()
    logger.info("WorkSession ready")
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
