"""Where WorkSession keeps its files on disk."""

from __future__ import annotations

from pathlib import Path

from PyQt6.QtCore import QStandardPaths

APP_NAME = "WorkSession"


def app_data_dir() -> Path:
    """Per-user data directory (not created here)."""
    location = QStandardPaths.writableLocation(
        QStandardPaths.StandardLocation.AppDataLocation
    )
    if location:
        path = Path(location)
        # Before QApplication names the app Qt returns a generic directory.
        return path if path.name == APP_NAME else path / APP_NAME
    return Path.home() / f".{APP_NAME.lower()}"
