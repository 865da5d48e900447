"""The status button: a small always-visible countdown.

Left click runs the view's command (start / pause / resume).  The
context menu offers every timer command.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import QMenu, QPushButton, QWidget

from ..colors import darken_color, lighten_color
from .status_bar import (
    CMD_PAUSE,
    CMD_RESET,
    CMD_RESUME,
    CMD_START_REST,
    CMD_START_SESSION,
    StatusView,
)

MENU_ENTRIES: tuple[tuple[str, str], ...] = (
    ("Start Work Session", CMD_START_SESSION),
    ("Start Rest Period", CMD_START_REST),
    ("Pause", CMD_PAUSE),
    ("Resume", CMD_RESUME),
    ("Reset", CMD_RESET),
)


def button_stylesheet(color: str | None) -> str:
    """Text color for the button, lighter on hover and darker when pressed."""
    if not color:
        return ""
    return (
        f"QPushButton {{ color: {color}; }}"
        f" QPushButton:hover {{ color: {lighten_color(color)}; }}"
        f" QPushButton:pressed {{ color: {darken_color(color)}; }}"
    )


class StatusButton(QPushButton):
    """Renders a ``StatusView`` and turns clicks into commands."""

    command_requested = pyqtSignal(str)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._view: StatusView | None = None
        self.setFlat(True)
        self.setCursor(Qt.CursorShape.PointingHandCursor)
        self.clicked.connect(self._on_clicked)

        self._menu = QMenu(self)
        for label, command in MENU_ENTRIES:
            action = QAction(label, self)
            action.triggered.connect(lambda _checked=False, c=command: self.command_requested.emit(c))
            self._menu.addAction(action)
        self.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.customContextMenuRequested.connect(
            lambda pos: self._menu.popup(self.mapToGlobal(pos))
        )

    @property
    def view(self) -> StatusView | None:
        return self._view

    def render_view(self, view: StatusView) -> None:
        self._view = view
        self.setText(view.text)
        self.setToolTip(view.tooltip)
        self.setStyleSheet(button_stylesheet(view.color))

    def _on_clicked(self) -> None:
        if self._view is not None and self._view.command:
            self.command_requested.emit(self._view.command)
