"""UI package."""

from .status_bar import (
    StatusBarController,
    StatusView,
    ThemeColors,
    VisibilityOptions,
    build_view,
)
from .status_button import StatusButton

__all__ = [
    "StatusBarController",
    "StatusView",
    "ThemeColors",
    "VisibilityOptions",
    "build_view",
    "StatusButton",
]
