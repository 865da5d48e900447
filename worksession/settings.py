"""Application settings with JSON persistence.

Settings are stored next to the database in the per-user data directory
as ``settings.json``.

Usage::

    settings = load_settings()
    settings.session_duration = 50
    save_settings(settings)

``load_settings`` never fails: unknown keys are dropped and bad values
are replaced (durations clamped, everything else reset to its default)
with a logged warning.
"""

from __future__ import annotations

import json
import math
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

from .colors import is_valid_color
from .paths import app_data_dir
from .timer.engine import (
    DEFAULT_REST_MINUTES,
    DEFAULT_SESSION_MINUTES,
    REST_MINUTES_RANGE,
    SESSION_MINUTES_RANGE,
)

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "settings.json"


def settings_path() -> Path:
    return app_data_dir() / SETTINGS_FILENAME


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    session_duration: int = DEFAULT_SESSION_MINUTES    # minutes, 1-120
    rest_duration: int = DEFAULT_REST_MINUTES          # minutes, 1-60
    auto_start_rest: bool = True
    auto_start_work: bool = False
    auto_start_on_open: bool = False

    # ── display ───────────────────────────────────────────────────────
    work_session_color: str = "#4CAF50"
    rest_period_color: str = "#64B5F6"
    show_countdown: bool = True
    show_status_dot: bool = True
    show_pause_play_button: bool = True

    # ── audio ─────────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_volume: int = 70                             # 0-100


_DURATION_BOUNDS = {
    "session_duration": SESSION_MINUTES_RANGE,
    "rest_duration": REST_MINUTES_RANGE,
}
_COLOR_FIELDS = ("work_session_color", "rest_period_color")


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def validate_settings(data: dict) -> list[str]:
    """Describe every value in *data* that ``load_settings`` would replace."""
    errors: list[str] = []
    defaults = Settings()
    for f in fields(Settings):
        if f.name not in data:
            continue
        value = data[f.name]
        if f.name in _DURATION_BOUNDS:
            low, high = _DURATION_BOUNDS[f.name]
            if not _is_number(value) or not low <= value <= high:
                errors.append(f"{f.name} must be a number between {low} and {high}")
        elif f.name in _COLOR_FIELDS:
            if not is_valid_color(value):
                errors.append(f"{f.name} must be a valid hex color or CSS color name")
        elif f.name == "sound_volume":
            if not _is_number(value) or not 0 <= value <= 100:
                errors.append("sound_volume must be a number between 0 and 100")
        elif isinstance(getattr(defaults, f.name), bool) and not isinstance(value, bool):
            errors.append(f"{f.name} must be true or false")
    return errors


def _sanitize(data: dict) -> dict:
    defaults = Settings()
    clean: dict = {}
    for f in fields(Settings):
        if f.name not in data:
            continue
        value = data[f.name]
        default = getattr(defaults, f.name)

        if f.name in _DURATION_BOUNDS:
            low, high = _DURATION_BOUNDS[f.name]
            if not _is_number(value):
                logger.warning("%s must be a number, using %d", f.name, default)
                value = default
            elif not low <= value <= high:
                clamped = max(low, min(high, int(value)))
                logger.warning("%s=%r out of range, using %d", f.name, value, clamped)
                value = clamped
            else:
                value = int(value)
        elif f.name in _COLOR_FIELDS:
            if is_valid_color(value):
                value = value.strip()
            else:
                logger.warning("%s=%r is not a color, using %s", f.name, value, default)
                value = default
        elif f.name == "sound_volume":
            value = max(0, min(100, int(value))) if _is_number(value) else default
        elif isinstance(default, bool) and not isinstance(value, bool):
            logger.warning("%s=%r is not a boolean, using %s", f.name, value, default)
            value = default
        clean[f.name] = value
    return clean


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from disk, falling back to defaults."""
    path = path or settings_path()
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                return Settings(**_sanitize(data))
            logger.warning("Ignoring %s: not a JSON object", path)
    except (OSError, ValueError) as exc:
        logger.warning("Could not read settings from %s: %s", path, exc)
    return Settings()


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Write settings to disk as JSON."""
    path = path or settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
