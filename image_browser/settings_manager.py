from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from PySide6.QtGui import QColor

from .app.zoom import ZoomRange
from .logger import get_logger

_logger = get_logger("settings")


def _normalize_dir(value: str) -> str:
    p = Path(value).expanduser().resolve()
    if p.is_file():
        p = p.parent
    return str(p)


class SettingsManager:
    def __init__(self, settings_path: str):
        self.settings_path = settings_path
        self._settings: dict[str, Any] = {}
        self.load()

    DEFAULTS: dict[str, Any] = {
        "background_color": "#f3f4f6",
        "zoom_min_percent": 50,
        "zoom_max_percent": 300,
        "zoom_step_percent": 20,
        "decode_workers": 4,
    }

    def load(self) -> None:
        try:
            if os.path.exists(self.settings_path):
                with open(self.settings_path, encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        self._settings = data
                        _logger.debug("settings loaded: %s", self.settings_path)
                        return
        except (OSError, ValueError) as e:
            _logger.warning("settings load failed: %s", e)
        self._settings = {}

    def save(self) -> None:
        try:
            os.makedirs(os.path.dirname(self.settings_path) or ".", exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
            _logger.debug("settings saved: %s", self.settings_path)
        except (OSError, TypeError) as e:
            _logger.error("settings save failed: %s", e)

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    def set(self, key: str, value: Any) -> None:
        if key == "last_open_dir" and isinstance(value, str) and value:
            value = _normalize_dir(value)
        self._settings[key] = value
        self.save()

    @property
    def data(self) -> dict[str, Any]:
        return self._settings

    @property
    def last_open_dir(self) -> str | None:
        val = self.get("last_open_dir")
        return val if isinstance(val, str) and os.path.isdir(val) else None

    @property
    def decode_workers(self) -> int:
        try:
            return max(1, int(self.get("decode_workers")))
        except (TypeError, ValueError):
            return int(self.DEFAULTS["decode_workers"])

    def zoom_range(self) -> ZoomRange:
        try:
            return ZoomRange(
                minimum=int(self.get("zoom_min_percent")),
                maximum=int(self.get("zoom_max_percent")),
                step=int(self.get("zoom_step_percent")),
            )
        except (TypeError, ValueError) as e:
            _logger.warning("invalid zoom settings, using defaults: %s", e)
            return ZoomRange()

    def background_color(self) -> QColor:
        hexcol = self.get("background_color")
        if isinstance(hexcol, str):
            color = QColor(hexcol)
            if color.isValid():
                return color
            _logger.warning("saved background_color invalid: %s", hexcol)
        return QColor(self.DEFAULTS["background_color"])
