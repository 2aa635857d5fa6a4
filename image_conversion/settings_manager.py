from __future__ import annotations

import json
import os
from typing import Any

from .logger import get_logger

_logger = get_logger("settings")

# Environment variable -> settings key
ENV_OVERRIDES: dict[str, str] = {
    "IMAGE_CONVERSION_DRIVER": "image_driver",
    "IMAGE_CONVERSION_TEMP_DIR": "temporary_directory",
}


class SettingsManager:
    """Read-only conversion settings.

    Resolution order: environment overrides, then the optional JSON file,
    then DEFAULTS. Nothing is ever written back.
    """

    DEFAULTS: dict[str, Any] = {
        "image_driver": "vips",
        "temporary_directory": None,
    }

    def __init__(self, settings_path: str | None = None):
        self.settings_path = settings_path
        self._settings: dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        self._settings = {}
        if not self.settings_path:
            return
        try:
            if os.path.exists(self.settings_path):
                with open(self.settings_path, encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    self._settings = data
                    _logger.debug("settings loaded: %s", self.settings_path)
                else:
                    _logger.warning("settings file is not a JSON object: %s", self.settings_path)
        except (OSError, ValueError) as e:
            _logger.warning("settings load failed: %s", e)

    def get(self, key: str, default: Any = None) -> Any:
        for env_name, env_key in ENV_OVERRIDES.items():
            if env_key == key:
                env_val = (os.getenv(env_name) or "").strip()
                if env_val:
                    return env_val
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    @property
    def image_driver(self) -> str:
        return str(self.get("image_driver"))

    @property
    def temporary_directory(self) -> str | None:
        val = self.get("temporary_directory")
        return val if isinstance(val, str) and val else None
