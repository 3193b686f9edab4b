"""Application data directory and a small JSON settings store."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, Optional

DEFAULTS: Dict[str, str] = {
    "backend_url": "",
    "backend_anon_key": "",
    "access_token": "",
    "storage_bucket": "site-assets",
    "max_upload_mb": "5",
    "cache_control": "3600",
}

ENV_OVERRIDES: Dict[str, str] = {
    "backend_url": "SITEEDITOR_BACKEND_URL",
    "backend_anon_key": "SITEEDITOR_ANON_KEY",
    "access_token": "SITEEDITOR_ACCESS_TOKEN",
}


def app_data_dir() -> Path:
    """Return the platform-specific application data directory."""
    override = os.getenv("SITEEDITOR_DATA_DIR")
    if override:
        target = Path(override)
    else:
        if os.name == "nt":
            base = Path(os.getenv("LOCALAPPDATA", Path.home()))
        else:
            base = Path.home() / ".local" / "share"
        target = base / "SiteEditor"
    target.mkdir(parents=True, exist_ok=True)
    return target


class SettingsManager:
    """Very small settings helper storing JSON data.

    Missing keys are filled from ``DEFAULTS`` and written back on load.
    Backend credentials can be supplied through environment variables,
    which win over the file but are never persisted.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else app_data_dir() / "settings.json"
        self._settings: Dict[str, str] = {}
        self.load()

    def load(self) -> None:
        changed = False
        if self.path.exists():
            try:
                self._settings = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError):
                self._settings = {}
        else:
            self._settings = {}

        for key, default in DEFAULTS.items():
            if self._settings.get(key, "") == "" and default != "":
                self._settings[key] = default
                changed = True

        if changed:
            self.save()

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._settings, indent=2), encoding="utf-8")

    def get(self, key: str, default: str = "") -> str:
        env_name = ENV_OVERRIDES.get(key)
        if env_name:
            env_value = os.getenv(env_name)
            if env_value:
                return env_value
        return str(self._settings.get(key, default))

    def set(self, key: str, value: str) -> None:
        self._settings[key] = value
        self.save()

    def get_int(self, key: str, default: int) -> int:
        try:
            return int(self.get(key, str(default)))
        except ValueError:
            return default

    @property
    def max_upload_bytes(self) -> int:
        return self.get_int("max_upload_mb", 5) * 1024 * 1024
