"""JSON-backed user defaults for the command-line options."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from modnuke.utils import xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "modnuke"
_SETTINGS_FILE = "settings.json"

# Used when neither the command line nor the settings file provides a value.
BUILTIN_DEFAULTS: dict[str, Any] = {
    "defaults.lock_file": False,
    "defaults.install": True,
    "defaults.package_manager": None,
    "defaults.concurrency": 1,
    "spinner.speed": 1.0,
}


class Settings:
    """Persistent settings backed by a JSON file.

    Uses dot-notation keys for nested access::

        settings.get("defaults.install")         # reads data["defaults"]["install"]
        settings.set("defaults.lock_file", True)  # writes + saves

    Keys missing from the file fall back to :data:`BUILTIN_DEFAULTS`.
    """

    _instance: Settings | None = None

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or (xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE)
        self._data: dict[str, Any] = {}
        self._load()

    @classmethod
    def instance(cls) -> Settings:
        """Return the singleton settings instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key."""
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return BUILTIN_DEFAULTS.get(key, default) if default is None else default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a value by dot-notation key and persist to disk."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            if part not in node or not isinstance(node[part], dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self._save()

    def _load(self) -> None:
        """Load settings from disk, gracefully handling errors."""
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self._path, e)
            return
        if not isinstance(data, dict):
            log.warning("Ignoring settings in %s: top level is not an object", self._path)
            return
        self._data = data

    def _save(self) -> None:
        """Persist settings to disk."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(self._data, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            log.warning("Could not save settings to %s: %s", self._path, e)
