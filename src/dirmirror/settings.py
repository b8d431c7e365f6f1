"""JSON-backed settings store."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from dirmirror.utils import xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "dirmirror"
_SETTINGS_FILE = "settings.json"

DEFAULT_MAX_DEPTH = 20

DEFAULTS: dict[str, Any] = {
    "scan": {"max_depth": DEFAULT_MAX_DEPTH},
    "progress": {"enabled": True},
}


class Settings:
    """Read-only settings backed by a JSON file.

    Uses dot-notation keys for nested access:
        settings.get("scan.max_depth")  # reads data["scan"]["max_depth"]

    Keys missing from the file fall back to ``DEFAULTS``.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or (xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE)
        self._data: dict[str, Any] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key."""
        for source in (self._data, DEFAULTS):
            value = _lookup(source, key)
            if value is not _MISSING:
                return value
        return default

    @property
    def max_depth(self) -> int:
        value = self.get("scan.max_depth")
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            log.warning("Ignoring invalid scan.max_depth in %s: %r", self._path, value)
            return DEFAULT_MAX_DEPTH
        return value

    @property
    def progress_enabled(self) -> bool:
        return bool(self.get("progress.enabled"))

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
            log.warning("Could not load settings from %s: top level is not an object", self._path)
            return
        self._data = data


_MISSING = object()


def _lookup(data: dict[str, Any], key: str) -> Any:
    node: Any = data
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return _MISSING
        node = node[part]
    return node
