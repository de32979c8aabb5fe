"""Durable key/value storage of string lists in a JSON file."""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

HISTORY_KEY = "sound-pad-history"
BOOKMARKS_KEY = "sound-pad-bookmarks"
FAVORITES_KEY = "favorites"


class JsonFileStore:
    """Whole-file JSON object mapping keys to lists of strings."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict:
        if not self._path.is_file():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable store %s: %s", self._path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def get_list(self, key: str) -> list[str]:
        """Return the list stored under *key* (empty when absent)."""
        value = self._read().get(key, [])
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]

    def set_list(self, key: str, values: list[str]) -> None:
        data = self._read()
        data[key] = list(values)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8"
        )
