"""Navigation shortcuts: folder history, bookmarks and favorite files."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from soundpad.storage import BOOKMARKS_KEY, HISTORY_KEY, JsonFileStore

if TYPE_CHECKING:
    from soundpad.backend import Backend

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 10


class PathRegistry:
    """Most-recent-first folder history plus an unordered bookmark set.

    Both are loaded from *store* on construction and written back after
    every change.
    """

    def __init__(self, store: JsonFileStore, history_size: int = DEFAULT_HISTORY_SIZE) -> None:
        self._store = store
        self._history_size = history_size
        self._history: list[str] = _unique(store.get_list(HISTORY_KEY))[:history_size]
        self._bookmarks: list[str] = _unique(store.get_list(BOOKMARKS_KEY))

    @property
    def history(self) -> list[str]:
        return list(self._history)

    @property
    def bookmarks(self) -> list[str]:
        return list(self._bookmarks)

    def add_history(self, path: str) -> None:
        """Move *path* to the front, dropping entries past capacity."""
        history = [p for p in self._history if p != path]
        history.insert(0, path)
        self._history = history[: self._history_size]
        self._store.set_list(HISTORY_KEY, self._history)

    def add_bookmark(self, path: str) -> None:
        if path in self._bookmarks:
            return
        self._bookmarks.append(path)
        self._store.set_list(BOOKMARKS_KEY, self._bookmarks)

    def remove_bookmark(self, path: str) -> None:
        if path not in self._bookmarks:
            return
        self._bookmarks.remove(path)
        self._store.set_list(BOOKMARKS_KEY, self._bookmarks)

    def is_bookmarked(self, path: str) -> bool:
        return path in self._bookmarks


class FavoriteRegistry:
    """Local cache of the backend's favorite files.

    The cache only changes after the backend has accepted a change.
    """

    def __init__(self, backend: Backend) -> None:
        self._backend = backend
        self._favorites: set[str] = set()

    @property
    def favorites(self) -> frozenset[str]:
        return frozenset(self._favorites)

    def __contains__(self, path: object) -> bool:
        return path in self._favorites

    async def load(self) -> frozenset[str]:
        self._favorites = set(await self._backend.list_favorites())
        return self.favorites

    async def add(self, path: str) -> None:
        await self._backend.add_favorite(path)
        self._favorites.add(path)

    async def remove(self, path: str) -> None:
        await self._backend.remove_favorite(path)
        self._favorites.discard(path)

    async def toggle(self, path: str) -> bool:
        """Add or remove *path*; return whether it is now a favorite."""
        if path in self._favorites:
            await self.remove(path)
            return False
        await self.add(path)
        return True

    def remap(self, old_path: str, new_path: str) -> None:
        """Follow a rename the backend has already applied to its own list."""
        if old_path in self._favorites:
            self._favorites.discard(old_path)
            self._favorites.add(new_path)


def _unique(paths: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for path in paths:
        if path not in seen:
            seen.add(path)
            result.append(path)
    return result
