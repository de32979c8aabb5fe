"""Audio library: the listing of the open folder plus the selection.

The listing is replaced wholesale on every successful :meth:`load`.  A
file's ``path`` is its identity; a rename swaps it for whatever path the
backend reports and every structure keyed by the old path is remapped
in the same step (no suspension point in between).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable

from soundpad.errors import SelectionError
from soundpad.inflight import InFlight

if TYPE_CHECKING:
    from soundpad.backend import Backend

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS: frozenset[str] = frozenset(
    {".mp3", ".wav", ".ogg", ".flac", ".m4a", ".aac"}
)

RenameHook = Callable[[str, str], None]


@dataclass
class AudioFile:
    """One entry of a folder listing."""

    path: str
    name: str
    duration_seconds: float | None = None

    def copy(self) -> AudioFile:
        return AudioFile(self.path, self.name, self.duration_seconds)


class AudioLibrary:
    """Listing and selection for the currently open folder."""

    def __init__(self, backend: Backend, inflight: InFlight | None = None) -> None:
        self._backend = backend
        self._inflight = inflight if inflight is not None else InFlight()
        self._files: list[AudioFile] = []
        self._selection: set[str] = set()
        self._rename_hooks: list[RenameHook] = []

    # -- properties ----------------------------------------------------------

    @property
    def files(self) -> list[AudioFile]:
        return list(self._files)

    @property
    def selection(self) -> frozenset[str]:
        return frozenset(self._selection)

    def find(self, path: str) -> AudioFile | None:
        """Return the listed file whose identity is *path*."""
        for audio_file in self._files:
            if audio_file.path == path:
                return audio_file
        return None

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.find(path) is not None

    # -- loading -------------------------------------------------------------

    async def load(self, directory: str) -> list[AudioFile]:
        """Replace the listing with the contents of *directory*.

        On failure the previous listing is kept and the error propagates.
        Selection is not touched either way.
        """
        files = await self._backend.list_audio_files(directory)
        seen: set[str] = set()
        unique = []
        for audio_file in files:
            if audio_file.path in seen:
                logger.warning("Duplicate path in listing dropped: %s", audio_file.path)
                continue
            seen.add(audio_file.path)
            unique.append(audio_file)
        self._files = unique
        logger.info("Loaded %d audio files from %s", len(unique), directory)
        return self.files

    # -- selection -----------------------------------------------------------

    def select(self, path: str) -> None:
        if path not in self:
            raise SelectionError(f"'{path}' is not in the current listing.")
        self._selection.add(path)

    def deselect(self, path: str) -> None:
        self._selection.discard(path)

    def toggle_selection(self, path: str) -> bool:
        """Flip selection of *path*; return whether it is now selected."""
        if path in self._selection:
            self.deselect(path)
            return False
        self.select(path)
        return True

    def clear_selection(self) -> None:
        self._selection.clear()

    def selected_files(self) -> list[AudioFile]:
        """Selected files that are still in the listing, in listing order."""
        return [f for f in self._files if f.path in self._selection]

    # -- rename --------------------------------------------------------------

    def add_rename_hook(self, hook: RenameHook) -> None:
        """Register *hook(old_path, new_path)*, run after each rename."""
        self._rename_hooks.append(hook)

    async def rename(self, target_path: str, new_name: str) -> str:
        """Rename the file identified by *target_path*; return its new path.

        The target is resolved by path, never by position, so a filtered
        view cannot redirect the rename onto another entry.  A second
        rename of the same path while the first is unresolved raises
        :class:`OperationInProgressError`.
        """
        if self.find(target_path) is None:
            raise SelectionError(f"'{target_path}' is not in the current listing.")
        with self._inflight.claim("rename", target_path):
            new_path = await self._backend.rename(target_path, new_name)

        # The listing may have been reloaded while the backend was busy.
        audio_file = self.find(target_path)
        if audio_file is not None:
            audio_file.name = new_name
            audio_file.path = new_path
        if target_path in self._selection:
            self._selection.discard(target_path)
            self._selection.add(new_path)
        for hook in self._rename_hooks:
            hook(target_path, new_path)
        logger.info("Renamed %s -> %s", target_path, new_path)
        return new_path


def visible_files(
    files: Iterable[AudioFile], predicate: Callable[[str], bool]
) -> list[AudioFile]:
    """Files whose display name satisfies *predicate*, listing order kept."""
    return [f for f in files if predicate(f.name)]
