"""The sound-pad controller: one owner for all mutable state.

Every user action is a command object passed to :meth:`dispatch`, which
returns a fresh :class:`SoundPadState` snapshot.  Failures are logged,
reported through the ``notify`` hook and leave the state as it was.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, Callable

from soundpad.batch import BatchOperationRunner
from soundpad.errors import SoundPadError
from soundpad.inflight import InFlight
from soundpad.library import AudioLibrary, visible_files
from soundpad.playback import PlaybackController
from soundpad.registry import FavoriteRegistry, PathRegistry
from soundpad.search import compile_query
from soundpad.state import (
    AddBookmark,
    ClearSelection,
    Command,
    CopySelected,
    OpenFolder,
    OpenLastCopyDestination,
    PickFolder,
    PlaybackFinished,
    RemoveBookmark,
    Rename,
    RenameSelected,
    SetQuery,
    SetViewMode,
    SoundPadState,
    ToggleFavorite,
    TogglePlay,
    ToggleSelect,
)

if TYPE_CHECKING:
    from soundpad.backend import Backend

logger = logging.getLogger(__name__)

FolderPicker = Callable[[], Awaitable[str | None]]
Notifier = Callable[[str], None]

_FAILURE_MESSAGES: dict[type, str] = {
    OpenFolder: "Could not load the folder",
    PickFolder: "Could not open the folder",
    OpenLastCopyDestination: "Could not open the copy destination",
    ToggleSelect: "Could not change the selection",
    TogglePlay: "Could not play the file",
    Rename: "Could not rename the file",
    RenameSelected: "Could not rename the selected files",
    CopySelected: "Could not copy the files",
    ToggleFavorite: "Could not update favorites",
}


def _ignore(message: str) -> None:
    pass


class SoundPadController:
    """Coordinates listing, selection, playback and shortcuts."""

    def __init__(
        self,
        backend: Backend,
        paths: PathRegistry,
        *,
        picker: FolderPicker | None = None,
        notify: Notifier | None = None,
    ) -> None:
        self._backend = backend
        self._picker = picker
        self._notify = notify if notify is not None else _ignore
        self._inflight = InFlight()

        self.paths = paths
        self.library = AudioLibrary(backend, self._inflight)
        self.playback = PlaybackController(backend, self._inflight)
        self.favorites = FavoriteRegistry(backend)
        self.batch = BatchOperationRunner(self.library, backend)
        self.library.add_rename_hook(self.playback.remap)
        self.library.add_rename_hook(self.favorites.remap)

        self._folder: str | None = None
        self._query = ""
        self._predicate = compile_query("")
        self._favorites_only = False

        self._handlers = {
            OpenFolder: self._open_folder,
            PickFolder: self._pick_folder,
            SetQuery: self._set_query,
            SetViewMode: self._set_view_mode,
            ToggleSelect: self._toggle_select,
            ClearSelection: self._clear_selection,
            TogglePlay: self._toggle_play,
            Rename: self._rename,
            RenameSelected: self._rename_selected,
            CopySelected: self._copy_selected,
            OpenLastCopyDestination: self._open_last_copy_destination,
            AddBookmark: self._add_bookmark,
            RemoveBookmark: self._remove_bookmark,
            ToggleFavorite: self._toggle_favorite,
            PlaybackFinished: self._playback_finished,
        }

    # -- public API ----------------------------------------------------------

    @property
    def folder(self) -> str | None:
        return self._folder

    async def start(self, folder: str | None = None) -> SoundPadState:
        """Load favorites and optionally open *folder*."""
        try:
            await self.favorites.load()
        except SoundPadError as exc:
            logger.error("Loading favorites failed: %s", exc)
            self._notify(f"Could not load favorites: {exc}")
        if folder is not None:
            return await self.dispatch(OpenFolder(folder))
        return self.snapshot()

    async def dispatch(self, command: Command) -> SoundPadState:
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"Unknown command: {command!r}")
        try:
            await handler(command)
        except (SoundPadError, ValueError) as exc:
            logger.error("%s failed: %s", type(command).__name__, exc)
            prefix = _FAILURE_MESSAGES.get(type(command), "Operation failed")
            self._notify(f"{prefix}: {exc}")
        return self.snapshot()

    def snapshot(self) -> SoundPadState:
        listing = tuple(f.copy() for f in self.library.files)
        favorites = self.favorites.favorites
        visible = visible_files(listing, self._predicate)
        if self._favorites_only:
            visible = [f for f in visible if f.path in favorites]
        playing = self.playback.current_path
        return SoundPadState(
            folder=self._folder,
            listing=listing,
            visible=tuple(visible),
            selection=self.library.selection,
            playing=playing,
            query=self._query,
            favorites_only=self._favorites_only,
            favorites=favorites,
            history=tuple(self.paths.history),
            bookmarks=tuple(self.paths.bookmarks),
            last_copy_destination=self.batch.last_copy_destination,
        )

    # -- folders -------------------------------------------------------------

    async def _open_folder(self, command: OpenFolder) -> None:
        await self.library.load(command.path)
        self._folder = command.path
        self.paths.add_history(command.path)

    async def _pick_folder(self, command: PickFolder) -> None:
        path = await self._ask_folder()
        if path is not None:
            await self._open_folder(OpenFolder(path))

    async def _open_last_copy_destination(self, command: OpenLastCopyDestination) -> None:
        destination = self.batch.last_copy_destination
        if destination is not None:
            await self._open_folder(OpenFolder(destination))

    async def _ask_folder(self) -> str | None:
        if self._picker is None:
            raise ValueError("No folder picker available.")
        path = await self._picker()
        if path is None:
            logger.debug("Folder picker cancelled")
        return path

    # -- view ----------------------------------------------------------------

    async def _set_query(self, command: SetQuery) -> None:
        self._query = command.text
        self._predicate = compile_query(command.text)

    async def _set_view_mode(self, command: SetViewMode) -> None:
        self._favorites_only = command.favorites_only

    # -- selection -----------------------------------------------------------

    async def _toggle_select(self, command: ToggleSelect) -> None:
        self.library.toggle_selection(command.path)

    async def _clear_selection(self, command: ClearSelection) -> None:
        self.library.clear_selection()

    # -- playback ------------------------------------------------------------

    async def _toggle_play(self, command: TogglePlay) -> None:
        await self.playback.toggle(command.path, command.control)

    async def _playback_finished(self, command: PlaybackFinished) -> None:
        self.playback.on_finished(command.path)

    # -- files ---------------------------------------------------------------

    async def _rename(self, command: Rename) -> None:
        new_name = command.new_name.strip()
        audio_file = self.library.find(command.path)
        if not new_name or (audio_file is not None and audio_file.name == new_name):
            return
        await self.library.rename(command.path, new_name)

    async def _rename_selected(self, command: RenameSelected) -> None:
        result = await self.batch.rename_selected(command.prefix, command.suffix)
        logger.info(
            "Batch rename finished: %d renamed, %d failed",
            len(result.renamed),
            len(result.failed),
        )

    async def _copy_selected(self, command: CopySelected) -> None:
        if not self.library.selection:
            return
        destination = command.destination
        if destination is None:
            destination = await self._ask_folder()
            if destination is None:
                return
        count = await self.batch.copy_selected(destination)
        self._notify(f"Copied {count} files to {destination}.")

    # -- shortcuts -----------------------------------------------------------

    async def _add_bookmark(self, command: AddBookmark) -> None:
        path = command.path if command.path is not None else self._folder
        if path is not None:
            self.paths.add_bookmark(path)

    async def _remove_bookmark(self, command: RemoveBookmark) -> None:
        self.paths.remove_bookmark(command.path)

    async def _toggle_favorite(self, command: ToggleFavorite) -> None:
        await self.favorites.toggle(command.path)
