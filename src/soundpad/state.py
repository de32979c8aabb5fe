"""Immutable snapshots of the controller state and the commands it accepts."""

from __future__ import annotations

from dataclasses import dataclass

from soundpad.library import AudioFile


@dataclass(frozen=True)
class SoundPadState:
    """Everything a presentation layer needs to draw one frame."""

    folder: str | None = None
    listing: tuple[AudioFile, ...] = ()
    visible: tuple[AudioFile, ...] = ()
    selection: frozenset[str] = frozenset()
    playing: str | None = None
    query: str = ""
    favorites_only: bool = False
    favorites: frozenset[str] = frozenset()
    history: tuple[str, ...] = ()
    bookmarks: tuple[str, ...] = ()
    last_copy_destination: str | None = None


# -- commands ----------------------------------------------------------------


@dataclass(frozen=True)
class OpenFolder:
    path: str


@dataclass(frozen=True)
class PickFolder:
    """Ask the folder picker, then open the chosen folder."""


@dataclass(frozen=True)
class SetQuery:
    text: str


@dataclass(frozen=True)
class SetViewMode:
    favorites_only: bool


@dataclass(frozen=True)
class ToggleSelect:
    path: str


@dataclass(frozen=True)
class ClearSelection:
    pass


@dataclass(frozen=True)
class TogglePlay:
    path: str
    control: str | None = None


@dataclass(frozen=True)
class Rename:
    path: str
    new_name: str


@dataclass(frozen=True)
class RenameSelected:
    prefix: str
    suffix: str = ""


@dataclass(frozen=True)
class CopySelected:
    """Copy the selection; without a destination the folder picker is asked."""

    destination: str | None = None


@dataclass(frozen=True)
class OpenLastCopyDestination:
    pass


@dataclass(frozen=True)
class AddBookmark:
    """Bookmark *path*, or the open folder when no path is given."""

    path: str | None = None


@dataclass(frozen=True)
class RemoveBookmark:
    path: str


@dataclass(frozen=True)
class ToggleFavorite:
    path: str


@dataclass(frozen=True)
class PlaybackFinished:
    path: str


Command = (
    OpenFolder
    | PickFolder
    | SetQuery
    | SetViewMode
    | ToggleSelect
    | ClearSelection
    | TogglePlay
    | Rename
    | RenameSelected
    | CopySelected
    | OpenLastCopyDestination
    | AddBookmark
    | RemoveBookmark
    | ToggleFavorite
    | PlaybackFinished
)
