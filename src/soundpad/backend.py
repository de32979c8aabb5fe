"""Backend command surface and its local filesystem implementation.

Commands (all async, all raising :class:`BackendRequestFailed`):

============== ======================== =================
command        input                    output
============== ======================== =================
list-audio     directory                list of AudioFile
play           file path                none
stop           none                     none
rename         old path, new name       new path
copy           paths, destination       copied paths
list-favorites none                     list of paths
add-favorite   file path                none
rm-favorite    file path                none
============== ======================== =================

Playback contract: one output channel, the last ``play`` wins.  A
backend without that guarantee would need a stop before every play.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Protocol

import soundfile as sf

from soundpad.audio import AudioPlayer
from soundpad.errors import BackendRequestFailed
from soundpad.library import AUDIO_EXTENSIONS, AudioFile
from soundpad.storage import FAVORITES_KEY, JsonFileStore

logger = logging.getLogger(__name__)

FinishedCallback = Callable[[str], None]


class Backend(Protocol):
    async def list_audio_files(self, directory: str) -> list[AudioFile]: ...

    async def play(self, path: str) -> None: ...

    async def stop(self) -> None: ...

    async def rename(self, old_path: str, new_name: str) -> str: ...

    async def copy(self, paths: list[str], destination: str) -> list[str]: ...

    async def list_favorites(self) -> list[str]: ...

    async def add_favorite(self, path: str) -> None: ...

    async def remove_favorite(self, path: str) -> None: ...

    def set_finished_callback(self, callback: FinishedCallback) -> None: ...

    def check_events(self) -> None: ...


def _probe_duration(path: Path) -> float | None:
    try:
        return sf.info(str(path)).duration
    except Exception:
        # Formats libsndfile cannot read still list, just without a duration.
        return None


def scan_directory(directory: str) -> list[AudioFile]:
    """Return the audio files directly inside *directory*, sorted by name."""
    base = Path(directory)
    if not base.is_dir():
        raise BackendRequestFailed("list-audio-files", "Invalid directory")
    files = [
        AudioFile(
            path=str(entry),
            name=entry.name,
            duration_seconds=_probe_duration(entry),
        )
        for entry in base.iterdir()
        if entry.is_file() and entry.suffix.lower() in AUDIO_EXTENSIONS
    ]
    files.sort(key=lambda f: f.name)
    return files


class LocalBackend:
    """Backend that works on the local filesystem and sound device."""

    def __init__(self, favorites_store: JsonFileStore, player: AudioPlayer | None = None) -> None:
        self._favorites_store = favorites_store
        self._player = player if player is not None else AudioPlayer()

    # -- listing -------------------------------------------------------------

    async def list_audio_files(self, directory: str) -> list[AudioFile]:
        try:
            return await asyncio.to_thread(scan_directory, directory)
        except OSError as exc:
            raise BackendRequestFailed("list-audio-files", str(exc)) from exc

    # -- playback ------------------------------------------------------------

    async def play(self, path: str) -> None:
        try:
            await asyncio.to_thread(self._player.play, path)
        except Exception as exc:
            raise BackendRequestFailed("play", str(exc)) from exc

    async def stop(self) -> None:
        await asyncio.to_thread(self._player.stop)

    def set_finished_callback(self, callback: FinishedCallback) -> None:
        self._player.set_end_callback(callback)

    def check_events(self) -> None:
        self._player.check_events()

    # -- files ---------------------------------------------------------------

    async def rename(self, old_path: str, new_name: str) -> str:
        try:
            new_path = await asyncio.to_thread(self._rename, old_path, new_name)
        except OSError as exc:
            raise BackendRequestFailed("rename", str(exc)) from exc
        self._player.remap(old_path, new_path)
        favorites = self._favorites_store.get_list(FAVORITES_KEY)
        if old_path in favorites:
            favorites[favorites.index(old_path)] = new_path
            self._favorites_store.set_list(FAVORITES_KEY, favorites)
        return new_path

    @staticmethod
    def _rename(old_path: str, new_name: str) -> str:
        old = Path(old_path)
        if not new_name or Path(new_name).name != new_name:
            raise BackendRequestFailed("rename", f"Invalid file name '{new_name}'")
        new = old.parent / new_name
        if new.exists() and not new.samefile(old):
            raise BackendRequestFailed("rename", f"'{new_name}' already exists")
        os.rename(old, new)
        return str(new)

    async def copy(self, paths: list[str], destination: str) -> list[str]:
        try:
            return await asyncio.to_thread(self._copy, paths, destination)
        except OSError as exc:
            raise BackendRequestFailed("copy", str(exc)) from exc

    @staticmethod
    def _copy(paths: list[str], destination: str) -> list[str]:
        dest = Path(destination)
        dest.mkdir(parents=True, exist_ok=True)
        copied = []
        for path in paths:
            src = Path(path)
            target = dest / src.name
            shutil.copy2(src, target)
            copied.append(str(target))
        return copied

    # -- favorites -----------------------------------------------------------

    async def list_favorites(self) -> list[str]:
        return self._favorites_store.get_list(FAVORITES_KEY)

    async def add_favorite(self, path: str) -> None:
        if not Path(path).is_file():
            raise BackendRequestFailed("add-favorite", f"'{path}' is not a file")
        favorites = self._favorites_store.get_list(FAVORITES_KEY)
        if path not in favorites:
            favorites.append(path)
            self._write_favorites(favorites)

    async def remove_favorite(self, path: str) -> None:
        favorites = self._favorites_store.get_list(FAVORITES_KEY)
        if path in favorites:
            favorites.remove(path)
            self._write_favorites(favorites)

    def _write_favorites(self, favorites: list[str]) -> None:
        try:
            self._favorites_store.set_list(FAVORITES_KEY, favorites)
        except OSError as exc:
            raise BackendRequestFailed("favorites", str(exc)) from exc
