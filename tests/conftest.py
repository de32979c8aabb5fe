"""Shared fixtures: an in-memory backend that records every command."""

from __future__ import annotations

import asyncio
from pathlib import PurePosixPath

import pytest

from soundpad.errors import BackendRequestFailed
from soundpad.library import AudioFile


class FakeBackend:
    """Backend double.

    ``fail`` names commands that should reject; ``gates`` maps a command
    to an :class:`asyncio.Event` the call waits on before resolving.
    """

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.listings: dict[str, list[AudioFile]] = {}
        self.favorites: list[str] = []
        self.fail: set[str] = set()
        self.fail_paths: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}
        self.finished_callback = None

    def count(self, command: str) -> int:
        return sum(1 for call in self.calls if call[0] == command)

    async def _enter(self, command: str, *args) -> None:
        self.calls.append((command, *args))
        gate = self.gates.get(command)
        if gate is not None:
            await gate.wait()
        if command in self.fail or (args and isinstance(args[0], str) and args[0] in self.fail_paths):
            raise BackendRequestFailed(command, "simulated failure")

    async def list_audio_files(self, directory):
        await self._enter("list-audio-files", directory)
        if directory not in self.listings:
            raise BackendRequestFailed("list-audio-files", "Invalid directory")
        return [f.copy() for f in self.listings[directory]]

    async def play(self, path):
        await self._enter("play", path)

    async def stop(self):
        await self._enter("stop")

    async def rename(self, old_path, new_name):
        await self._enter("rename", old_path, new_name)
        return str(PurePosixPath(old_path).parent / new_name)

    async def copy(self, paths, destination):
        await self._enter("copy", list(paths), destination)
        return [str(PurePosixPath(destination) / PurePosixPath(p).name) for p in paths]

    async def list_favorites(self):
        await self._enter("list-favorites")
        return list(self.favorites)

    async def add_favorite(self, path):
        await self._enter("add-favorite", path)
        if path not in self.favorites:
            self.favorites.append(path)

    async def remove_favorite(self, path):
        await self._enter("remove-favorite", path)
        if path in self.favorites:
            self.favorites.remove(path)

    def set_finished_callback(self, callback):
        self.finished_callback = callback

    def check_events(self):
        pass


def make_files(*names: str, folder: str = "/sounds") -> list[AudioFile]:
    return [AudioFile(path=f"{folder}/{name}", name=name) for name in names]


@pytest.fixture()
def backend():
    fake = FakeBackend()
    fake.listings["/sounds"] = make_files("a.wav", "b.wav", "c.mp3", "Report_final.wav")
    fake.listings["/other"] = make_files("x.ogg", folder="/other")
    return fake
