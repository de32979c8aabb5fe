"""Tests for the local filesystem backend."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from soundpad.controller import SoundPadController
from soundpad.errors import BackendRequestFailed
from soundpad.registry import PathRegistry
from soundpad.state import OpenFolder, Rename, TogglePlay
from soundpad.storage import FAVORITES_KEY, JsonFileStore

sd_mock = MagicMock()
sf_mock = MagicMock()
with patch.dict("sys.modules", {"sounddevice": sd_mock, "soundfile": sf_mock}):
    from soundpad.audio import AudioPlayer
    from soundpad.backend import LocalBackend, scan_directory


@pytest.fixture()
def folder(tmp_path):
    sounds = tmp_path / "sounds"
    sounds.mkdir()
    (sounds / "b.WAV").touch()
    (sounds / "a.mp3").touch()
    (sounds / "notes.txt").touch()
    (sounds / "nested").mkdir()
    (sounds / "nested" / "deep.wav").touch()
    return sounds


@pytest.fixture()
def store(tmp_path):
    return JsonFileStore(tmp_path / "favorites.json")


@pytest.fixture()
def audio():
    return MagicMock()


@pytest.fixture()
def local(store, audio):
    sf_mock.reset_mock()
    sf_mock.info.side_effect = None
    sf_mock.info.return_value.duration = 1.5
    return LocalBackend(store, player=audio)


class TestListing:
    def test_lists_audio_files_sorted_non_recursive(self, local, folder):
        files = asyncio.run(local.list_audio_files(str(folder)))
        assert [f.name for f in files] == ["a.mp3", "b.WAV"]
        assert files[0].path == str(folder / "a.mp3")
        assert files[0].duration_seconds == 1.5

    def test_unprobeable_duration_is_none(self, local, folder):
        sf_mock.info.side_effect = RuntimeError("cannot decode")
        files = asyncio.run(local.list_audio_files(str(folder)))
        assert all(f.duration_seconds is None for f in files)

    def test_invalid_directory(self, local, tmp_path):
        with pytest.raises(BackendRequestFailed, match="Invalid directory"):
            asyncio.run(local.list_audio_files(str(tmp_path / "nope")))

    def test_scan_directory_empty(self, tmp_path):
        assert scan_directory(str(tmp_path)) == []


class TestPlayback:
    def test_play_and_stop_delegate(self, local, audio):
        asyncio.run(local.play("/a.wav"))
        asyncio.run(local.stop())
        audio.play.assert_called_once_with("/a.wav")
        audio.stop.assert_called_once()

    def test_play_failure_wrapped(self, local, audio):
        audio.play.side_effect = RuntimeError("unsupported")
        with pytest.raises(BackendRequestFailed) as excinfo:
            asyncio.run(local.play("/a.xyz"))
        assert excinfo.value.command == "play"

    def test_events_forwarded(self, local, audio):
        callback = MagicMock()
        local.set_finished_callback(callback)
        local.check_events()
        audio.set_end_callback.assert_called_once_with(callback)
        audio.check_events.assert_called_once()


class TestRename:
    def test_rename_returns_new_path(self, local, folder):
        new_path = asyncio.run(local.rename(str(folder / "a.mp3"), "kick.mp3"))
        assert new_path == str(folder / "kick.mp3")
        assert (folder / "kick.mp3").exists()
        assert not (folder / "a.mp3").exists()

    def test_refuses_to_overwrite(self, local, folder):
        with pytest.raises(BackendRequestFailed, match="already exists"):
            asyncio.run(local.rename(str(folder / "a.mp3"), "b.WAV"))
        assert (folder / "a.mp3").exists()

    def test_rejects_path_separators(self, local, folder):
        with pytest.raises(BackendRequestFailed):
            asyncio.run(local.rename(str(folder / "a.mp3"), "../escape.mp3"))

    def test_missing_source(self, local, folder):
        with pytest.raises(BackendRequestFailed):
            asyncio.run(local.rename(str(folder / "ghost.mp3"), "x.mp3"))

    def test_remaps_player(self, local, folder, audio):
        old = str(folder / "a.mp3")
        new = asyncio.run(local.rename(old, "kick.mp3"))
        audio.remap.assert_called_once_with(old, new)

    def test_failed_rename_leaves_player_alone(self, local, folder, audio):
        with pytest.raises(BackendRequestFailed):
            asyncio.run(local.rename(str(folder / "ghost.mp3"), "x.mp3"))
        audio.remap.assert_not_called()

    def test_migrates_favorite(self, local, folder, store):
        old = str(folder / "a.mp3")
        asyncio.run(local.add_favorite(old))
        new = asyncio.run(local.rename(old, "kick.mp3"))
        assert store.get_list(FAVORITES_KEY) == [new]


class TestCopy:
    def test_copies_into_new_destination(self, local, folder, tmp_path):
        dest = tmp_path / "out" / "clips"
        copied = asyncio.run(local.copy([str(folder / "a.mp3")], str(dest)))
        assert copied == [str(dest / "a.mp3")]
        assert (dest / "a.mp3").exists()

    def test_missing_source_fails(self, local, folder, tmp_path):
        with pytest.raises(BackendRequestFailed):
            asyncio.run(local.copy([str(folder / "ghost.mp3")], str(tmp_path / "out")))


class TestFavorites:
    def test_add_list_remove(self, local, folder):
        path = str(folder / "a.mp3")
        asyncio.run(local.add_favorite(path))
        asyncio.run(local.add_favorite(path))
        assert asyncio.run(local.list_favorites()) == [path]
        asyncio.run(local.remove_favorite(path))
        assert asyncio.run(local.list_favorites()) == []

    def test_add_missing_file_fails(self, local, folder):
        with pytest.raises(BackendRequestFailed):
            asyncio.run(local.add_favorite(str(folder / "ghost.mp3")))

    def test_remove_absent_is_tolerated(self, local):
        asyncio.run(local.remove_favorite("/never/added.wav"))


class TestRenameWhilePlaying:
    @pytest.fixture()
    def player(self):
        sf_mock.reset_mock()
        sf_mock.SoundFile.side_effect = None
        sf_mock.info.side_effect = RuntimeError("no probe")
        sd_mock.OutputStream.side_effect = None
        return AudioPlayer()

    def test_natural_end_after_rename_returns_to_idle(self, player, folder, store, tmp_path):
        local = LocalBackend(store, player=player)
        controller = SoundPadController(local, PathRegistry(JsonFileStore(tmp_path / "state.json")))
        old = str(folder / "a.mp3")
        new = str(folder / "kick.mp3")

        async def scenario():
            await controller.dispatch(OpenFolder(str(folder)))
            await controller.dispatch(TogglePlay(old))
            return await controller.dispatch(Rename(old, "kick.mp3"))

        state = asyncio.run(scenario())
        assert state.playing == new
        player._playback_thread.join(timeout=2.0)
        local.check_events()
        assert controller.snapshot().playing is None

    def test_concurrent_plays_both_succeed(self, player, folder, store):
        local = LocalBackend(store, player=player)

        async def scenario():
            return await asyncio.gather(
                local.play(str(folder / "a.mp3")),
                local.play(str(folder / "b.WAV")),
                return_exceptions=True,
            )

        assert asyncio.run(scenario()) == [None, None]
        player.stop()
