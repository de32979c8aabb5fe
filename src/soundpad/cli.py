"""Simple interactive CLI for the soundpad controller."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from soundpad.backend import LocalBackend
from soundpad.config import DEFAULT_CONFIG_PATH, load_config
from soundpad.controller import SoundPadController
from soundpad.registry import PathRegistry
from soundpad.state import (
    AddBookmark,
    ClearSelection,
    CopySelected,
    OpenFolder,
    OpenLastCopyDestination,
    PickFolder,
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
from soundpad.storage import JsonFileStore

HELP = (
    "Available commands: open <dir>, pick, ls, search [query], favs on|off,\n"
    "  select <n>, clear, play <n>, rename <n> <name>, batch <prefix> [suffix],\n"
    "  copy [dir], goto-copy, bookmark [dir], unbookmark <dir>, history,\n"
    "  bookmarks, fav <n>, status, help, quit"
)


def folder_label(path: str, max_length: int = 20) -> str:
    """Last segment of *path*, cut to *max_length* characters."""
    name = path.replace("\\", "/").rstrip("/").split("/")[-1] or path
    if len(name) <= max_length:
        return name
    return name[:max_length] + "..."


def _format_duration(seconds: float | None) -> str:
    if seconds is None:
        return "--:--"
    minutes, secs = divmod(int(round(seconds)), 60)
    return f"{minutes}:{secs:02d}"


def _print_listing(state: SoundPadState) -> None:
    if not state.listing:
        print("  No audio files in this folder.")
        return
    if not state.visible:
        print("  Nothing matches the current search.")
        return
    for index, audio_file in enumerate(state.visible, start=1):
        marks = (
            ("*" if audio_file.path in state.selection else " ")
            + (">" if audio_file.path == state.playing else " ")
            + ("+" if audio_file.path in state.favorites else " ")
        )
        print(f"  {index:3d} [{marks}] {audio_file.name}  {_format_duration(audio_file.duration_seconds)}")


def _print_status(state: SoundPadState) -> None:
    playing = Path(state.playing).name if state.playing else "–"
    print(
        f"  folder: {state.folder or '–'}"
        f"  files: {len(state.visible)}/{len(state.listing)}"
        f"  selected: {len(state.selection)}"
        f"  playing: {playing}"
    )


def _print_paths(paths: tuple[str, ...], empty: str) -> None:
    if not paths:
        print(f"  {empty}")
    for path in paths:
        print(f"  {folder_label(path):24s} {path}")


def _resolve(state: SoundPadState, arg: str | None) -> str:
    """Map a 1-based index into the visible list to a file path."""
    if arg is None:
        raise ValueError("A file number is required.")
    try:
        index = int(arg)
    except ValueError:
        raise ValueError(f"Not a file number: {arg!r}") from None
    if not 1 <= index <= len(state.visible):
        raise ValueError(f"No file number {index} in the current view.")
    return state.visible[index - 1].path


async def _prompt(text: str) -> str:
    return (await asyncio.to_thread(input, text)).strip()


async def _pick_folder() -> str | None:
    path = await _prompt("  folder (empty to cancel): ")
    return path or None


def _on_playback(path: str, playing: bool) -> None:
    print(f"  {'playing' if playing else 'stopped'}: {Path(path).name}")


async def _interactive(controller: SoundPadController, backend: LocalBackend, music_dir: str | None) -> None:
    state = await controller.start(music_dir)

    print("soundpad – interactive mode")
    print(HELP)
    print()

    while True:
        try:
            raw = await _prompt("soundpad> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break

        backend.check_events()
        state = controller.snapshot()

        if not raw:
            continue

        parts = raw.split(maxsplit=1)
        cmd = parts[0].lower()
        arg = parts[1] if len(parts) > 1 else None

        try:
            if cmd == "quit":
                break
            elif cmd == "help":
                print(HELP)
            elif cmd == "open":
                if arg is None:
                    raise ValueError("open needs a folder path.")
                state = await controller.dispatch(OpenFolder(arg))
                _print_listing(state)
            elif cmd == "pick":
                state = await controller.dispatch(PickFolder())
                _print_listing(state)
            elif cmd == "ls":
                _print_listing(state)
            elif cmd == "search":
                state = await controller.dispatch(SetQuery(arg or ""))
                _print_listing(state)
            elif cmd == "favs":
                state = await controller.dispatch(SetViewMode(arg == "on"))
                _print_listing(state)
            elif cmd == "select":
                state = await controller.dispatch(ToggleSelect(_resolve(state, arg)))
                _print_status(state)
            elif cmd == "clear":
                state = await controller.dispatch(ClearSelection())
                _print_status(state)
            elif cmd == "play":
                path = _resolve(state, arg)
                state = await controller.dispatch(TogglePlay(path))
            elif cmd == "rename":
                number, _, new_name = (arg or "").partition(" ")
                state = await controller.dispatch(Rename(_resolve(state, number), new_name))
                _print_listing(state)
            elif cmd == "batch":
                prefix, _, suffix = (arg or "").partition(" ")
                state = await controller.dispatch(RenameSelected(prefix, suffix))
                _print_listing(state)
            elif cmd == "copy":
                state = await controller.dispatch(CopySelected(arg))
            elif cmd == "goto-copy":
                state = await controller.dispatch(OpenLastCopyDestination())
                _print_listing(state)
            elif cmd == "bookmark":
                state = await controller.dispatch(AddBookmark(arg))
                _print_paths(state.bookmarks, "No bookmarks.")
            elif cmd == "unbookmark":
                if arg is None:
                    raise ValueError("unbookmark needs a folder path.")
                state = await controller.dispatch(RemoveBookmark(arg))
                _print_paths(state.bookmarks, "No bookmarks.")
            elif cmd == "history":
                _print_paths(state.history, "No history.")
            elif cmd == "bookmarks":
                _print_paths(state.bookmarks, "No bookmarks.")
            elif cmd == "fav":
                state = await controller.dispatch(ToggleFavorite(_resolve(state, arg)))
                _print_listing(state)
            elif cmd == "status":
                _print_status(state)
            else:
                print(f"  Unknown command: {cmd}")
        except ValueError as exc:
            print(f"  Error: {exc}")

    if state.playing is not None:
        await backend.stop()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="soundpad – browse, play and organise a folder of sounds",
    )
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help=f"Path to TOML config file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--music-dir",
        default=None,
        help="Folder to open at startup",
    )
    parser.add_argument(
        "--state-file",
        default=None,
        help="JSON file for folder history and bookmarks",
    )
    parser.add_argument(
        "--favorites-file",
        default=None,
        help="JSON file for favorite sounds",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    args = parser.parse_args(argv)

    # Load config file (silently skip if not found)
    cfg = load_config(args.config)

    # CLI flags override config values (only when explicitly provided)
    music_dir = args.music_dir if args.music_dir is not None else cfg.music_dir
    state_file = args.state_file if args.state_file is not None else cfg.state_file
    favorites_file = args.favorites_file if args.favorites_file is not None else cfg.favorites_file
    log_level = args.log_level if args.log_level is not None else cfg.log_level

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    backend = LocalBackend(JsonFileStore(favorites_file))
    controller = SoundPadController(
        backend,
        PathRegistry(JsonFileStore(state_file), history_size=cfg.history_size),
        picker=_pick_folder,
        notify=lambda message: print(f"  {message}"),
    )
    controller.playback.add_listener(_on_playback)

    try:
        asyncio.run(_interactive(controller, backend, music_dir))
    except KeyboardInterrupt:
        print()


if __name__ == "__main__":
    main()
