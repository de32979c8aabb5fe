"""Load soundpad configuration from a TOML file."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

DEFAULT_CONFIG_PATH = Path("~/.config/soundpad/soundpad.toml").expanduser()
DEFAULT_STATE_FILE = "~/.config/soundpad/state.json"
DEFAULT_FAVORITES_FILE = "~/.config/soundpad/favorites.json"


@dataclass
class Config:
    """Soundpad configuration."""

    music_dir: str | None = None
    state_file: str = DEFAULT_STATE_FILE
    favorites_file: str = DEFAULT_FAVORITES_FILE
    history_size: int = 10
    log_level: str = "WARNING"


def load_config(path: Path | str) -> Config:
    """Load configuration from a TOML file.

    Returns a :class:`Config` with defaults for any missing keys.
    If the file does not exist, returns a default :class:`Config`.
    """
    path = Path(path)
    if not path.is_file():
        return Config()

    with open(path, "rb") as f:
        data = tomllib.load(f)

    history_size = data.get("history-size", Config.history_size)
    if not isinstance(history_size, int) or history_size < 1:
        raise ValueError(f"history-size must be a positive integer, got {history_size!r}")

    return Config(
        music_dir=data.get("music-dir", Config.music_dir),
        state_file=data.get("state-file", Config.state_file),
        favorites_file=data.get("favorites-file", Config.favorites_file),
        history_size=history_size,
        log_level=str(data.get("log-level", Config.log_level)).upper(),
    )
