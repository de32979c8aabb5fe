"""Audio output using sounddevice and soundfile.

There is a single output channel: starting a file replaces whatever is
playing.  Natural end-of-file is reported through :meth:`check_events`
so the callback runs on the caller's thread, not the streaming thread,
and carries the path as it is at delivery time (see :meth:`AudioPlayer.remap`).
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable

import sounddevice as sd
import soundfile as sf

logger = logging.getLogger(__name__)

# Number of frames to read per chunk during streaming playback.
_BLOCK_SIZE = 2048


class AudioPlayer:
    """Streams one audio file at a time through the default output device."""

    def __init__(self) -> None:
        self._end_callback: Callable[[str], None] | None = None
        self._stop_event = threading.Event()
        # Guards _ended_stream, shared with the streaming threads.
        self._lock = threading.Lock()
        # Serialises play/stop/remap; never held by the streaming thread.
        self._control_lock = threading.Lock()
        self._current_path: str | None = None
        self._ended_stream: threading.Event | None = None
        self._playback_thread: threading.Thread | None = None

    @property
    def current_path(self) -> str | None:
        return self._current_path

    # -- playback controls ---------------------------------------------------

    def play(self, file_path: str | Path) -> None:
        """Play *file_path* from the beginning, replacing current output.

        The file is opened before anything else happens, so an unreadable
        file raises here and the current stream keeps playing.  Safe to
        call from several threads; the last call to take the lock wins.
        """
        sound = sf.SoundFile(str(file_path))
        with self._control_lock:
            self._stop_locked()
            self._stop_event = threading.Event()
            self._current_path = str(file_path)
            self._playback_thread = threading.Thread(
                target=self._stream_file,
                args=(sound, str(file_path), self._stop_event),
                daemon=True,
            )
            self._playback_thread.start()

    def stop(self) -> None:
        """Stop playback entirely.  Safe to call when nothing is playing."""
        with self._control_lock:
            self._stop_locked()

    def remap(self, old_path: str, new_path: str) -> None:
        """Follow a rename of the file being played."""
        with self._control_lock:
            if self._current_path == old_path:
                self._current_path = new_path

    def _stop_locked(self) -> None:
        self._stop_event.set()
        if self._playback_thread is not None:
            self._playback_thread.join(timeout=2.0)
            self._playback_thread = None
        self._current_path = None

    # -- end-of-track callback -----------------------------------------------

    def set_end_callback(self, callback: Callable[[str], None]) -> None:
        """Register *callback(path)* invoked when a file finishes playing."""
        self._end_callback = callback

    def check_events(self) -> None:
        """Fire the end callback if the current file finished.

        Must be called periodically (e.g. from the main loop).
        """
        with self._lock:
            ended, self._ended_stream = self._ended_stream, None
        path = self._current_path
        if ended is None or ended is not self._stop_event or path is None:
            return
        self._current_path = None
        if self._end_callback is not None:
            self._end_callback(path)

    # -- internal ------------------------------------------------------------

    def _stream_file(
        self, sound: sf.SoundFile, path: str, stop_event: threading.Event
    ) -> None:
        """Worker that streams *sound* through an output stream."""
        try:
            with sound:
                stream = sd.OutputStream(
                    samplerate=sound.samplerate,
                    channels=sound.channels,
                    dtype="float32",
                )
                stream.start()
                try:
                    while not stop_event.is_set():
                        data = sound.read(_BLOCK_SIZE, dtype="float32")
                        if len(data) == 0:
                            break
                        stream.write(data)
                finally:
                    stream.stop()
                    stream.close()
        except Exception:
            logger.exception("Playback of %s failed", path)

        # Only signal the end when nothing asked playback to stop.
        if not stop_event.is_set():
            with self._lock:
                self._ended_stream = stop_event
