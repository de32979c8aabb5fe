"""Playback state machine.

States
------
- idle    : nothing is playing (initial state).
- playing : exactly one file, identified by its path, is playing.

Allowed transitions
-------------------
From *idle*:
    toggle(path)            → playing(path)   (backend play succeeded)

From *playing(p)*:
    toggle(p)               → idle            (backend stop succeeded)
    toggle(q), q != p       → playing(q)      (backend play succeeded; the
                                               backend replaces the current
                                               stream, no stop is sent)
    on_finished(p)          → idle
    on_finished(q), q != p  → playing(p)      (stale event, ignored)
    remap(p, p2)            → playing(p2)     (file was renamed)

A rename that completes while a play or stop is unresolved is applied
to that request's target before the request settles the state.

A failed backend call leaves the state as it was before the toggle.
While a toggle issued from one control is unresolved, further toggles
from that same control are ignored.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable

from soundpad.inflight import InFlight

if TYPE_CHECKING:
    from soundpad.backend import Backend

logger = logging.getLogger(__name__)

Listener = Callable[[str, bool], None]


class State(Enum):
    IDLE = auto()
    PLAYING = auto()


class _Request:
    """Target of an unresolved play/stop; follows renames while pending."""

    __slots__ = ("path",)

    def __init__(self, path: str) -> None:
        self.path = path


class PlaybackController:
    """Single-output playback with per-control reentrancy guards."""

    def __init__(self, backend: Backend, inflight: InFlight | None = None) -> None:
        self._backend = backend
        self._inflight = inflight if inflight is not None else InFlight()
        self._state: State = State.IDLE
        self._current_path: str | None = None
        self._listeners: list[Listener] = []
        self._pending: list[_Request] = []

        self._backend.set_finished_callback(self.on_finished)

    # -- public properties ---------------------------------------------------

    @property
    def state(self) -> State:
        return self._state

    @property
    def current_path(self) -> str | None:
        return self._current_path

    def is_playing(self, path: str) -> bool:
        return self._state is State.PLAYING and self._current_path == path

    def add_listener(self, listener: Listener) -> None:
        """Register *listener(path, playing)* for presentation updates."""
        self._listeners.append(listener)

    # -- transitions ---------------------------------------------------------

    async def toggle(self, path: str, control: str | None = None) -> bool:
        """Stop *path* if it is playing, otherwise play it.

        *control* identifies the triggering control for the reentrancy
        guard and defaults to *path*.  Returns ``False`` when the toggle
        was ignored because that control already has a request in flight.
        Backend failures propagate after the state has been left alone.
        A rename that completes while the request is pending is applied
        to the target before the state changes.
        """
        key = control if control is not None else path
        if self._inflight.busy("toggle", key):
            logger.debug("Toggle for %s ignored, request in flight", key)
            return False

        with self._inflight.claim("toggle", key):
            request = _Request(path)
            self._pending.append(request)
            try:
                await self._resolve(request)
            finally:
                self._pending.remove(request)
        return True

    async def _resolve(self, request: _Request) -> None:
        if self.is_playing(request.path):
            await self._backend.stop()
            # A completion event may have already moved us to idle.
            if self.is_playing(request.path):
                self._go_idle()
            return

        if self._state is State.PLAYING and self._current_path is not None:
            self._emit(self._current_path, False)
        try:
            await self._backend.play(request.path)
        except Exception:
            if self._state is State.PLAYING and self._current_path is not None:
                self._emit(self._current_path, True)
            raise
        self._state = State.PLAYING
        self._current_path = request.path
        self._emit(request.path, True)

    def on_finished(self, path: str) -> None:
        """Handle a natural end-of-playback event from the backend.

        Events for anything other than the current path are stale and
        ignored.
        """
        if not self.is_playing(path):
            logger.debug("Ignoring stale completion event for %s", path)
            return
        self._go_idle()

    def remap(self, old_path: str, new_path: str) -> None:
        """Follow a rename of the playing file or of a pending target."""
        if self._current_path == old_path:
            self._current_path = new_path
        for request in self._pending:
            if request.path == old_path:
                request.path = new_path

    # -- internal helpers ----------------------------------------------------

    def _go_idle(self) -> None:
        path = self._current_path
        self._state = State.IDLE
        self._current_path = None
        if path is not None:
            self._emit(path, False)

    def _emit(self, path: str, playing: bool) -> None:
        for listener in self._listeners:
            listener(path, playing)
