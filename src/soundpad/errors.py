"""Exception types raised by the sound-pad core and its backends."""

from __future__ import annotations


class SoundPadError(Exception):
    """Base class for every failure the controller knows how to report."""


class BackendRequestFailed(SoundPadError):
    """A backend command rejected the request."""

    def __init__(self, command: str, detail: str) -> None:
        super().__init__(f"{command} failed: {detail}")
        self.command = command
        self.detail = detail


class OperationInProgressError(SoundPadError):
    """Raised when an operation on the same target is already in flight."""

    def __init__(self, kind: str, key: str) -> None:
        super().__init__(f"{kind} already in progress for '{key}'")
        self.kind = kind
        self.key = key


class SelectionError(SoundPadError):
    """Raised when selecting a path that is not in the current listing."""
