"""Bookkeeping for backend requests that have not resolved yet."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from soundpad.errors import OperationInProgressError


class InFlight:
    """Set of ``(kind, key)`` pairs with a request outstanding."""

    def __init__(self) -> None:
        self._pending: set[tuple[str, str]] = set()

    def busy(self, kind: str, key: str) -> bool:
        return (kind, key) in self._pending

    @contextmanager
    def claim(self, kind: str, key: str) -> Iterator[None]:
        """Hold ``(kind, key)`` for the duration of the block.

        Raises :class:`OperationInProgressError` if it is already held.
        """
        if (kind, key) in self._pending:
            raise OperationInProgressError(kind, key)
        self._pending.add((kind, key))
        try:
            yield
        finally:
            self._pending.discard((kind, key))
