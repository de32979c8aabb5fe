"""Multi-file operations over the current selection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from soundpad.errors import SoundPadError

if TYPE_CHECKING:
    from soundpad.backend import Backend
    from soundpad.library import AudioLibrary

logger = logging.getLogger(__name__)


def split_extension(name: str) -> tuple[str, str]:
    """Split *name* at its last dot into ``(base, extension)``.

    A name without a dot is all base with an empty extension.
    """
    base, dot, extension = name.rpartition(".")
    if not dot:
        return name, ""
    return base, extension


def affixed_name(name: str, prefix: str, suffix: str) -> str:
    """Wrap the base of *name* in *prefix*/*suffix*, keeping the extension."""
    base, extension = split_extension(name)
    if not extension:
        return f"{prefix}{base}{suffix}"
    return f"{prefix}{base}{suffix}.{extension}"


@dataclass
class BatchRenameResult:
    renamed: list[tuple[str, str]] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)


class BatchOperationRunner:
    """Sequential rename/copy over whatever is selected."""

    def __init__(self, library: AudioLibrary, backend: Backend) -> None:
        self._library = library
        self._backend = backend
        self._last_copy_destination: str | None = None

    @property
    def last_copy_destination(self) -> str | None:
        return self._last_copy_destination

    async def rename_selected(self, prefix: str, suffix: str) -> BatchRenameResult:
        """Rename each selected file to ``prefix + base + suffix + .ext``.

        The selection is snapshotted first.  Each file is renamed on its
        own; a failure is logged and the loop carries on.
        """
        if not prefix and not suffix:
            raise ValueError("A prefix or a suffix is required.")

        result = BatchRenameResult()
        for path in sorted(self._library.selection):
            audio_file = self._library.find(path)
            if audio_file is None:
                continue
            new_name = affixed_name(audio_file.name, prefix, suffix)
            try:
                new_path = await self._library.rename(path, new_name)
            except SoundPadError as exc:
                logger.warning("Batch rename of %s failed: %s", audio_file.name, exc)
                result.failed.append((path, str(exc)))
                continue
            result.renamed.append((path, new_path))
        return result

    async def copy_selected(self, destination: str) -> int:
        """Copy every selected path to *destination*; return how many.

        All or nothing: the destination is only remembered on success.
        """
        paths = sorted(self._library.selection)
        if not paths:
            return 0
        await self._backend.copy(paths, destination)
        self._last_copy_destination = destination
        logger.info("Copied %d files to %s", len(paths), destination)
        return len(paths)
