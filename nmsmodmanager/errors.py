"""Exception types raised by the mod manager core.

Every failure propagates to the caller; nothing here is retried
automatically. Archives that cannot be classified are not errors, they
surface as a messy install outcome instead.
"""

from __future__ import annotations

from pathlib import Path


class ModManagerError(Exception):
    """Base class for all mod manager failures."""


class ParseError(ModManagerError):
    """Settings text is not well-formed markup."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class ArchiveError(ModManagerError):
    """An archive could not be opened or extracted."""

    def __init__(self, archive: Path, message: str) -> None:
        super().__init__(f"{archive.name}: {message}")
        self.archive = archive


class FilesystemError(ModManagerError):
    """A move or delete inside the mods folder failed."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{message} ({path})")
        self.path = path


class PersistError(ModManagerError):
    """The settings file could not be read or written back."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{message} ({path})")
        self.path = path


class UsageError(ModManagerError, ValueError):
    """An operation was called with arguments it cannot act on."""


__all__ = [
    "ModManagerError",
    "ParseError",
    "ArchiveError",
    "FilesystemError",
    "PersistError",
    "UsageError",
]
