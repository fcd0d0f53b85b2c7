from __future__ import annotations

import tempfile
import zipfile
import zlib
from pathlib import Path

import py7zr
import rarfile
from py7zr.exceptions import ArchiveError as SevenZipError

from .errors import ArchiveError
from .file_utils import ensure_directory, remove_tree
from .logging_utils import log_debug

SUPPORTED_SUFFIXES = (".zip", ".rar", ".7z")
EXTRACT_PREFIX = "temp_extract_"


def is_supported_archive(path: Path) -> bool:
    return path.suffix.lower() in SUPPORTED_SUFFIXES


def _check_member_paths(names: list[str], target: Path, archive: Path) -> None:
    root = target.resolve()
    for name in names:
        destination = (root / name).resolve()
        if destination != root and root not in destination.parents:
            raise ArchiveError(archive, f"Entry escapes the extraction folder: {name}")


def _extract_zip(archive: Path, target: Path) -> None:
    with zipfile.ZipFile(archive, "r") as handle:
        _check_member_paths(handle.namelist(), target, archive)
        handle.extractall(target)


def _extract_rar(archive: Path, target: Path) -> None:
    with rarfile.RarFile(archive, "r") as handle:
        _check_member_paths(handle.namelist(), target, archive)
        handle.extractall(target)


def _extract_7z(archive: Path, target: Path) -> None:
    with py7zr.SevenZipFile(archive, "r") as handle:
        _check_member_paths(handle.getnames(), target, archive)
        handle.extractall(path=target)


_EXTRACTORS = {
    ".zip": _extract_zip,
    ".rar": _extract_rar,
    ".7z": _extract_7z,
}

_ARCHIVE_FAILURES = (
    OSError,
    EOFError,
    ValueError,
    RuntimeError,
    zlib.error,
    zipfile.BadZipFile,
    rarfile.Error,
    SevenZipError,
)


def extract_archive(archive: Path, staging_root: Path) -> Path:
    """Expand ``archive`` into a new folder under ``staging_root``.

    Every call gets its own folder, so parallel extractions never share
    one. A failed extraction leaves nothing behind.
    """

    if not archive.is_file():
        raise ArchiveError(archive, "Archive file not found")
    extractor = _EXTRACTORS.get(archive.suffix.lower())
    if extractor is None:
        raise ArchiveError(archive, f"Unsupported file type: {archive.suffix or '(none)'}")

    ensure_directory(staging_root)
    target = Path(tempfile.mkdtemp(prefix=EXTRACT_PREFIX, dir=staging_root))
    try:
        extractor(archive, target)
    except ArchiveError:
        remove_tree(target)
        raise
    except _ARCHIVE_FAILURES as exc:
        remove_tree(target)
        raise ArchiveError(archive, f"Failed to read archive: {exc}") from exc
    log_debug(f"Extracted {archive.name} to {target}")
    return target


__all__ = ["extract_archive", "is_supported_archive", "SUPPORTED_SUFFIXES"]
