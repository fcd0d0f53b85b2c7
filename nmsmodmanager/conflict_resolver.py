from __future__ import annotations

import uuid
from pathlib import Path

from .errors import FilesystemError
from .file_utils import move_tree, remove_if_empty, remove_tree
from .install_pipeline import STAGING_PREFIX, find_installed_folder
from .logging_utils import log_info, log_warn
from .models import Resolution


def _set_aside(installed: Path) -> Path:
    aside = installed.with_name(f".{installed.name}.replaced-{uuid.uuid4().hex[:8]}")
    try:
        installed.rename(aside)
    except OSError as exc:
        raise FilesystemError(installed, f"Failed to move old mod out of the way: {exc}") from exc
    return aside


def _replace(installed: Path, staged: Path) -> None:
    aside = _set_aside(installed) if installed.exists() else None
    try:
        move_tree(staged, installed)
    except FilesystemError:
        if aside is not None:
            if installed.exists():
                remove_tree(installed)
            aside.rename(installed)
        raise
    if aside is not None:
        try:
            remove_tree(aside)
        except FilesystemError as exc:
            log_warn(f"Old copy left behind: {exc}", indent=2)


def resolve_conflict(mods_root: Path, name: str, staged_path: Path, replace: bool) -> Resolution:
    """Apply the user's replace/keep decision for a staged conflict.

    On replace the installed folder is renamed aside before the new one
    moves in, and only deleted once the move succeeded; a failed move puts
    it back. On keep the staged copy is discarded.
    """

    installed = find_installed_folder(mods_root, name) or mods_root / name
    if replace:
        if not staged_path.exists():
            raise FilesystemError(staged_path, "Staged mod folder not found")
        _replace(installed, staged_path)
        resolution = Resolution.REPLACED
        log_info(f"Mod '{name}' was updated.")
    else:
        remove_tree(staged_path)
        resolution = Resolution.KEPT
        log_info(f"Update for mod '{name}' was cancelled.")

    parent = staged_path.parent
    if parent != mods_root and parent.name.startswith(STAGING_PREFIX):
        remove_if_empty(parent)
    return resolution


__all__ = ["resolve_conflict"]
