from __future__ import annotations

import shutil
import uuid
from datetime import datetime
from pathlib import Path

from .errors import FilesystemError
from .logging_utils import log_info, log_warn


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def backup_file(source: Path, backup_dir: Path) -> Path:
    if not source.exists():
        raise FileNotFoundError(f"Cannot backup missing file: {source}")
    backup_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    destination = backup_dir / f"{source.stem}_{stamp}{source.suffix}.bak"
    if not destination.exists():
        shutil.copy2(source, destination)
        log_info(f"Created backup: {destination}")
    else:
        log_info(f"Backup already exists: {destination}")
    return destination


def write_text_file(path: Path, content: str) -> None:
    """Write ``content`` through a sibling temp file and swap it in."""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex[:8]}.tmp")
    try:
        with temp_path.open("w", encoding="utf-8", newline="") as writer:
            writer.write(content)
        temp_path.replace(path)
    finally:
        if temp_path.exists():
            temp_path.unlink()


def move_tree(source: Path, destination: Path) -> Path:
    if destination.exists():
        raise FilesystemError(destination, "Destination already exists")
    try:
        shutil.move(str(source), str(destination))
    except OSError as exc:
        raise FilesystemError(source, f"Failed to move folder: {exc}") from exc
    return destination


def remove_tree(path: Path) -> None:
    if not path.exists():
        return
    try:
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as exc:
        raise FilesystemError(path, f"Failed to delete: {exc}") from exc


def remove_if_empty(path: Path) -> bool:
    if not path.is_dir() or any(path.iterdir()):
        return False
    try:
        path.rmdir()
    except OSError as exc:
        log_warn(f"Could not remove empty folder {path}: {exc}")
        return False
    return True


def has_files(path: Path) -> bool:
    return any(item.is_file() for item in path.rglob("*"))
