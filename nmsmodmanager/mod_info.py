from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

import requests

from .file_utils import write_text_file
from .logging_utils import log_debug, log_info, log_warn
from .models import ModInfo, UpdateInfo

MOD_INFO_FILENAME = "mod_info.json"
_FETCH_TIMEOUT = 10


def read_mod_info(mod_dir: Path) -> ModInfo | None:
    """Read ``mod_info.json`` from a mod folder, or None when absent/invalid."""

    info_path = mod_dir / MOD_INFO_FILENAME
    if not info_path.is_file():
        return None
    try:
        data = json.loads(info_path.read_text(encoding="utf-8-sig"))
    except (OSError, ValueError) as exc:
        log_warn(f"Unreadable {info_path}: {exc}")
        return None
    if not isinstance(data, dict):
        return None
    return ModInfo(
        mod_id=str(data.get("id") or ""),
        name=str(data.get("name") or mod_dir.name),
        author=str(data.get("author") or "Unknown"),
        version=str(data.get("version") or ""),
        description=str(data.get("description") or ""),
        folder=mod_dir,
    )


def _read_cache(cache_path: Path) -> Dict[str, Any] | None:
    if not cache_path.is_file():
        return None
    try:
        data = json.loads(cache_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log_warn(f"Failed to parse cached mod database: {exc}")
        return None
    return data if isinstance(data, dict) else None


def _db_version(database: Dict[str, Any] | None) -> float:
    if not database:
        return float("-inf")
    try:
        return float(database.get("version", float("-inf")))
    except (TypeError, ValueError):
        return float("-inf")


def load_mod_database(url: str, cache_path: Path, offline: bool = False) -> Dict[str, Any] | None:
    """Return the mod database, refreshing the cache when the remote is newer.

    A failed download falls back to the cached copy (possibly None).
    """

    cached = _read_cache(cache_path)
    if cached is not None:
        log_debug(f"Loaded cached mod database version: {cached.get('version')}")
    if offline:
        return cached

    try:
        resp = requests.get(url, timeout=_FETCH_TIMEOUT)
        resp.raise_for_status()
        remote = resp.json()
    except (requests.RequestException, ValueError) as exc:
        log_warn(f"Failed to fetch remote mod database, using cache if available: {exc}")
        return cached

    if not isinstance(remote, dict):
        log_warn("Remote mod database has an unexpected shape; using cache.")
        return cached
    if cached is None or _db_version(remote) > _db_version(cached):
        log_info(f"Mod database updated to version {remote.get('version')}.")
        try:
            write_text_file(cache_path, json.dumps(remote, indent=2))
        except OSError as exc:
            log_warn(f"Could not write mod database cache: {exc}")
        return remote
    return cached


def _index_database(database: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    index: Dict[str, Dict[str, Any]] = {}
    for record in database.get("mods", []) or []:
        if isinstance(record, dict) and record.get("id") is not None:
            index[str(record["id"])] = record
    return index


def check_for_updates(
    mods_root: Path,
    folder_names: Iterable[str],
    database: Dict[str, Any] | None,
) -> List[UpdateInfo]:
    """List installed mods whose version differs from the database's latest."""

    if not database:
        return []
    records = _index_database(database)
    updates: List[UpdateInfo] = []
    for folder_name in folder_names:
        info = read_mod_info(mods_root / folder_name)
        if info is None or not info.mod_id or not info.version:
            continue
        record = records.get(info.mod_id)
        if record is None:
            continue
        latest = str(record.get("latest_version") or "")
        if latest and latest != info.version:
            updates.append(
                UpdateInfo(
                    folder_name=folder_name,
                    name=info.name,
                    installed=info.version,
                    latest=latest,
                    nexus_url=record.get("nexus_url"),
                )
            )
    return updates
