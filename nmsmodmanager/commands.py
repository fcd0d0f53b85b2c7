"""
Command boundary between a front end and the mod manager core.

A front end keeps one ModManager. Every registry change goes through it
under a single lock, so the settings file has exactly one writer. Dropped
archives are queued and installed one at a time by a background worker in
the order they arrived.
"""

from __future__ import annotations

import os
import queue
import subprocess
import sys
import threading
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from .archive_extractor import EXTRACT_PREFIX, is_supported_archive
from .conflict_resolver import resolve_conflict as _resolve_conflict
from .errors import ModManagerError, PersistError, UsageError
from .file_utils import ensure_directory, remove_tree, write_text_file
from .game_paths import find_game_path, mods_path, settings_file_path
from .install_pipeline import (
    STAGING_PREFIX,
    cleanup_staging,
    finalize_installation,
    find_installed_folder,
    install_archive,
)
from .load_config import ProgramConfig
from .logging_utils import log_debug, log_error, log_info, log_warn
from .mod_info import check_for_updates as _check_for_updates
from .mod_info import load_mod_database
from .models import InstallReport, Resolution, UpdateInfo
from .registry import ModRegistry
from .session import SettingsSession

DropCallback = Callable[[Path, Optional[InstallReport], Optional[ModManagerError]], None]


class ModManager:
    def __init__(self, config: ProgramConfig | None = None, session: SettingsSession | None = None) -> None:
        self.config = config or ProgramConfig()
        self.session = session
        self._lock = threading.RLock()
        self._reorder_active = False
        self._drops: "queue.Queue[tuple[Path, DropCallback | None] | None]" = queue.Queue()
        self._worker: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Paths and settings file
    # ------------------------------------------------------------------

    def get_game_path(self) -> Path | None:
        return find_game_path(self.config.game_path)

    def _require_game_path(self) -> Path:
        game_path = self.get_game_path()
        if game_path is None:
            raise UsageError("Could not find the game installation path.")
        return game_path

    @property
    def mods_root(self) -> Path:
        if self.config.mods_dir is not None:
            return self.config.mods_dir
        return mods_path(self._require_game_path())

    @property
    def settings_path(self) -> Path:
        if self.config.settings_file is not None:
            return self.config.settings_file
        return settings_file_path(self._require_game_path())

    def load_settings(self, path: Path | None = None) -> SettingsSession:
        with self._lock:
            self.session = SettingsSession.load(path or self.settings_path, backup_dir=self.config.backup_dir)
        return self.session

    @property
    def registry(self) -> ModRegistry:
        if self.session is None:
            raise UsageError("Load a GCMODSETTINGS file first.")
        return ModRegistry(self.session)

    def save_file(self, path: Path, content: str) -> None:
        try:
            write_text_file(path, content)
        except OSError as exc:
            raise PersistError(path, f"Failed to write file: {exc}") from exc

    def delete_settings_file(self) -> bool:
        """Troubleshooting reset: delete the settings file so the game rebuilds it."""
        with self._lock:
            path = self.settings_path
            self.session = None
            if not path.exists():
                log_warn(f"Settings file {path} not found.")
                return False
            try:
                path.unlink()
            except OSError as exc:
                raise PersistError(path, f"Failed to delete settings file: {exc}") from exc
            log_info(f"Deleted {path}.")
            return True

    def open_mods_folder(self) -> Path:
        folder = self.mods_root
        ensure_directory(folder)
        if sys.platform == "win32":
            os.startfile(folder)  # type: ignore[attr-defined]
        elif sys.platform == "darwin":
            subprocess.Popen(["open", str(folder)])
        else:
            subprocess.Popen(["xdg-open", str(folder)])
        return folder

    def installed_folders(self) -> List[str]:
        root = self.mods_root
        if not root.is_dir():
            return []
        return sorted(
            entry.name
            for entry in root.iterdir()
            if entry.is_dir()
            and not entry.name.startswith((".", EXTRACT_PREFIX, STAGING_PREFIX))
        )

    # ------------------------------------------------------------------
    # Installation
    # ------------------------------------------------------------------

    def install_mod_from_archive(self, archive: Path) -> InstallReport:
        registry = self.registry
        with self._lock:
            installed = registry.names()
        report = install_archive(archive, self.mods_root, installed_names=installed)
        with self._lock:
            for success in report.successes:
                registry.add(success.name)
        return report

    def finalize_mod_installation(self, staging_path: Path, name: str) -> Path:
        registry = self.registry
        with self._lock:
            destination = finalize_installation(staging_path, name, self.mods_root)
            registry.add(destination.name)
        return destination

    def cleanup_temp_folder(self, path: Path) -> None:
        cleanup_staging(path)

    def resolve_conflict(self, name: str, staging_path: Path, replace: bool) -> Resolution:
        registry = self.registry
        with self._lock:
            resolution = _resolve_conflict(self.mods_root, name, staging_path, replace)
            if resolution is Resolution.REPLACED and name not in registry:
                registry.add(name)
        return resolution

    def delete_mod(self, name: str) -> str:
        """Remove the mod's folder and entry; returns the rewritten settings text."""
        registry = self.registry
        with self._lock:
            folder = find_installed_folder(self.mods_root, name)
            if folder is not None:
                remove_tree(folder)
                log_info(f"Deleted mod folder {folder}.")
            return registry.remove(name)

    # ------------------------------------------------------------------
    # Registry edits
    # ------------------------------------------------------------------

    def set_enabled(self, name: str, enabled: bool) -> bool:
        with self._lock:
            return self.registry.set_enabled(name, enabled)

    def set_all_enabled(self, enabled: bool) -> int:
        with self._lock:
            return self.registry.set_all_enabled(enabled)

    def set_global_disable(self, flag: bool) -> None:
        with self._lock:
            self.registry.set_global_disable(flag)

    def begin_reorder(self) -> None:
        self._reorder_active = True

    def cancel_reorder(self) -> None:
        self._reorder_active = False

    def finish_reorder(self, ordered_names: Sequence[str]) -> None:
        try:
            with self._lock:
                self.registry.reorder(ordered_names, strict=self.config.strict_reorder)
        finally:
            self._reorder_active = False

    @property
    def reorder_active(self) -> bool:
        return self._reorder_active

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def check_for_updates(self, offline: bool = False) -> List[UpdateInfo]:
        database = load_mod_database(self.config.database_url, self.config.database_cache, offline=offline)
        if database is None:
            log_warn("No mod database available; cannot check for updates.")
            return []
        updates = _check_for_updates(self.mods_root, self.installed_folders(), database)
        log_info(f"Update check found {len(updates)} outdated mod(s).")
        return updates

    # ------------------------------------------------------------------
    # Drop queue
    # ------------------------------------------------------------------

    def submit_drop(self, paths: Iterable[Path], on_result: DropCallback | None = None) -> int:
        """Queue dropped archives for installation. Returns how many were queued.

        Drops arriving while a reorder is in progress are ignored entirely.
        """

        if self._reorder_active:
            log_debug("Ignoring drop while a reorder is in progress.")
            return 0
        if self.session is None:
            raise UsageError("Load a GCMODSETTINGS file before installing new mods.")
        archives = [Path(p) for p in paths if is_supported_archive(Path(p))]
        if not archives:
            log_warn("No supported archives (.zip, .rar, .7z) in the drop.")
            return 0
        for archive in archives:
            self._drops.put((archive, on_result))
        self._ensure_worker()
        return len(archives)

    def _ensure_worker(self) -> None:
        if self._worker is not None and self._worker.is_alive():
            return
        self._worker = threading.Thread(target=self._drain_drops, name="archive-installer", daemon=True)
        self._worker.start()

    def _drain_drops(self) -> None:
        while True:
            item = self._drops.get()
            try:
                if item is None:
                    return
                archive, on_result = item
                report: InstallReport | None = None
                error: ModManagerError | None = None
                try:
                    report = self.install_mod_from_archive(archive)
                except ModManagerError as exc:
                    error = exc
                    log_error(f"Failed to install from {archive.name}: {exc}")
                if on_result is not None:
                    on_result(archive, report, error)
            finally:
                self._drops.task_done()

    def wait_for_drops(self) -> None:
        self._drops.join()

    def close(self) -> None:
        if self._worker is not None and self._worker.is_alive():
            self._drops.put(None)
            self._worker.join()
        self._worker = None
