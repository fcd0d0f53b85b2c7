from __future__ import annotations

from pathlib import Path
from typing import Any, List, Sequence

from openpyxl import Workbook

from .logging_utils import log_conflict, log_error, log_ok, log_warn
from .models import (
    CleanInstall,
    ConflictInstall,
    FailedInstall,
    InstallReport,
    MessyInstall,
    ModEntry,
    UpdateInfo,
)


def print_install_report(report: InstallReport) -> None:
    if report.is_empty:
        log_warn(f"{report.archive.name}: nothing to install.")
        return
    for outcome in report.outcomes:
        if isinstance(outcome, CleanInstall):
            log_ok(f"{outcome.name} installed", indent=2)
        elif isinstance(outcome, ConflictInstall):
            log_conflict(f"{outcome.name} already installed, staged at {outcome.staged_path}", indent=2)
        elif isinstance(outcome, MessyInstall):
            log_warn(f"No mod folder found, files staged at {outcome.staged_path}", indent=2)
        elif isinstance(outcome, FailedInstall):
            log_error(f"{outcome.name} failed: {outcome.error}", indent=2)


def _outcome_row(archive: Path, outcome: Any) -> List[str]:
    if isinstance(outcome, CleanInstall):
        return [archive.name, outcome.kind.value, outcome.name, str(outcome.path)]
    if isinstance(outcome, ConflictInstall):
        return [archive.name, outcome.kind.value, outcome.name, str(outcome.staged_path)]
    if isinstance(outcome, MessyInstall):
        return [archive.name, outcome.kind.value, "", str(outcome.staged_path)]
    return [archive.name, outcome.kind.value, outcome.name, outcome.error]


def export_report(
    output_path: Path,
    entries: Sequence[ModEntry],
    reports: Sequence[InstallReport] = (),
    updates: Sequence[UpdateInfo] = (),
) -> None:
    """Write an Excel workbook with the mod list, install outcomes and updates."""

    output_path.parent.mkdir(parents=True, exist_ok=True)

    workbook = Workbook()

    mods_sheet = workbook.active
    if not mods_sheet:
        mods_sheet = workbook.create_sheet("mods")
    else:
        mods_sheet.title = "mods"
    mods_sheet.append([
        "priority",
        "name",
        "enabled",
        "enabled vr",
        "author",
        "id",
        "index",
    ])
    for entry in entries:
        mods_sheet.append(
            [
                entry.priority,
                entry.name,
                entry.enabled,
                entry.enabled_vr,
                entry.author,
                entry.mod_id,
                entry.index,
            ]
        )

    installs_sheet = workbook.create_sheet("installs")
    installs_sheet.append(["archive", "outcome", "mod name", "path / error"])
    for report in reports:
        for outcome in report.outcomes:
            installs_sheet.append(_outcome_row(report.archive, outcome))

    updates_sheet = workbook.create_sheet("updates")
    updates_sheet.append(["folder", "name", "installed", "latest", "nexus url"])
    for update in sorted(updates, key=lambda u: u.name.lower()):
        updates_sheet.append(
            [update.folder_name, update.name, update.installed, update.latest, update.nexus_url or ""]
        )

    workbook.save(output_path)
    workbook.close()


__all__ = ["print_install_report", "export_report"]
