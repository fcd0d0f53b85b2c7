"""Core package for the No Man's Sky mod manager."""

from .commands import ModManager
from .conflict_resolver import resolve_conflict
from .document import Document, Element, new_document
from .errors import (
    ArchiveError,
    FilesystemError,
    ModManagerError,
    ParseError,
    PersistError,
    UsageError,
)
from .install_pipeline import cleanup_staging, discover_candidates, finalize_installation, install_archive
from .load_config import ProgramConfig, load_program_config
from .models import (
    CleanInstall,
    ConflictInstall,
    FailedInstall,
    InstallReport,
    MessyInstall,
    ModEntry,
    ModInfo,
    ModMetadata,
    OutcomeKind,
    Resolution,
    UpdateInfo,
)
from .mxml_parser import load_document, parse_document
from .mxml_writer import serialize_document
from .registry import ModRegistry
from .report import export_report, print_install_report
from .session import SettingsSession

__all__ = [
    "ModManager",
    "ModRegistry",
    "SettingsSession",
    "Document",
    "Element",
    "new_document",
    "parse_document",
    "load_document",
    "serialize_document",
    "install_archive",
    "discover_candidates",
    "finalize_installation",
    "cleanup_staging",
    "resolve_conflict",
    "ProgramConfig",
    "load_program_config",
    "ModEntry",
    "ModMetadata",
    "ModInfo",
    "UpdateInfo",
    "InstallReport",
    "CleanInstall",
    "ConflictInstall",
    "MessyInstall",
    "FailedInstall",
    "OutcomeKind",
    "Resolution",
    "ModManagerError",
    "ParseError",
    "ArchiveError",
    "FilesystemError",
    "PersistError",
    "UsageError",
    "print_install_report",
    "export_report",
]
