from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Union

from .document import DEPENDENCIES_NAME, Element


class OutcomeKind(str, Enum):
    CLEAN = "clean"
    CONFLICT = "conflict"
    MESSY = "messy"
    FAILED = "failed"


class Resolution(str, Enum):
    REPLACED = "replaced"
    KEPT = "kept"


def _parse_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _parse_bool(raw: str | None) -> bool:
    return (raw or "").strip().lower() == "true"


@dataclass(slots=True)
class ModEntry:
    """Read-only view of one registered mod."""

    name: str
    author: str
    mod_id: str
    author_id: str
    last_updated: str
    priority: int
    enabled: bool
    enabled_vr: bool
    index: int
    dependencies: List[str] = field(default_factory=list)
    element: Element | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_element(cls, element: Element) -> "ModEntry":
        deps_node = element.child(DEPENDENCIES_NAME)
        dependencies = []
        if deps_node is not None:
            dependencies = [child.value or child.name or "" for child in deps_node.children]
        return cls(
            name=element.child_value("Name", "Unknown Mod"),
            author=element.child_value("Author"),
            mod_id=element.child_value("ID"),
            author_id=element.child_value("AuthorID"),
            last_updated=element.child_value("LastUpdated"),
            priority=_parse_int(element.child_value("ModPriority", "0"), 0),
            enabled=_parse_bool(element.child_value("Enabled")),
            enabled_vr=_parse_bool(element.child_value("EnabledVR")),
            index=_parse_int(element.attributes.get("_index"), -1),
            dependencies=dependencies,
            element=element,
        )


@dataclass(slots=True)
class ModMetadata:
    """Optional values written when a new entry is registered."""

    author: str = ""
    mod_id: str = "0"
    author_id: str = "0"
    last_updated: str = "0"


@dataclass(slots=True)
class ModInfo:
    """Contents of a mod folder's mod_info.json. Never written back."""

    mod_id: str
    name: str
    author: str
    version: str
    description: str
    folder: Path | None = None


@dataclass(slots=True)
class UpdateInfo:
    folder_name: str
    name: str
    installed: str
    latest: str
    nexus_url: str | None = None


@dataclass(slots=True)
class CleanInstall:
    name: str
    path: Path
    kind: OutcomeKind = field(default=OutcomeKind.CLEAN, init=False)


@dataclass(slots=True)
class ConflictInstall:
    name: str
    staged_path: Path
    kind: OutcomeKind = field(default=OutcomeKind.CONFLICT, init=False)


@dataclass(slots=True)
class MessyInstall:
    staged_path: Path
    kind: OutcomeKind = field(default=OutcomeKind.MESSY, init=False)


@dataclass(slots=True)
class FailedInstall:
    name: str
    error: str
    kind: OutcomeKind = field(default=OutcomeKind.FAILED, init=False)


InstallOutcome = Union[CleanInstall, ConflictInstall, MessyInstall, FailedInstall]


@dataclass(slots=True)
class InstallReport:
    archive: Path
    outcomes: List[InstallOutcome] = field(default_factory=list)

    def add(self, outcome: InstallOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def successes(self) -> List[CleanInstall]:
        return [o for o in self.outcomes if isinstance(o, CleanInstall)]

    @property
    def conflicts(self) -> List[ConflictInstall]:
        return [o for o in self.outcomes if isinstance(o, ConflictInstall)]

    @property
    def failures(self) -> List[FailedInstall]:
        return [o for o in self.outcomes if isinstance(o, FailedInstall)]

    @property
    def messy_path(self) -> Path | None:
        for outcome in self.outcomes:
            if isinstance(outcome, MessyInstall):
                return outcome.staged_path
        return None

    @property
    def is_empty(self) -> bool:
        return not self.outcomes
