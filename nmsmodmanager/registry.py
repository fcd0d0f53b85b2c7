from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from .document import (
    CONTAINER_NAME,
    DEPENDENCIES_NAME,
    DISABLE_ALL_NAME,
    MOD_ENTRY_VALUE,
    Element,
    make_property,
)
from .errors import UsageError
from .logging_utils import log_info, log_warn
from .models import ModEntry, ModMetadata
from .session import SettingsSession
from .text_utils import canonical_mod_name, name_key


def _bool_text(flag: bool) -> str:
    return "true" if flag else "false"


def _set_child_value(element: Element, child_name: str, value: str) -> None:
    node = element.child(child_name)
    if node is not None:
        node.value = value


class ModRegistry:
    """Domain operations over the mod entries of a settings session.

    Each mutating call finishes by saving the session, so the file on
    disk always matches the last accepted edit.
    """

    def __init__(self, session: SettingsSession) -> None:
        self.session = session

    @property
    def document(self):
        return self.session.document

    def _entries(self) -> List[ModEntry]:
        return [ModEntry.from_element(element) for element in self.document.mod_elements()]

    def _find_element(self, name: str) -> Element | None:
        key = name_key(name)
        for element in self.document.mod_elements():
            if name_key(element.child_value("Name")) == key:
                return element
        return None

    def list(self) -> List[ModEntry]:
        """Entries by ascending priority; ties keep document order."""
        return sorted(self._entries(), key=lambda entry: entry.priority)

    def names(self) -> List[str]:
        return [entry.name for entry in self.list()]

    def get(self, name: str) -> ModEntry | None:
        element = self._find_element(name)
        return ModEntry.from_element(element) if element is not None else None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._find_element(name) is not None

    def __len__(self) -> int:
        return len(self.document.mod_elements())

    def set_enabled(self, name: str, enabled: bool) -> bool:
        element = self._find_element(name)
        if element is None:
            return False
        _set_child_value(element, "Enabled", _bool_text(enabled))
        _set_child_value(element, "EnabledVR", _bool_text(enabled))
        self.session.save()
        return True

    def set_all_enabled(self, enabled: bool) -> int:
        elements = self.document.mod_elements()
        if not elements:
            return 0
        for element in elements:
            _set_child_value(element, "Enabled", _bool_text(enabled))
            _set_child_value(element, "EnabledVR", _bool_text(enabled))
        self.session.save()
        return len(elements)

    def is_globally_disabled(self) -> bool:
        node = self.document.disable_all_element()
        return node is not None and (node.value or "").strip().lower() == "true"

    def set_global_disable(self, flag: bool) -> None:
        node = self.document.disable_all_element()
        if node is None:
            node = make_property(DISABLE_ALL_NAME, _bool_text(flag))
            root = self.document.root
            container = self.document.mod_container()
            position = len(root.children)
            for idx, child in enumerate(root.children):
                if child is container:
                    position = idx
                    break
            root.children.insert(position, node)
        else:
            node.value = _bool_text(flag)
        self.session.save()

    def _check_permutation(self, ordered_names: Sequence[str]) -> None:
        current = [name_key(entry.name) for entry in self._entries()]
        supplied = [name_key(name) for name in ordered_names]
        if len(set(supplied)) != len(supplied):
            raise UsageError("Reorder list contains duplicate names")
        missing = set(current) - set(supplied)
        unknown = set(supplied) - set(current)
        if missing or unknown:
            raise UsageError(
                f"Reorder list must name every registered mod exactly once "
                f"(missing: {sorted(missing)}, unknown: {sorted(unknown)})"
            )

    def reorder(self, ordered_names: Sequence[str], strict: bool = True) -> None:
        """Give each named entry a priority equal to its list position.

        With ``strict`` the list has to be a permutation of the registered
        names. Otherwise unknown names are skipped and entries left out
        keep their current priority.
        """

        if strict:
            self._check_permutation(ordered_names)
        by_key: Dict[str, Element] = {}
        for element in self.document.mod_elements():
            by_key.setdefault(name_key(element.child_value("Name")), element)
        for position, name in enumerate(ordered_names):
            element = by_key.get(name_key(name))
            if element is None:
                continue
            _set_child_value(element, "ModPriority", str(position))
        self.session.save()

    def _next_values(self, elements: Iterable[Element]) -> tuple[int, int]:
        max_index = -1
        max_priority = -1
        for element in elements:
            entry = ModEntry.from_element(element)
            max_index = max(max_index, entry.index)
            if element.child("ModPriority") is not None:
                max_priority = max(max_priority, entry.priority)
        return max_index + 1, max_priority + 1

    def add(self, name: str, metadata: ModMetadata | None = None) -> ModEntry:
        canonical = canonical_mod_name(name)
        if not canonical:
            raise UsageError("Mod name must not be empty")
        existing = self._find_element(canonical)
        if existing is not None:
            log_warn(f"Mod '{canonical}' is already registered.")
            return ModEntry.from_element(existing)

        metadata = metadata or ModMetadata()
        container = self.document.ensure_mod_container()
        index, priority = self._next_values(self.document.mod_elements())

        entry = make_property(CONTAINER_NAME, MOD_ENTRY_VALUE, _index=str(index))
        entry.append(make_property("Name", canonical))
        entry.append(make_property("Author", metadata.author))
        entry.append(make_property("ID", metadata.mod_id))
        entry.append(make_property("AuthorID", metadata.author_id))
        entry.append(make_property("LastUpdated", metadata.last_updated))
        entry.append(make_property("ModPriority", str(priority)))
        entry.append(make_property("Enabled", "true"))
        entry.append(make_property("EnabledVR", "true"))
        entry.append(make_property(DEPENDENCIES_NAME))
        container.append(entry)

        self.session.save()
        log_info(f"Registered mod '{canonical}' with priority {priority}.")
        return ModEntry.from_element(entry)

    def remove(self, name: str) -> str:
        """Drop the named entry and return the rewritten document text."""
        element = self._find_element(name)
        if element is None:
            log_warn(f"Mod '{name}' is not registered; nothing to remove.")
            return self.session.serialize()
        parent = self.document.parent_of(element)
        if parent is not None:
            parent.children.remove(element)
        content = self.session.save()
        log_info(f"Removed mod '{name}' from the settings file.")
        return content
