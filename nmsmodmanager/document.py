from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional

PROPERTY_TAG = "Property"
ROOT_TAG = "Data"
CONTAINER_NAME = "Data"
MOD_ENTRY_VALUE = "GcModSettingsInfo"
DISABLE_ALL_NAME = "DisableAllMods"
DEPENDENCIES_NAME = "Dependencies"


@dataclass(eq=False)
class Element:
    """One markup element. Attribute values are kept unescaped."""

    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["Element"] = field(default_factory=list)

    @property
    def name(self) -> str | None:
        return self.attributes.get("name")

    @property
    def value(self) -> str | None:
        return self.attributes.get("value")

    @value.setter
    def value(self, new_value: str) -> None:
        self.attributes["value"] = new_value

    def iter(self) -> Iterator["Element"]:
        yield self
        for child in self.children:
            yield from child.iter()

    def child(self, name: str) -> Optional["Element"]:
        for child in self.children:
            if child.name == name:
                return child
        return None

    def child_value(self, name: str, default: str = "") -> str:
        node = self.child(name)
        if node is None or node.value is None:
            return default
        return node.value

    def append(self, element: "Element") -> "Element":
        self.children.append(element)
        return element


def make_property(name: str, value: str | None = None, **extra: str) -> Element:
    attributes = {"name": name}
    if value is not None:
        attributes["value"] = value
    attributes.update(extra)
    return Element(PROPERTY_TAG, attributes)


@dataclass(eq=False)
class Document:
    root: Element

    def iter(self) -> Iterator[Element]:
        return self.root.iter()

    def find(self, predicate: Callable[[Element], bool]) -> Element | None:
        for element in self.iter():
            if predicate(element):
                return element
        return None

    def find_property(self, name: str | None = None, value: str | None = None) -> Element | None:
        return self.find(lambda e: _matches(e, name, value))

    def parent_of(self, target: Element) -> Element | None:
        for element in self.iter():
            if any(child is target for child in element.children):
                return element
        return None

    def mod_container(self) -> Element | None:
        """The ``Data`` property holding the mod entries, if present."""
        for child in self.root.children:
            if _matches(child, CONTAINER_NAME, None):
                return child
        return self.find_property(name=CONTAINER_NAME)

    def ensure_mod_container(self) -> Element:
        container = self.mod_container()
        if container is None:
            container = self.root.append(make_property(CONTAINER_NAME))
        return container

    def mod_elements(self) -> List[Element]:
        """Entries directly under any ``Data`` property, in document order."""
        entries: List[Element] = []
        for element in self.iter():
            if element.tag != PROPERTY_TAG or element.name != CONTAINER_NAME:
                continue
            for child in element.children:
                if child.tag == PROPERTY_TAG and child.value == MOD_ENTRY_VALUE:
                    entries.append(child)
        return entries

    def disable_all_element(self) -> Element | None:
        return self.find_property(name=DISABLE_ALL_NAME)


def _matches(element: Element, name: str | None, value: str | None) -> bool:
    if element.tag != PROPERTY_TAG:
        return False
    if name is not None and element.name != name:
        return False
    if value is not None and element.value != value:
        return False
    return True


def new_document() -> Document:
    """Skeleton written by the game when no mod has been registered yet."""
    root = Element(ROOT_TAG, {"template": "GcModSettings"})
    root.append(make_property(DISABLE_ALL_NAME, "false"))
    root.append(make_property(CONTAINER_NAME))
    return Document(root)
