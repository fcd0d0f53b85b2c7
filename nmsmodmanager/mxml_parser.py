from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

from .document import Document, Element
from .errors import ParseError, PersistError

BOM = "\ufeff"


def _convert(node: ET.Element) -> Element:
    # ElementTree keeps attributes in source order and hands them back unescaped.
    element = Element(tag=node.tag, attributes=dict(node.attrib))
    for child in node:
        element.children.append(_convert(child))
    return element


def parse_document(text: str) -> Document:
    """Parse settings markup into a Document.

    Comments and text content are dropped; unknown attributes survive.
    Raises ParseError when the text is not well-formed.
    """

    if text.startswith(BOM):
        text = text[len(BOM):]
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        line, column = exc.position
        raise ParseError(f"Malformed settings markup: {exc}", line=line, column=column) from exc
    return Document(root=_convert(root))


def load_document(path: Path) -> Document:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise PersistError(path, f"Cannot read settings file: {exc}") from exc
    return parse_document(text)


__all__ = ["parse_document", "load_document"]
