from __future__ import annotations

from typing import List

from .document import CONTAINER_NAME, DEPENDENCIES_NAME, Document, Element
from .text_utils import escape_markup

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'
INDENT = "  "


def _drops_value(element: Element, depth: int) -> bool:
    # The container directly under the root and Dependencies only carry placeholder values.
    if element.name == DEPENDENCIES_NAME:
        return True
    return element.name == CONTAINER_NAME and depth == 1


def _format_attributes(element: Element, depth: int) -> str:
    drop_value = _drops_value(element, depth)
    parts = [
        f'{key}="{escape_markup(value)}"'
        for key, value in element.attributes.items()
        if not (drop_value and key == "value")
    ]
    return " ".join(parts)


def _format_element(element: Element, depth: int, out: List[str]) -> None:
    indent = INDENT * depth
    attributes = _format_attributes(element, depth)
    opening = f"{indent}<{element.tag}{' ' + attributes if attributes else ''}"
    if element.children:
        out.append(opening + ">\n")
        for child in element.children:
            _format_element(child, depth + 1, out)
        out.append(f"{indent}</{element.tag}>\n")
    else:
        out.append(opening + " />\n")


def serialize_document(document: Document) -> str:
    """Render the whole document in the layout the game writes itself.

    Output is a pure function of the tree, so rewriting an unchanged
    document produces identical bytes.
    """

    parts: List[str] = []
    _format_element(document.root, 0, parts)
    body = "".join(parts).rstrip()
    return f"{XML_DECLARATION}\n{body}"


__all__ = ["serialize_document", "XML_DECLARATION"]
