from __future__ import annotations

import re

WHITESPACE_PATTERN = re.compile(r"\s+")
INVALID_FOLDER_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

# "&" has to go first or the other entities get escaped twice.
_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def escape_markup(raw: str) -> str:
    for char, entity in _ESCAPES:
        raw = raw.replace(char, entity)
    return raw


def canonical_mod_name(raw: str) -> str:
    """Name as it is registered in the settings file."""
    return raw.strip().upper()


def name_key(raw: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", raw).strip().casefold()


def is_valid_folder_name(raw: str) -> bool:
    stripped = raw.strip()
    if not stripped or stripped in {".", ".."}:
        return False
    return INVALID_FOLDER_CHARS.search(stripped) is None
