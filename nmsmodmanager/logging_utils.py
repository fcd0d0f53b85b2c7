from __future__ import annotations

import sys
from typing import TextIO

LEVEL_DEFAULT = "info"
LEVEL_ORDER = {
    "debug": 0,
    "info": 1,
    "ok": 1,
    "conflict": 2,
    "warn": 2,
    "error": 3,
}

_threshold = LEVEL_ORDER[LEVEL_DEFAULT]
_stream: TextIO | None = None


def _normalize_level(level: str | None) -> str:
    if not level:
        return LEVEL_DEFAULT
    return level.strip().lower() or LEVEL_DEFAULT


def set_log_level(level: str | None) -> None:
    """Hide messages below ``level``. Unknown names fall back to info."""
    global _threshold
    _threshold = LEVEL_ORDER.get(_normalize_level(level), LEVEL_ORDER[LEVEL_DEFAULT])


def set_log_stream(stream: TextIO | None) -> None:
    global _stream
    _stream = stream


def log(message: str, level: str = LEVEL_DEFAULT, indent: int = 0) -> None:
    normalized = _normalize_level(level)
    if LEVEL_ORDER.get(normalized, LEVEL_ORDER[LEVEL_DEFAULT]) < _threshold:
        return
    prefix = " " * max(indent, 0)
    print(f"{prefix}[{normalized}] {message}", file=_stream or sys.stdout)


def log_debug(message: str, indent: int = 0) -> None:
    log(message, "debug", indent)


def log_info(message: str, indent: int = 0) -> None:
    log(message, "info", indent)


def log_warn(message: str, indent: int = 0) -> None:
    log(message, "warn", indent)


def log_error(message: str, indent: int = 0) -> None:
    log(message, "error", indent)


def log_conflict(message: str, indent: int = 0) -> None:
    log(message, "conflict", indent)


def log_ok(message: str, indent: int = 0) -> None:
    log(message, "ok", indent)
