"""
Vigil - Error levels and labels.

Defines:
- ErrorLevel flags (one bit per runtime error code)
- Display labels for every level the dispatcher recognizes
- Fatal and deprecation level sets
- Level expression parsing ("ALL & ~DEPRECATED", "WARNING|NOTICE")
"""

from __future__ import annotations

from enum import IntFlag
from typing import Any, Optional


class ErrorLevel(IntFlag):
    """
    Runtime error codes.

    Values are bit flags so thresholds can be expressed as masks.
    """
    ERROR = 1
    WARNING = 2
    PARSE = 4
    NOTICE = 8
    CORE_ERROR = 16
    CORE_WARNING = 32
    COMPILE_ERROR = 64
    COMPILE_WARNING = 128
    USER_ERROR = 256
    USER_WARNING = 512
    USER_NOTICE = 1024
    STRICT = 2048
    RECOVERABLE_ERROR = 4096
    DEPRECATED = 8192
    USER_DEPRECATED = 16384
    ALL = 32767


LABELS: dict[int, str] = {
    ErrorLevel.WARNING: "Warning",
    ErrorLevel.NOTICE: "Notice",
    ErrorLevel.USER_ERROR: "User Error",
    ErrorLevel.USER_WARNING: "User Warning",
    ErrorLevel.USER_NOTICE: "User Notice",
    ErrorLevel.STRICT: "Runtime Notice",
    ErrorLevel.RECOVERABLE_ERROR: "Catchable Fatal Error",
    ErrorLevel.DEPRECATED: "Deprecated",
    ErrorLevel.USER_DEPRECATED: "User Deprecated",
    ErrorLevel.ERROR: "Error",
    ErrorLevel.CORE_ERROR: "Core Error",
    ErrorLevel.COMPILE_ERROR: "Compile Error",
    ErrorLevel.PARSE: "Parse",
}

DEPRECATION_LEVELS = ErrorLevel.DEPRECATED | ErrorLevel.USER_DEPRECATED

FATAL_LEVELS = frozenset({
    int(ErrorLevel.ERROR),
    int(ErrorLevel.CORE_ERROR),
    int(ErrorLevel.COMPILE_ERROR),
    int(ErrorLevel.PARSE),
})


def label_for(code: int) -> str:
    """Human label for a code, or its raw number when unrecognized."""
    return LABELS.get(int(code), str(int(code)))


def is_deprecation(code: int) -> bool:
    return bool(int(code) & DEPRECATION_LEVELS)


def is_fatal(code: int) -> bool:
    return int(code) in FATAL_LEVELS


def parse_level(value: Any) -> Optional[int]:
    """
    Parse a level expression into an integer mask.

    Accepts None (ambient level), integers, numeric strings, level names
    joined with ``|``, and ``&`` / ``~`` for exclusions::

        parse_level("WARNING|NOTICE")      # 10
        parse_level("ALL & ~DEPRECATED")   # 24575
        parse_level("ERROR & ~ERROR | WARNING")  # 2, "&" binds tighter

    Raises:
        ValueError: On unknown level names or unsupported types
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid error level: {value!r}")
    if isinstance(value, int):
        return int(value)
    if isinstance(value, (list, tuple, set, frozenset)):
        mask = 0
        for item in value:
            mask |= parse_level(item) or 0
        return mask
    if not isinstance(value, str):
        raise ValueError(f"Invalid error level: {value!r}")

    text = value.strip()
    if not text:
        raise ValueError("Empty error level expression")
    if text.lstrip("-").isdigit():
        return int(text)

    # "&" binds tighter than "|": A & B | C == (A & B) | C
    mask = 0
    for clause in text.split("|"):
        clause_mask = int(ErrorLevel.ALL)
        for term in clause.split("&"):
            term = term.strip()
            negate = term.startswith("~")
            name = term.lstrip("~").strip().upper()
            if name.startswith("E_"):
                name = name[2:]
            try:
                bits = int(ErrorLevel[name])
            except KeyError:
                raise ValueError(f"Unknown error level: {term!r}") from None
            clause_mask &= (int(ErrorLevel.ALL) & ~bits) if negate else bits
        mask |= clause_mask
    return mask
