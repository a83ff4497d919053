"""
Vigil - Data model.

Value types passed between the runtime bridge, the dispatcher,
fatal recovery and the suggester.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .levels import label_for


@dataclass(frozen=True, slots=True)
class ErrorRecord:
    """
    A single runtime error as captured by the host runtime.

    Attributes:
        code: Raw error code (usually an ErrorLevel member)
        message: Runtime message, unformatted
        file: Source file that produced the error
        line: Line number in ``file``
        context: Opaque runtime context (variables in scope, etc.)
    """

    code: int
    message: str
    file: str = "unknown"
    line: int = 0
    context: Mapping[str, Any] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return label_for(self.code)

    @property
    def location(self) -> tuple[str, int]:
        return (self.file, self.line)

    def describe(self) -> str:
        """Format as ``"<Label>: <message> in <file> line <line>"``."""
        return f"{self.label}: {self.message} in {self.file} line {self.line}"


@dataclass(slots=True)
class DispatchConfig:
    """
    Dispatcher configuration.

    ``level == 0`` disables all handling.
    """

    level: int
    display_errors: bool = True

    @property
    def enabled(self) -> bool:
        return self.level != 0


@dataclass(frozen=True, slots=True)
class SymbolSearchRoot:
    """A name prefix and the directories its symbols may live in."""

    prefix: str
    directories: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class SuggestionResult:
    """
    Output of one diagnostic heuristic.

    Attributes:
        enhanced_message: Rewritten, human-readable message
        candidates: Fully-qualified names that may be what was meant
        kind: "function", "class", "interface" or "trait"
    """

    enhanced_message: str
    candidates: tuple[str, ...] = ()
    kind: Optional[str] = None
