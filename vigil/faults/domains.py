"""
Vigil Faults - Domain-specific fault types.

Provides concrete fault classes for:
- RUNTIME faults (recoverable errors surfaced as exceptions)
- SYSTEM faults (fatal errors recovered at shutdown)
- SYMBOL faults (fatal errors enhanced with suggestions)
- CONFIG faults
"""

from typing import Any, Mapping, Optional

from ..levels import label_for
from .core import Fault, FaultDomain, Severity


# ============================================================================
# RUNTIME Faults
# ============================================================================

class ContextErrorFault(Fault):
    """
    Recoverable runtime error raised at the call site that produced it.

    Carries the original code, location and runtime context.
    """

    def __init__(
        self,
        message: str,
        *,
        level: int,
        file: str = "unknown",
        line: int = 0,
        context: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(
            code="CONTEXT_ERROR",
            message=message,
            domain=FaultDomain.RUNTIME,
            severity=Severity.ERROR,
            metadata={"level": int(level), "file": file, "line": line},
        )
        self.level = level
        self.file = file
        self.line = line
        self.context = dict(context or {})


# ============================================================================
# SYSTEM Faults
# ============================================================================

class FatalErrorFault(Fault):
    """Process-terminating error observed at shutdown."""

    def __init__(
        self,
        message: str,
        *,
        level: int,
        file: str = "unknown",
        line: int = 0,
        code: str = "FATAL_ERROR",
        domain: FaultDomain = FaultDomain.SYSTEM,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=domain,
            severity=Severity.FATAL,
            metadata={"level": int(level), "file": file, "line": line, **(metadata or {})},
        )
        self.level = level
        self.file = file
        self.line = line

    @classmethod
    def from_record(cls, record) -> "FatalErrorFault":
        """Build from an ErrorRecord using the labelled message format."""
        return cls(
            f"{label_for(record.code)}: {record.message} in {record.file} line {record.line}",
            level=record.code,
            file=record.file,
            line=record.line,
        )


# ============================================================================
# SYMBOL Faults
# ============================================================================

class SymbolFault(FatalErrorFault):
    """
    Fatal error rewritten with a diagnostic suggestion.

    The original fatal fault is kept as ``previous`` and ``__cause__``.
    """

    def __init__(
        self,
        code: str,
        message: str,
        previous: FatalErrorFault,
        *,
        candidates: tuple[str, ...] = (),
    ):
        super().__init__(
            message,
            level=previous.level,
            file=previous.file,
            line=previous.line,
            code=code,
            domain=FaultDomain.SYMBOL,
            metadata={"candidates": list(candidates), "previous": previous.message},
        )
        self.previous = previous
        self.candidates = tuple(candidates)
        self.__cause__ = previous


class UndefinedFunctionFault(SymbolFault):
    """A call to a function that is not defined."""

    def __init__(self, message: str, previous: FatalErrorFault, *, candidates: tuple[str, ...] = ()):
        super().__init__("UNDEFINED_FUNCTION", message, previous, candidates=candidates)


class ClassNotFoundFault(SymbolFault):
    """A class, interface or trait that could not be loaded."""

    def __init__(
        self,
        message: str,
        previous: FatalErrorFault,
        *,
        kind: str = "class",
        candidates: tuple[str, ...] = (),
    ):
        super().__init__("CLASS_NOT_FOUND", message, previous, candidates=candidates)
        self.kind = kind
        self.metadata["kind"] = kind


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=Severity.FATAL,
            metadata=metadata,
        )


class ConfigInvalidFault(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )
