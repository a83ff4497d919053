"""
Vigil Runtime - Host capability interfaces.

The engine never talks to an interpreter directly. A host runtime
exposes these capabilities and is responsible for wiring its native
error and shutdown hooks to them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol

from ..records import ErrorRecord


@dataclass(frozen=True, slots=True)
class SymbolConventions:
    """
    Naming conventions of a host runtime.

    Attributes:
        namespace_separator: Separator between namespace segments
        legacy_separator: Separator of the flat (pre-namespace) convention
        source_suffix: Extension of source files holding one symbol each
        root_prefix: Prefix that marks a fully-qualified name
    """

    namespace_separator: str = "\\"
    legacy_separator: str = "_"
    source_suffix: str = ".php"
    root_prefix: str = "\\"

    def split(self, qualified_name: str) -> tuple[str, str]:
        """Split into (namespace, name); namespace is "" for global names."""
        namespace, sep, name = qualified_name.rpartition(self.namespace_separator)
        if not sep:
            return "", qualified_name
        return namespace, name


BACKSLASH_CONVENTIONS = SymbolConventions()
DOTTED_CONVENTIONS = SymbolConventions(
    namespace_separator=".",
    legacy_separator="_",
    source_suffix=".py",
    root_prefix="",
)


ErrorHook = Callable[[ErrorRecord], bool]
ShutdownHook = Callable[[], None]


class ErrorSource(Protocol):
    """Delivers recoverable runtime errors."""

    def reporting_level(self) -> int:
        """Ambient reporting mask of the runtime."""
        ...

    def install_error_hook(self, hook: ErrorHook) -> None:
        ...


class ShutdownSignal(Protocol):
    """Delivers the single terminal notification."""

    def last_fatal(self) -> Optional[ErrorRecord]:
        ...

    def install_shutdown_hook(self, hook: ShutdownHook) -> None:
        ...


class SymbolTable(Protocol):
    """Read access to the symbols a runtime has defined."""

    conventions: SymbolConventions

    def defined_functions(self) -> Mapping[str, Iterable[str]]:
        """Function names grouped by origin (e.g. "internal", "user")."""
        ...

    def symbol_exists(self, name: str) -> bool:
        """True if a class, interface or trait ``name`` is defined."""
        ...

    def require_once(self, path: str) -> None:
        """Load a source file unless it has been loaded already."""
        ...

    def symbol_loaders(self) -> Iterable[Any]:
        ...


class Runtime(ErrorSource, ShutdownSignal, SymbolTable, Protocol):
    """Everything the error handler needs from its host."""

    def exception_handler(self) -> Any:
        """The terminal exception handler currently installed, if any."""
        ...

    def disable_display(self) -> None:
        """Stop the runtime from printing errors natively."""
        ...
