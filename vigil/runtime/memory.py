"""
Vigil Runtime - In-memory host runtime.

A scriptable runtime for embedding interpreters that report errors
through Vigil, and for tests. It keeps its symbol tables, loaders,
exception handler and last error in memory, and understands
namespace-qualified sources (``namespace A\\B;`` + ``class C``).
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping, Optional

from ..levels import ErrorLevel
from ..records import ErrorRecord
from .base import BACKSLASH_CONVENTIONS, ErrorHook, ShutdownHook, SymbolConventions

logger = logging.getLogger("vigil.runtime")

_NAMESPACE = re.compile(r"^\s*namespace\s+([A-Za-z_][\w\\.]*)\s*([;{])")
_DECLARATION = re.compile(
    r"^\s*(?:(?:abstract|final|readonly)\s+)*(class|interface|trait|function)\s+&?\s*([A-Za-z_]\w*)"
)


def scan_declarations(source: str, separator: str = "\\") -> Iterator[tuple[str, str]]:
    """
    Yield ``(kind, qualified_name)`` for top-level declarations.

    Only declarations at namespace level are reported; methods inside
    class bodies are not functions.
    """
    namespace = ""
    base_depth = 0
    depth = 0
    for line in source.splitlines():
        match = _NAMESPACE.match(line)
        if match:
            namespace = match.group(1).strip(separator)
            base_depth = depth + 1 if match.group(2) == "{" else depth
        elif depth == base_depth:
            match = _DECLARATION.match(line)
            if match:
                kind, name = match.groups()
                yield kind, f"{namespace}{separator}{name}" if namespace else name
        depth += line.count("{") - line.count("}")
        if depth < base_depth:
            namespace, base_depth = "", depth


class InMemoryRuntime:
    """
    Scriptable host runtime.

    Usage:
        ```python
        runtime = InMemoryRuntime()
        handler = ErrorHandler.register(runtime=runtime)

        runtime.define_function("App\\\\Other\\\\foo")
        runtime.trigger(ErrorLevel.WARNING, "Division by zero", "app.php", 12)
        runtime.fail(ErrorLevel.ERROR, "Call to undefined function foo()")
        runtime.shutdown()
        ```

    Args:
        reporting_level: Ambient reporting mask
        conventions: Naming conventions of the hosted language
        source_loader: Callable returning the declarations of a file;
            defaults to reading it and scanning its declarations
    """

    def __init__(
        self,
        *,
        reporting_level: int = ErrorLevel.ALL,
        conventions: SymbolConventions = BACKSLASH_CONVENTIONS,
        source_loader: Optional[Callable[[str], Iterator[tuple[str, str]]]] = None,
    ):
        self.conventions = conventions
        self._reporting_level = int(reporting_level)
        self._source_loader = source_loader or self._scan_file

        self._functions: dict[str, list[str]] = {"internal": [], "user": []}
        self._symbols: dict[str, str] = {}
        self._loaders: list[Any] = []
        self._required: set[str] = set()

        self._error_hook: Optional[ErrorHook] = None
        self._shutdown_hooks: list[ShutdownHook] = []
        self._exception_handler: Any = None
        self._last_error: Optional[ErrorRecord] = None
        self._shut_down = False

        self.display_enabled = True
        self.displayed: list[ErrorRecord] = []

    # ========================================================================
    # ErrorSource / ShutdownSignal
    # ========================================================================

    def reporting_level(self) -> int:
        return self._reporting_level

    def set_reporting_level(self, level: int) -> None:
        self._reporting_level = int(level)

    def install_error_hook(self, hook: ErrorHook) -> None:
        self._error_hook = hook

    def install_shutdown_hook(self, hook: ShutdownHook) -> None:
        self._shutdown_hooks.append(hook)

    def last_fatal(self) -> Optional[ErrorRecord]:
        return self._last_error

    def exception_handler(self) -> Any:
        return self._exception_handler

    def set_exception_handler(self, handler: Any) -> Any:
        """Install ``handler``; returns the previous one."""
        previous, self._exception_handler = self._exception_handler, handler
        return previous

    def disable_display(self) -> None:
        self.display_enabled = False

    # ========================================================================
    # Error production
    # ========================================================================

    def trigger(
        self,
        code: int,
        message: str,
        file: str = "unknown",
        line: int = 0,
        context: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """
        Raise a recoverable error through the installed hook.

        Returns:
            True if the hook handled it. Unhandled errors the runtime
            would display are appended to ``displayed``.
        """
        record = ErrorRecord(code, message, file, line, dict(context or {}))
        self._last_error = record

        handled = bool(self._error_hook(record)) if self._error_hook else False
        if not handled and self.display_enabled and self._reporting_level & int(code):
            self.displayed.append(record)
        return handled

    def fail(self, code: int, message: str, file: str = "unknown", line: int = 0) -> ErrorRecord:
        """Record a fatal condition; it is observed at shutdown."""
        record = ErrorRecord(code, message, file, line)
        self._last_error = record
        return record

    def shutdown(self) -> None:
        """Run the shutdown hooks. Only the first call has any effect."""
        if self._shut_down:
            return
        self._shut_down = True
        for hook in self._shutdown_hooks:
            hook()

    # ========================================================================
    # SymbolTable
    # ========================================================================

    def define_function(self, name: str, group: str = "user") -> None:
        self._functions.setdefault(group, []).append(name.lstrip(self.conventions.root_prefix))

    def define_symbol(self, name: str, kind: str = "class") -> None:
        self._symbols[name.lstrip(self.conventions.root_prefix)] = kind

    def defined_functions(self) -> dict[str, list[str]]:
        return {group: list(names) for group, names in self._functions.items()}

    def symbol_exists(self, name: str) -> bool:
        return name in self._symbols

    def register_loader(self, loader: Any) -> None:
        self._loaders.append(loader)

    def symbol_loaders(self) -> list[Any]:
        return list(self._loaders)

    def require_once(self, path: str) -> None:
        resolved = os.path.realpath(path)
        if resolved in self._required:
            return
        self._required.add(resolved)

        for kind, name in self._source_loader(resolved):
            if kind == "function":
                self.define_function(name)
            else:
                self.define_symbol(name, kind)
        logger.debug(f"Loaded {resolved}")

    def is_loaded(self, path: str) -> bool:
        return os.path.realpath(path) in self._required

    def _scan_file(self, path: str) -> Iterator[tuple[str, str]]:
        source = Path(path).read_text(encoding="utf-8", errors="replace")
        return scan_declarations(source, self.conventions.namespace_separator)
