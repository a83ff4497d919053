"""
Vigil Runtime - CPython bridge.

Wires the interpreter's native hooks to the runtime capabilities:

- ``warnings.showwarning``  -> error hook (recoverable errors)
- ``sys.excepthook``        -> last fatal condition
- ``atexit``                -> shutdown hook

Uncaught exceptions are phrased so the diagnostic heuristics can
read them: a NameError becomes ``Call to undefined function <name>()``
and an ImportError of a name from a module becomes
``Class "<module>.<name>" not found``.
"""

from __future__ import annotations

import atexit
import builtins
import importlib.util
import inspect
import logging
import os
import sys
import traceback
import warnings
from typing import Any, Iterable, Optional

from ..handlers import FinalHandler
from ..levels import DEPRECATION_LEVELS, ErrorLevel
from ..loaders import PrefixLoader
from ..records import ErrorRecord
from ..symbols import unwrap_loader
from .base import DOTTED_CONVENTIONS, ErrorHook, ShutdownHook, SymbolConventions

logger = logging.getLogger("vigil.runtime")

WARNING_LEVELS: list[tuple[type[Warning], ErrorLevel]] = [
    (DeprecationWarning, ErrorLevel.DEPRECATED),
    (PendingDeprecationWarning, ErrorLevel.DEPRECATED),
    (FutureWarning, ErrorLevel.USER_DEPRECATED),
    (SyntaxWarning, ErrorLevel.COMPILE_WARNING),
    (ResourceWarning, ErrorLevel.NOTICE),
    (UserWarning, ErrorLevel.USER_WARNING),
]


def warning_level(category: type[Warning]) -> ErrorLevel:
    """Map a warning category to an error level (WARNING by default)."""
    for base, level in WARNING_LEVELS:
        if issubclass(category, base):
            return level
    return ErrorLevel.WARNING


def exception_level(exc: BaseException) -> ErrorLevel:
    """Map an uncaught exception to a fatal error level."""
    if isinstance(exc, SyntaxError):
        return ErrorLevel.PARSE
    if isinstance(exc, ImportError):
        return ErrorLevel.COMPILE_ERROR
    if isinstance(exc, (MemoryError, RecursionError)):
        return ErrorLevel.CORE_ERROR
    return ErrorLevel.ERROR


def exception_message(exc: BaseException) -> str:
    """Phrase an uncaught exception as a runtime error message."""
    if isinstance(exc, NameError) and getattr(exc, "name", None):
        return f"Call to undefined function {exc.name}()"
    if isinstance(exc, ImportError) and not isinstance(exc, ModuleNotFoundError):
        name = getattr(exc, "name_from", None) or _imported_name(str(exc))
        if name and exc.name:
            return f'Class "{exc.name}.{name}" not found'
    return f"Uncaught {type(exc).__name__}: {exc}"


def _imported_name(text: str) -> Optional[str]:
    # "cannot import name 'X' from 'pkg.mod' (...)"
    marker = "cannot import name '"
    if not text.startswith(marker):
        return None
    return text[len(marker):].split("'", 1)[0] or None


def exception_location(exc: BaseException) -> tuple[str, int]:
    if isinstance(exc, SyntaxError) and exc.filename:
        return exc.filename, exc.lineno or 0
    frames = traceback.extract_tb(exc.__traceback__) if exc.__traceback__ else []
    if frames:
        return frames[-1].filename, frames[-1].lineno or 0
    return "unknown", 0


class PythonRuntime:
    """
    Host runtime backed by the running interpreter.

    Args:
        reporting_level: Ambient reporting mask for warnings
        search_roots: Optional ``{prefix: [dirs]}`` searched for
            missing classes, in addition to loaders registered with
            ``register_loader``
    """

    def __init__(
        self,
        *,
        reporting_level: int = ErrorLevel.ALL,
        search_roots: Optional[dict[str, Iterable[str]]] = None,
        conventions: SymbolConventions = DOTTED_CONVENTIONS,
    ):
        self.conventions = conventions
        self._reporting_level = int(reporting_level)
        self._loaders: list[Any] = [PrefixLoader(search_roots)] if search_roots else []

        self._error_hook: Optional[ErrorHook] = None
        self._shutdown_hooks: list[ShutdownHook] = []
        self._last_error: Optional[ErrorRecord] = None
        self._display = True

        self._showwarning = None
        self._filters: list[tuple] = []
        self._excepthook = None
        self._atexit_installed = False
        self._shut_down = False

        self._loaded: dict[str, Any] = {}
        self._declared: set[str] = set()

    # ========================================================================
    # ErrorSource
    # ========================================================================

    def reporting_level(self) -> int:
        return self._reporting_level

    def set_reporting_level(self, level: int) -> None:
        self._reporting_level = int(level)
        if self._showwarning is not None:
            self._sync_deprecation_filters()

    def install_error_hook(self, hook: ErrorHook) -> None:
        self._error_hook = hook
        if self._showwarning is None:
            self._showwarning = warnings.showwarning
            warnings.showwarning = self._on_warning
        self._sync_deprecation_filters()

    def _sync_deprecation_filters(self) -> None:
        # Outside __main__ the interpreter ignores deprecation warnings
        # by default; they never reach showwarning without these.
        if self._reporting_level & DEPRECATION_LEVELS:
            if not self._filters:
                for category in (DeprecationWarning, PendingDeprecationWarning):
                    warnings.filterwarnings("default", category=category)
                    self._filters.append(warnings.filters[0])
        else:
            self._remove_deprecation_filters()

    def _remove_deprecation_filters(self) -> None:
        for entry in self._filters:
            if entry in warnings.filters:
                warnings.filters.remove(entry)
        self._filters = []

    def _on_warning(self, message, category, filename, lineno, file=None, line=None):
        record = ErrorRecord(
            warning_level(category),
            str(message),
            filename,
            lineno or 0,
            {"category": category.__name__},
        )
        self._last_error = record

        # A raised fault propagates out of warnings.warn() at the call site
        if self._error_hook is not None and self._error_hook(record):
            return
        self._showwarning(message, category, filename, lineno, file, line)

    # ========================================================================
    # ShutdownSignal
    # ========================================================================

    def install_shutdown_hook(self, hook: ShutdownHook) -> None:
        self._shutdown_hooks.append(hook)
        if self._excepthook is None:
            self._excepthook = sys.excepthook
            sys.excepthook = self._on_uncaught
        if not self._atexit_installed:
            atexit.register(self.shutdown)
            self._atexit_installed = True

    def _on_uncaught(self, exc_type, exc, tb) -> None:
        if not issubclass(exc_type, KeyboardInterrupt):
            self.record_exception(exc)
        # A FinalHandler is reached through fatal recovery at shutdown;
        # any other hook would never see the exception otherwise.
        if (
            self._display
            or issubclass(exc_type, KeyboardInterrupt)
            or not isinstance(self._excepthook, FinalHandler)
        ):
            self._excepthook(exc_type, exc, tb)

    def last_fatal(self) -> Optional[ErrorRecord]:
        return self._last_error

    def record_exception(self, exc: BaseException) -> ErrorRecord:
        """Record ``exc`` as the last fatal condition, as if uncaught."""
        file, line = exception_location(exc)
        self._last_error = ErrorRecord(
            exception_level(exc),
            exception_message(exc),
            file,
            line,
            {"exception": exc},
        )
        return self._last_error

    def shutdown(self) -> None:
        if self._shut_down:
            return
        self._shut_down = True
        for hook in self._shutdown_hooks:
            hook()

    def exception_handler(self) -> Any:
        """
        The terminal exception handler.

        This is ``sys.excepthook`` unless our own bridge is installed
        there, in which case it is the hook the bridge delegates to.
        """
        if sys.excepthook == self._on_uncaught:
            return self._excepthook
        return sys.excepthook

    def set_exception_handler(self, handler: Any) -> Any:
        """Install ``handler``; returns the previous one."""
        previous = self.exception_handler()
        if sys.excepthook == self._on_uncaught:
            self._excepthook = handler
        else:
            sys.excepthook = handler
        return previous

    def disable_display(self) -> None:
        self._display = False

    def uninstall(self) -> None:
        """Restore the interpreter's original hooks."""
        if self._showwarning is not None:
            warnings.showwarning = self._showwarning
            self._showwarning = None
        self._remove_deprecation_filters()
        if self._excepthook is not None:
            sys.excepthook = self._excepthook
            self._excepthook = None
        if self._atexit_installed:
            atexit.unregister(self.shutdown)
            self._atexit_installed = False

    # ========================================================================
    # SymbolTable
    # ========================================================================

    def defined_functions(self) -> dict[str, list[str]]:
        internal = sorted(
            name for name, obj in vars(builtins).items()
            if inspect.isbuiltin(obj) and not name.startswith("_")
        )
        user: list[str] = []
        for module_name, module in sorted(sys.modules.copy().items()):
            if module is None or module_name.startswith("_"):
                continue
            try:
                members = list(vars(module).items())
            except TypeError:
                continue
            for name, obj in members:
                if inspect.isfunction(obj) and obj.__module__ == module_name and not name.startswith("_"):
                    user.append(f"{module_name}.{name}")
        for module in self._loaded.values():
            for name, obj in vars(module).items():
                if inspect.isfunction(obj) and obj.__module__ == module.__name__:
                    user.append(f"{module.__name__}.{name}")
        return {"internal": internal, "user": user}

    def symbol_exists(self, name: str) -> bool:
        if name in self._declared:
            return True
        module_name, _, attr = name.rpartition(".")
        module = sys.modules.get(module_name) if module_name else None
        return module is not None and inspect.isclass(getattr(module, attr, None))

    def register_loader(self, loader: Any) -> None:
        self._loaders.append(loader)

    def symbol_loaders(self) -> list[Any]:
        finders = [f for f in sys.meta_path if hasattr(f, "prefix_mappings") or hasattr(f, "unwrap")]
        return self._loaders + finders

    def require_once(self, path: str) -> None:
        """
        Execute a source file as an isolated module, once per path.

        The module is not added to sys.modules. Classes it defines are
        addressable by their bare name, and a class named after its
        file is addressable by the file's dotted path.
        """
        resolved = os.path.realpath(path)
        if resolved in self._loaded:
            return

        stem = os.path.splitext(os.path.basename(resolved))[0]
        module_name = f"_vigil_probe_{len(self._loaded)}_{stem}"
        spec = importlib.util.spec_from_file_location(module_name, resolved)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load {resolved}")

        module = importlib.util.module_from_spec(spec)
        self._loaded[resolved] = module
        spec.loader.exec_module(module)

        for name, obj in vars(module).items():
            if inspect.isclass(obj) and obj.__module__ == module_name:
                self._declared.add(name)
                if name == stem:
                    self._declared.update(self._dotted_names(resolved))

    def _dotted_names(self, resolved: str) -> set[str]:
        """Every dotted path a file can be reached by from a search root."""
        names: set[str] = set()
        suffix = self.conventions.source_suffix
        for loader in self.symbol_loaders():
            mappings = getattr(unwrap_loader(loader), "prefix_mappings", None)
            if not callable(mappings):
                continue
            for prefix, directories in mappings().items():
                for directory in directories:
                    base = os.path.realpath(directory)
                    if not resolved.startswith(base + os.sep):
                        continue
                    relative = resolved[len(base) + 1:]
                    if relative.endswith(suffix):
                        relative = relative[:-len(suffix)]
                    dotted = relative.replace(os.sep, ".")
                    names.add(dotted)
                    prefix = prefix.strip(".")
                    if prefix:
                        names.add(f"{prefix}.{dotted}")
        return names


_python_runtime: Optional[PythonRuntime] = None


def get_python_runtime() -> PythonRuntime:
    """
    Get or create the process-wide PythonRuntime.

    Returns:
        Global PythonRuntime instance
    """
    global _python_runtime
    if _python_runtime is None:
        _python_runtime = PythonRuntime()
    return _python_runtime
