"""
Vigil Runtime - Host integrations.

- base: capability interfaces (ErrorSource, ShutdownSignal, SymbolTable)
- memory: scriptable in-memory host
- python: CPython bridge (warnings, excepthook, atexit)
"""

from .base import (
    BACKSLASH_CONVENTIONS,
    DOTTED_CONVENTIONS,
    ErrorSource,
    Runtime,
    ShutdownSignal,
    SymbolConventions,
    SymbolTable,
)
from .memory import InMemoryRuntime, scan_declarations
from .python import PythonRuntime, get_python_runtime

__all__ = [
    "BACKSLASH_CONVENTIONS",
    "DOTTED_CONVENTIONS",
    "ErrorSource",
    "Runtime",
    "ShutdownSignal",
    "SymbolConventions",
    "SymbolTable",
    "InMemoryRuntime",
    "scan_declarations",
    "PythonRuntime",
    "get_python_runtime",
]
