"""
Vigil Faults - Structured fault types.

Every error Vigil raises or forwards is a typed Fault with a stable
code, a human message, a domain and a severity.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain taxonomy
- Severity: Severity levels
- ContextErrorFault: Recoverable runtime error
- FatalErrorFault: Fatal error observed at shutdown
- UndefinedFunctionFault / ClassNotFoundFault: Enhanced fatal errors
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
)

from .domains import (
    ContextErrorFault,
    FatalErrorFault,
    SymbolFault,
    UndefinedFunctionFault,
    ClassNotFoundFault,
    ConfigFault,
    ConfigInvalidFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",

    # Domain faults
    "ContextErrorFault",
    "FatalErrorFault",
    "SymbolFault",
    "UndefinedFunctionFault",
    "ClassNotFoundFault",
    "ConfigFault",
    "ConfigInvalidFault",
]
