"""
Vigil - Runtime error interception and diagnostics

Complete integration of:
- Dispatcher: Threshold-driven interception of recoverable errors
- Channels: Deprecation and emergency logging channels
- Fatal recovery: Shutdown-time handling of fatal errors
- Suggester: Candidate names for undefined functions and missing classes
- Runtimes: In-memory host and CPython bridge
- Faults: Structured faults with domains and severities
"""

__version__ = "0.3.0"

# ============================================================================
# Core
# ============================================================================

from .levels import ErrorLevel, label_for, parse_level
from .records import ErrorRecord, DispatchConfig, SymbolSearchRoot, SuggestionResult
from .handler import ErrorHandler
from .handlers import FinalHandler
from .dispatcher import ErrorDispatcher
from .fatal import FatalRecovery, ReservedMargin
from .config import ConfigLoader, HandlerConfig

# ============================================================================
# Channels
# ============================================================================

from .channels import (
    DEPRECATION,
    EMERGENCY,
    ChannelRegistry,
    LoggerCapability,
    LoggerChannel,
    get_default_channels,
)

# ============================================================================
# Diagnostics
# ============================================================================

from .suggest import DiagnosticSuggester
from .symbols import SymbolIndex
from .loaders import PrefixLoader, DebugLoader

# ============================================================================
# Faults
# ============================================================================

from .faults import (
    Fault,
    FaultDomain,
    Severity,
    ContextErrorFault,
    FatalErrorFault,
    SymbolFault,
    UndefinedFunctionFault,
    ClassNotFoundFault,
    ConfigFault,
    ConfigInvalidFault,
)

# ============================================================================
# Runtimes
# ============================================================================

from .runtime import (
    InMemoryRuntime,
    PythonRuntime,
    SymbolConventions,
    get_python_runtime,
)

from .debug import ExceptionHandler


__all__ = [
    "__version__",
    # Core
    "ErrorLevel",
    "label_for",
    "parse_level",
    "ErrorRecord",
    "DispatchConfig",
    "SymbolSearchRoot",
    "SuggestionResult",
    "ErrorHandler",
    "FinalHandler",
    "ErrorDispatcher",
    "FatalRecovery",
    "ReservedMargin",
    "ConfigLoader",
    "HandlerConfig",
    # Channels
    "DEPRECATION",
    "EMERGENCY",
    "ChannelRegistry",
    "LoggerCapability",
    "LoggerChannel",
    "get_default_channels",
    # Diagnostics
    "DiagnosticSuggester",
    "SymbolIndex",
    "PrefixLoader",
    "DebugLoader",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "ContextErrorFault",
    "FatalErrorFault",
    "SymbolFault",
    "UndefinedFunctionFault",
    "ClassNotFoundFault",
    "ConfigFault",
    "ConfigInvalidFault",
    # Runtimes
    "InMemoryRuntime",
    "PythonRuntime",
    "SymbolConventions",
    "get_python_runtime",
    # Debug
    "ExceptionHandler",
]
