"""
Vigil Debug - Final exception handler and text reports.

Features:
- ExceptionHandler: FinalHandler writing a report to a stream
- Source context around the failing line
- Suggested candidates of enhanced faults
- Cause chain (the original fatal error of an enhanced fault)
"""

from .handler import ExceptionHandler
from .renderer import build_context, render_exception_report

__all__ = [
    "ExceptionHandler",
    "build_context",
    "render_exception_report",
]
