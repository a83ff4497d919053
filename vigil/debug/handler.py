"""
Vigil Debug - Terminal exception handler.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional, TextIO

from ..handlers import FinalHandler
from .renderer import render_exception_report

logger = logging.getLogger("vigil.debug")


class ExceptionHandler(FinalHandler):
    """
    Writes a plain text report of the exception that ended the process.

    With ``debug=False`` only the exception type and message are shown.

    Args:
        debug: Render the full report (source, candidates, causes)
        stream: Output stream (stderr if None)
    """

    def __init__(self, debug: bool = True, stream: Optional[TextIO] = None):
        self.debug = debug
        self.stream = stream

    @classmethod
    def register(cls, runtime: Any = None, *, debug: bool = True, stream: Optional[TextIO] = None) -> "ExceptionHandler":
        """Install a new handler as the runtime's exception handler."""
        if runtime is None:
            from ..runtime.python import get_python_runtime
            runtime = get_python_runtime()

        handler = cls(debug=debug, stream=stream)
        runtime.set_exception_handler(handler)
        return handler

    def handle(self, exception: BaseException) -> None:
        stream = self.stream or sys.stderr
        if self.debug:
            report = render_exception_report(exception)
        else:
            report = f"{type(exception).__name__}: {exception}\n"

        try:
            stream.write(report)
            stream.flush()
        except (OSError, ValueError) as e:
            logger.error(f"Could not write exception report: {e}")
