"""
Vigil - Final handler abstraction.

The final handler receives the (possibly enhanced) fatal fault once
the process is terminating. Fatal recovery only forwards to handlers
deriving from FinalHandler; anything else installed by the host is
ignored.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class FinalHandler(ABC):
    """
    Abstract base class for terminal exception handlers.

    Example:
        ```python
        class StderrHandler(FinalHandler):
            def handle(self, exception: BaseException) -> None:
                print(exception, file=sys.stderr)
        ```
    """

    @abstractmethod
    def handle(self, exception: BaseException) -> None:
        """
        Report an exception that ended the process.

        Args:
            exception: Fault or exception to report
        """
        pass

    def __call__(self, exc_type, exc, tb) -> None:
        # sys.excepthook signature
        self.handle(exc)
