"""
Vigil - Error dispatcher.

Live interception entry point for recoverable runtime errors. Each
record is classified and then:

- suppressed (handling disabled, below threshold, display off)
- logged to the "deprecation" channel (deprecations, never raised)
- raised as a ContextErrorFault at the call site that produced it
"""

from __future__ import annotations

import logging
import sys
import traceback
from typing import Any, Optional

from .channels import DEPRECATION, ChannelRegistry, get_default_channels
from .faults import ContextErrorFault
from .levels import is_deprecation
from .records import DispatchConfig, ErrorRecord

logger = logging.getLogger("vigil.dispatcher")

DEPRECATION_KIND = "deprecation"
TYPE_DEPRECATION = -100
STACK_DEPTH = 10


def capture_stack(depth: int = STACK_DEPTH, skip: int = 0) -> list[dict[str, Any]]:
    """
    Capture the current call stack, innermost frame first.

    Frames carry only file, line and function: no arguments and no
    locals. Capture starts ``skip`` frames above the caller.
    """
    frame = sys._getframe(skip + 1)
    summary = traceback.StackSummary.extract(
        traceback.walk_stack(frame),
        limit=depth,
        lookup_lines=False,
    )
    return [
        {"file": fs.filename, "line": fs.lineno, "function": fs.name}
        for fs in summary
    ]


class ErrorDispatcher:
    """
    Classifies intercepted errors and applies suppression policy.

    Args:
        config: Shared dispatch configuration
        runtime: ErrorSource providing the ambient reporting level
        channels: Channel registry (process-wide default if None)
        stack_depth: Maximum frames logged with deprecations (capped at
            STACK_DEPTH)
    """

    def __init__(
        self,
        config: DispatchConfig,
        runtime: Any,
        *,
        channels: Optional[ChannelRegistry] = None,
        stack_depth: int = STACK_DEPTH,
    ):
        self.config = config
        self.runtime = runtime
        self.channels = channels if channels is not None else get_default_channels()
        self.stack_depth = max(0, min(stack_depth, STACK_DEPTH))
        self._handling = False

    def __call__(self, record: ErrorRecord) -> bool:
        return self.handle(record)

    def handle(self, record: ErrorRecord) -> bool:
        """
        Handle one runtime error.

        Returns:
            True if the error was handled and the runtime's default
            behavior must not run, False otherwise

        Raises:
            ContextErrorFault: When the error is displayed and passes
                both the ambient and the configured level
        """
        if not self.config.enabled:
            return False

        # An error raised while we are already handling one (a failing
        # channel, for instance) falls through to the runtime default.
        if self._handling:
            return False

        self._handling = True
        try:
            return self._dispatch(record)
        finally:
            self._handling = False

    def _dispatch(self, record: ErrorRecord) -> bool:
        code = int(record.code)

        if is_deprecation(code):
            channel = self.channels.get(DEPRECATION)
            if channel is not None:
                stack = capture_stack(self.stack_depth, skip=2)
                try:
                    channel.warning(
                        record.message,
                        {"kind": DEPRECATION_KIND, "type": TYPE_DEPRECATION, "stack": stack},
                    )
                except Exception as e:
                    logger.error(f"Deprecation channel raised exception: {e}", exc_info=True)
            return True

        if (
            self.config.display_errors
            and self.runtime.reporting_level() & code
            and self.config.level & code
        ):
            raise ContextErrorFault(
                record.describe(),
                level=record.code,
                file=record.file,
                line=record.line,
                context=record.context,
            )

        return False
