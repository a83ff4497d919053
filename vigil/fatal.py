"""
Vigil - Fatal error recovery.

Runs once at process termination. Decides whether the exit was
caused by a fatal error, logs it to the "emergency" channel and,
when display is enabled, forwards an enhanced fault to the final
handler installed by the host.

Nothing here may raise: the process is already unwinding.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .channels import EMERGENCY, ChannelRegistry, get_default_channels
from .faults import FatalErrorFault
from .handlers import FinalHandler
from .levels import is_fatal
from .records import DispatchConfig
from .suggest import DiagnosticSuggester

logger = logging.getLogger("vigil.fatal")

RESERVED_MEMORY = 10240


class ReservedMargin:
    """
    Memory held between registration and fatal handling.

    Released on entry to fatal handling so formatting and filesystem
    scans have headroom after an out-of-memory error.
    """

    def __init__(self, size: int = RESERVED_MEMORY):
        self.size = size
        self._block: Optional[bytearray] = bytearray(size) if size > 0 else None

    @property
    def held(self) -> bool:
        return self._block is not None

    def release(self) -> bool:
        """Free the block. Returns False if it was already released."""
        if self._block is None:
            return False
        self._block = None
        return True


class FatalRecovery:
    """
    Shutdown-time handler for fatal errors.

    Args:
        config: Shared dispatch configuration
        runtime: Host runtime (ShutdownSignal, SymbolTable, exception handler)
        channels: Channel registry (process-wide default if None)
        margin: Reserved memory released on entry
        suggester: Diagnostic suggester (created over ``runtime`` if None)
    """

    def __init__(
        self,
        config: DispatchConfig,
        runtime: Any,
        *,
        channels: Optional[ChannelRegistry] = None,
        margin: Optional[ReservedMargin] = None,
        suggester: Optional[DiagnosticSuggester] = None,
    ):
        self.config = config
        self.runtime = runtime
        self.channels = channels if channels is not None else get_default_channels()
        self.margin = margin or ReservedMargin(0)
        self.suggester = suggester or DiagnosticSuggester(runtime)

    def __call__(self) -> None:
        self.handle_fatal()

    def handle_fatal(self) -> None:
        """Shutdown hook entry point."""
        try:
            self._handle_fatal()
        except Exception as e:
            logger.error(f"Fatal error recovery failed: {e}", exc_info=True)

    def _handle_fatal(self) -> None:
        record = self.runtime.last_fatal()
        if record is None:
            return

        self.margin.release()

        if not self.config.enabled or not is_fatal(record.code):
            return

        channel = self.channels.get(EMERGENCY)
        if channel is not None:
            file, line = record.location
            try:
                channel.emergency(
                    record.message,
                    {"code": int(record.code), "file": file, "line": line},
                )
            except Exception as e:
                logger.error(f"Emergency channel raised exception: {e}", exc_info=True)

        if not self.config.display_errors:
            return

        handler = self.runtime.exception_handler()
        if not isinstance(handler, FinalHandler):
            logger.debug(f"No final handler installed (found {handler!r})")
            return

        fault = FatalErrorFault.from_record(record)
        try:
            enhanced = self.suggester.enhance(record, fault)
        except Exception as e:
            logger.error(f"Diagnostic enhancement failed: {e}", exc_info=True)
            enhanced = None

        handler.handle(enhanced if enhanced is not None else fault)
