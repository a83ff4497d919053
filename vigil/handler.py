"""
Vigil - Registration entry point.

ErrorHandler wires the dispatcher and fatal recovery to a host
runtime. It is registered once per process:

    ```python
    handler = ErrorHandler.register()
    ErrorHandler.set_logger(logging.getLogger("app.deprecations"))
    ErrorHandler.set_logger(logging.getLogger("app.fatal"), "emergency")
    ```
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .channels import DEPRECATION, ChannelRegistry, LoggerCapability, get_default_channels
from .dispatcher import STACK_DEPTH, ErrorDispatcher
from .fatal import RESERVED_MEMORY, FatalRecovery, ReservedMargin
from .levels import parse_level
from .records import DispatchConfig, ErrorRecord
from .suggest import DiagnosticSuggester

logger = logging.getLogger("vigil")


class ErrorHandler:
    """
    The live error handler.

    Holds the dispatch configuration shared by the dispatcher and
    fatal recovery, and the reserved memory margin.

    Args:
        runtime: Host runtime (PythonRuntime if None)
        channels: Channel registry (process-wide default if None)
        stack_depth: Frames logged with deprecations
        reserved_memory: Bytes held back for fatal error handling
    """

    def __init__(
        self,
        runtime: Any = None,
        *,
        channels: Optional[ChannelRegistry] = None,
        stack_depth: int = STACK_DEPTH,
        reserved_memory: int = 0,
    ):
        if runtime is None:
            from .runtime.python import get_python_runtime
            runtime = get_python_runtime()

        self.runtime = runtime
        self.channels = channels if channels is not None else get_default_channels()
        self.config = DispatchConfig(level=runtime.reporting_level())
        self.margin = ReservedMargin(reserved_memory)
        self.suggester = DiagnosticSuggester(runtime)
        self.dispatcher = ErrorDispatcher(
            self.config,
            runtime,
            channels=self.channels,
            stack_depth=stack_depth,
        )
        self.recovery = FatalRecovery(
            self.config,
            runtime,
            channels=self.channels,
            margin=self.margin,
            suggester=self.suggester,
        )

    # ========================================================================
    # Registration
    # ========================================================================

    @classmethod
    def register(
        cls,
        level: Any = None,
        display_errors: bool = True,
        *,
        runtime: Any = None,
        channels: Optional[ChannelRegistry] = None,
        reserved_memory: int = RESERVED_MEMORY,
        stack_depth: int = STACK_DEPTH,
    ) -> "ErrorHandler":
        """
        Register the error handler with the host runtime.

        Args:
            level: Level at which errors are raised as faults (None to use
                the runtime's reporting level, 0 to disable)
            display_errors: Raise and display errors (development) or only
                log them (production)
            runtime: Host runtime (PythonRuntime if None)
            channels: Channel registry (process-wide default if None)
            reserved_memory: Bytes held back for fatal error handling

        Returns:
            The registered error handler
        """
        handler = cls(
            runtime,
            channels=channels,
            stack_depth=stack_depth,
            reserved_memory=reserved_memory,
        )
        handler.set_level(level)
        handler.set_display_errors(display_errors)

        handler.runtime.disable_display()
        handler.runtime.install_error_hook(handler.handle)
        handler.runtime.install_shutdown_hook(handler.handle_fatal)

        logger.debug(
            f"Registered error handler (level={handler.config.level}, "
            f"display_errors={handler.config.display_errors})"
        )
        return handler

    @classmethod
    def from_config(cls, config: Any, *, runtime: Any = None, channels: Optional[ChannelRegistry] = None) -> "ErrorHandler":
        """
        Register from a HandlerConfig (or a ConfigLoader holding one).

        Channel entries are stdlib logger names wrapped in LoggerChannel.
        """
        from .config import ConfigLoader, HandlerConfig

        if isinstance(config, ConfigLoader):
            config = config.get_handler_config()
        if not isinstance(config, HandlerConfig):
            raise TypeError(f"Expected HandlerConfig, got {type(config).__name__}")

        registry = channels if channels is not None else get_default_channels()
        for name, logger_name in config.channels.items():
            registry.set_channel(name, logging.getLogger(logger_name))

        return cls.register(
            config.level,
            config.display_errors,
            runtime=runtime,
            channels=registry,
            reserved_memory=config.reserved_memory,
            stack_depth=config.stack_depth,
        )

    # ========================================================================
    # Reconfiguration
    # ========================================================================

    def set_level(self, level: Any) -> None:
        """Set the threshold (None for the runtime's level, 0 to disable)."""
        parsed = parse_level(level)
        self.config.level = self.runtime.reporting_level() if parsed is None else parsed

    def set_display_errors(self, display_errors: bool) -> None:
        self.config.display_errors = bool(display_errors)

    @staticmethod
    def set_logger(
        channel_logger: LoggerCapability | logging.Logger,
        channel: str = DEPRECATION,
        *,
        channels: Optional[ChannelRegistry] = None,
    ) -> None:
        """Register a logger for a channel (last writer wins)."""
        (channels if channels is not None else get_default_channels()).set_channel(channel, channel_logger)

    # ========================================================================
    # Hooks
    # ========================================================================

    def handle(self, record: ErrorRecord) -> bool:
        """Error hook: see ErrorDispatcher.handle."""
        return self.dispatcher.handle(record)

    def handle_fatal(self) -> None:
        """Shutdown hook: see FatalRecovery.handle_fatal."""
        self.recovery.handle_fatal()

    @property
    def level(self) -> int:
        return self.config.level

    @property
    def display_errors(self) -> bool:
        return self.config.display_errors
