"""
Vigil - Logging channels.

A channel is a named sink for diagnostic entries. The dispatcher
writes deprecations to ``"deprecation"`` and fatal recovery writes to
``"emergency"``. Channels are registered once and overwritten by the
last writer; they are never removed.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol, runtime_checkable

logger = logging.getLogger("vigil.channels")

DEPRECATION = "deprecation"
EMERGENCY = "emergency"


@runtime_checkable
class LoggerCapability(Protocol):
    """Interface a channel logger must satisfy."""

    def warning(self, message: str, metadata: Mapping[str, Any]) -> None:
        ...

    def emergency(self, message: str, metadata: Mapping[str, Any]) -> None:
        ...


class LoggerChannel:
    """
    Adapts a stdlib ``logging.Logger`` to the channel interface.

    Metadata is attached to the log record as ``record.vigil``.
    ``emergency`` entries are logged at CRITICAL.
    """

    def __init__(self, target: logging.Logger | str):
        self.logger = logging.getLogger(target) if isinstance(target, str) else target

    def warning(self, message: str, metadata: Mapping[str, Any]) -> None:
        self.logger.warning(message, extra={"vigil": dict(metadata)})

    def emergency(self, message: str, metadata: Mapping[str, Any]) -> None:
        self.logger.critical(message, extra={"vigil": dict(metadata)})

    def __repr__(self) -> str:
        return f"LoggerChannel({self.logger.name!r})"


class ChannelRegistry:
    """Registry of channel loggers keyed by channel name."""

    def __init__(self):
        self._channels: dict[str, LoggerCapability] = {}

    def set_channel(self, name: str, channel: LoggerCapability | logging.Logger) -> None:
        """Register ``channel`` under ``name``, replacing any previous one."""
        if isinstance(channel, logging.Logger):
            channel = LoggerChannel(channel)
        self._channels[name] = channel
        logger.debug(f"Registered channel '{name}': {channel!r}")

    def get(self, name: str) -> Optional[LoggerCapability]:
        return self._channels.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._channels

    def names(self) -> list[str]:
        return list(self._channels)


# Process-wide registry used when none is injected
_default_channels: Optional[ChannelRegistry] = None


def get_default_channels() -> ChannelRegistry:
    """
    Get or create the process-wide channel registry.

    Returns:
        Global ChannelRegistry instance
    """
    global _default_channels
    if _default_channels is None:
        _default_channels = ChannelRegistry()
    return _default_channels
