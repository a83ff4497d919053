"""
Vigil Testing - Recording doubles.

Provides :class:`RecordingChannel`, a channel logger that captures
entries for assertion, and :class:`RecordingHandler`, a final handler
that captures forwarded faults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .handlers import FinalHandler


@dataclass
class CapturedEntry:
    """A channel entry captured by :class:`RecordingChannel`."""
    level: str
    message: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"<CapturedEntry level={self.level!r} message={self.message!r}>"


class RecordingChannel:
    """
    Channel logger that records instead of writing.

    Usage::

        channel = RecordingChannel()
        channels.set_channel("deprecation", channel)
        ...
        assert channel.count("warning") == 1
    """

    def __init__(self):
        self.entries: List[CapturedEntry] = []

    def warning(self, message: str, metadata: Mapping[str, Any]) -> None:
        self.entries.append(CapturedEntry("warning", message, dict(metadata)))

    def emergency(self, message: str, metadata: Mapping[str, Any]) -> None:
        self.entries.append(CapturedEntry("emergency", message, dict(metadata)))

    def count(self, level: Optional[str] = None) -> int:
        if level is None:
            return len(self.entries)
        return sum(1 for e in self.entries if e.level == level)

    @property
    def last(self) -> Optional[CapturedEntry]:
        return self.entries[-1] if self.entries else None

    def reset(self) -> None:
        self.entries.clear()


class RecordingHandler(FinalHandler):
    """Final handler that records every exception it is given."""

    def __init__(self):
        self.handled: List[BaseException] = []

    def handle(self, exception: BaseException) -> None:
        self.handled.append(exception)

    @property
    def last(self) -> Optional[BaseException]:
        return self.handled[-1] if self.handled else None

    def reset(self) -> None:
        self.handled.clear()
