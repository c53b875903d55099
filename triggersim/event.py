"""Event object stored in the event queue.

An Event is a scheduled pulse: a logical `time`, the `channel` to pulse and
the id of whatever produced it. `source_id` is presentation-only (flash cues
and log lines); routing is by channel alone.
"""
from __future__ import annotations

from dataclasses import dataclass

# Source label for pulses injected from outside the network.
EXTERNAL_SOURCE = "EXTERNAL"


@dataclass(frozen=True)
class Event:
    time: float
    channel: str
    source_id: str = EXTERNAL_SOURCE

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"Event(time={self.time!r}, channel={self.channel!r}, source_id={self.source_id!r})"
