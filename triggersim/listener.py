"""Outbound notifications from the engine to whatever presents it.

A presentation layer subclasses `SimulationListener` and overrides the hooks
it cares about; the defaults do nothing. `TraceRecorder` simply keeps
everything it is told, which is what the command-line runner and the tests
use to inspect a run.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .trigger import Trigger

FLASH_FIRE = "fire"
FLASH_LISTEN = "listen"


@dataclass(frozen=True)
class LogLine:
    message: str
    emphasis: bool = False

    def __str__(self) -> str:
        return self.message


class SimulationListener:
    def on_log(self, message: str, emphasis: bool = False) -> Any:
        """A trace line. `emphasis` marks milestones (injections, steps, run end)."""
        return None

    def on_state_changed(self, trigger: "Trigger") -> Any:
        return None

    def on_flash(self, trigger_id: str, kind: str) -> Any:
        """Transient visual cue: `fire` on an event's source, `listen` on its listeners."""
        return None

    def on_run_finished(self, time: float) -> Any:
        return None


class TraceRecorder(SimulationListener):
    def __init__(self):
        self.lines: List[LogLine] = []
        self.state_changes: List[Tuple[str, bool]] = []
        self.flashes: List[Tuple[str, str]] = []
        self.runs_finished: List[float] = []

    def on_log(self, message: str, emphasis: bool = False) -> None:
        self.lines.append(LogLine(message, emphasis))

    def on_state_changed(self, trigger: "Trigger") -> None:
        self.state_changes.append((trigger.id, trigger.state))

    def on_flash(self, trigger_id: str, kind: str) -> None:
        self.flashes.append((trigger_id, kind))

    def on_run_finished(self, time: float) -> None:
        self.runs_finished.append(time)

    @property
    def messages(self) -> List[str]:
        return [line.message for line in self.lines]

    def clear(self) -> None:
        self.lines.clear()
        self.state_changes.clear()
        self.flashes.clear()
        self.runs_finished.clear()
