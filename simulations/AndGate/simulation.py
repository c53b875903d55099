"""AND gate simulation built on `SimulationEngine`.

Loads `layout.yaml` next to this file (or a given layout), and replays its
pulse script one pulse at a time, recording the trace.

Usage example:
    sim = AndGateSimulation()
    sim.run_script()
    sim.states()  # {'T_A_MEM': True, 'T_B_MEM': True, 'T_CHAIN': True, 'T_RESULT': True}
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple

from triggersim.engine import SimulationEngine
from triggersim.layout import Layout, load_layout
from triggersim.listener import TraceRecorder
from triggersim.pacing import Pacer
import logging

_logger = logging.getLogger(__name__)


class AndGateSimulation(SimulationEngine):
    def __init__(self, layout_path: Optional[str] = None, pacer: Optional[Pacer] = None):
        super().__init__(pacer=pacer)
        self.trace = self.add_listener(TraceRecorder())
        self.layout: Optional[Layout] = None

        # Fall back to the layout.yaml shipped next to this file
        path = Path(layout_path) if layout_path else Path(__file__).resolve().parent / "layout.yaml"
        if path.exists():
            self.layout = load_layout(self, path)
        else:
            _logger.error("layout file not found: %s", path)

    def run_script(self, pulses: Optional[List[Tuple[str, float]]] = None) -> int:
        """Inject each pulse in turn (default: the layout's script). Returns how many ran."""
        if pulses is None:
            pulses = self.layout.pulses if self.layout is not None else []
        ran = 0
        for channel, time in pulses:
            if self.inject_pulse(channel, time):
                ran += 1
        return ran

    def states(self) -> Dict[str, bool]:
        return {t.id: t.state for t in self.registry}


__all__ = ["AndGateSimulation"]
