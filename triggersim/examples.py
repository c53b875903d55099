"""Built-in example networks."""
from typing import Any, Dict, List, TYPE_CHECKING

if TYPE_CHECKING:
    from .engine import SimulationEngine
    from .trigger import Trigger

# Two memory cells feeding a chain trigger: pulse RESET, then A_ON, then
# B_ON, and T_RESULT switches on two time units later.
AND_GATE: List[Dict[str, Any]] = [
    {"id": "T_A_MEM", "activateOn": "A_ON", "deactivateOn": "RESET", "x": 50, "y": 100, "initialState": True},
    {"id": "T_B_MEM", "activateOn": "B_ON", "deactivateOn": "RESET", "x": 50, "y": 250, "initialState": True},
    {"id": "T_CHAIN", "activateOn": "A_ON", "deactivateOn": "RESET", "triggerOn": "B_ON",
     "whenTriggered": "AND_SUCCESS", "delay": 2, "x": 300, "y": 175},
    {"id": "T_RESULT", "activateOn": "AND_SUCCESS", "deactivateOn": "RESET", "x": 550, "y": 175},
]
AND_GATE_PULSES = ["RESET", "A_ON", "B_ON"]


def build_and_gate(engine: "SimulationEngine") -> List["Trigger"]:
    """Add the AND gate example to `engine` and return the created triggers."""
    engine.log("Building an AND gate example.")
    created = [engine.add_trigger(dict(config)) for config in AND_GATE]
    engine.log("AND Gate loaded. Pulse 'RESET', then 'A_ON', then 'B_ON' to test.")
    return [t for t in created if t is not None]
