"""triggersim package entry point"""

__all__ = [
	"SimulationEngine", "Trigger", "TriggerRegistry", "EventQueue", "Event", "EXTERNAL_SOURCE",
	"parse_channels", "join_channels", "SimulationListener", "TraceRecorder",
	"ImmediatePacer", "ManualPacer", "AsyncioPacer",
	"TriggerSimError", "InvalidTriggerError", "TriggerInactiveError", "SnapshotFormatError",
]

try:
	# Prefer absolute imports when package is installed or run as a module
	from triggersim.channels import parse_channels, join_channels
	from triggersim.event import Event, EXTERNAL_SOURCE
	from triggersim.scheduler import EventQueue
	from triggersim.trigger import Trigger
	from triggersim.registry import TriggerRegistry
	from triggersim.listener import SimulationListener, TraceRecorder
	from triggersim.pacing import ImmediatePacer, ManualPacer, AsyncioPacer
	from triggersim.engine import SimulationEngine
	from triggersim.errors import (
		TriggerSimError, InvalidTriggerError, TriggerInactiveError, SnapshotFormatError,
	)
except ImportError:
	# Fallback to relative imports (useful when running files directly)
	from .channels import parse_channels, join_channels
	from .event import Event, EXTERNAL_SOURCE
	from .scheduler import EventQueue
	from .trigger import Trigger
	from .registry import TriggerRegistry
	from .listener import SimulationListener, TraceRecorder
	from .pacing import ImmediatePacer, ManualPacer, AsyncioPacer
	from .engine import SimulationEngine
	from .errors import (
		TriggerSimError, InvalidTriggerError, TriggerInactiveError, SnapshotFormatError,
	)

__version__ = "0.1.0"
