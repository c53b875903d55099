"""Exception types raised by the trigger simulator.

Model-level code (triggers, the registry, snapshot parsing) raises these;
the engine catches them at its operation boundary and reports them as log
lines, so none of them is fatal to a running session.
"""


class TriggerSimError(Exception):
    """Base class for all simulator errors."""


class InvalidTriggerError(TriggerSimError, ValueError):
    """A trigger configuration or field update was rejected (empty/duplicate id, bad value)."""


class TriggerInactiveError(TriggerSimError):
    """A manual fire was requested on a trigger that is not active."""


class SnapshotFormatError(TriggerSimError, ValueError):
    """A persisted snapshot could not be parsed or has the wrong shape."""
