"""Trigger: a named two-state automaton driven by channel pulses.

A trigger listens on three channel sets. A pulse on an activate channel
switches it on, a pulse on a deactivate channel switches it off, and a pulse
on a trigger channel while it is on makes it fire: if it has a
`when_triggered` channel, a new pulse on that channel is scheduled `delay`
time units later.

Triggers are plain data. They know nothing about rendering; anything that
wants to show them reads `state` and the channel lists, and the engine
notifies listeners when a state flips.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Any, Callable, Dict, List, Mapping, Optional

from .channels import join_channels, parse_channels
from .errors import InvalidTriggerError, TriggerInactiveError
from .event import Event
from .scheduler import EventQueue

LogFn = Callable[..., None]

# Persisted (camelCase) key -> attribute name.
_FIELD_ALIASES: Dict[str, str] = {
    "id": "id",
    "delay": "delay",
    "activateOn": "activate_on",
    "activate_on": "activate_on",
    "deactivateOn": "deactivate_on",
    "deactivate_on": "deactivate_on",
    "triggerOn": "trigger_on",
    "trigger_on": "trigger_on",
    "whenTriggered": "when_triggered",
    "when_triggered": "when_triggered",
    "initialState": "initial_state",
    "initial_state": "initial_state",
    "x": "x",
    "y": "y",
}

_EDITABLE_FIELDS = {"delay", "activate_on", "deactivate_on", "trigger_on", "when_triggered", "x", "y"}
_CHANNEL_FIELDS = {"activate_on", "deactivate_on", "trigger_on"}


def _coerce_delay(value: Any) -> float:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise InvalidTriggerError(f"delay must be a number, got {value!r}")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise InvalidTriggerError(f"delay must be a number, got {value!r}") from None
        if math.isfinite(value) and value.is_integer():
            value = int(value)
    if not isinstance(value, (int, float)):
        raise InvalidTriggerError(f"delay must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidTriggerError(f"delay must be finite, got {value!r}")
    if value < 0:
        raise InvalidTriggerError("delay must be >= 0")
    return value


def _coerce_channel_name(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidTriggerError(f"whenTriggered must be a channel name, got {value!r}")
    return value.strip() or None


def _coerce_position(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidTriggerError(f"position must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidTriggerError(f"position must be finite, got {value!r}")
    return value


@dataclass
class Trigger:
    """A single trigger and its mutable activation state.

    `initial_state` is the baseline restored by `reset()`. Only a manual
    toggle rewrites it; activation and deactivation during a run leave it
    alone.
    """

    id: str
    delay: float = 0
    activate_on: List[str] = field(default_factory=list)
    deactivate_on: List[str] = field(default_factory=list)
    trigger_on: List[str] = field(default_factory=list)
    when_triggered: Optional[str] = None
    initial_state: bool = False
    x: Optional[float] = None
    y: Optional[float] = None
    state: bool = field(init=False)

    def __post_init__(self) -> None:
        self.state = self.initial_state

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "Trigger":
        """Build a Trigger from a snapshot entry or add-trigger form.

        Accepts the persisted camelCase keys as well as attribute names.
        Unknown keys are ignored. Raises InvalidTriggerError when the id is
        missing/empty or a value cannot be used.
        """
        if not isinstance(config, Mapping):
            raise InvalidTriggerError(f"trigger config must be a mapping, got {type(config).__name__}")

        values: Dict[str, Any] = {}
        for key, value in config.items():
            attr = _FIELD_ALIASES.get(key)
            if attr is not None:
                values[attr] = value

        trigger_id = values.get("id")
        if isinstance(trigger_id, str):
            trigger_id = trigger_id.strip()
        if not trigger_id or not isinstance(trigger_id, str):
            raise InvalidTriggerError("Invalid or duplicate trigger ID.")

        return cls(
            id=trigger_id,
            delay=_coerce_delay(values.get("delay")),
            activate_on=parse_channels(values.get("activate_on")),
            deactivate_on=parse_channels(values.get("deactivate_on")),
            trigger_on=parse_channels(values.get("trigger_on")),
            when_triggered=_coerce_channel_name(values.get("when_triggered")),
            initial_state=bool(values.get("initial_state") or False),
            x=_coerce_position(values.get("x")),
            y=_coerce_position(values.get("y")),
        )

    # --- pulse handling ---
    def handle_pulse(self, channel: Optional[str], queue: EventQueue, current_time: float, log: Optional[LogFn] = None) -> bool:
        """Apply one pulse on `channel` and return whether any rule matched.

        The three rules are checked in order and all of them may apply:
        activation, then deactivation, then firing. A channel present in both
        the activate and deactivate sets therefore leaves the trigger
        inactive. Firing reads the state after the first two rules.
        """
        if not channel:
            return False
        handled = False

        if channel in self.activate_on:
            self.state = True
            self._log(log, f"T={current_time}: '{self.id}' ACTIVATED by channel '{channel}'.")
            handled = True

        if channel in self.deactivate_on:
            self.state = False
            self._log(log, f"T={current_time}: '{self.id}' DEACTIVATED by channel '{channel}'.")
            handled = True

        if channel in self.trigger_on and self.state:
            self._log(log, f"T={current_time}: '{self.id}' TRIGGERED by channel '{channel}'.")
            self._schedule_output(queue, current_time, log)
            handled = True

        return handled

    def manual_fire(self, queue: EventQueue, current_time: float, log: Optional[LogFn] = None) -> Optional[Event]:
        """Fire without a channel match. Only an active trigger may fire.

        Returns the scheduled Event, or None when `when_triggered` is unset.
        """
        if not self.state:
            raise TriggerInactiveError(f"Cannot manually trigger '{self.id}'; it is inactive.")
        return self._schedule_output(queue, current_time, log)

    def _schedule_output(self, queue: EventQueue, current_time: float, log: Optional[LogFn]) -> Optional[Event]:
        if not self.when_triggered:
            return None
        fire_time = current_time + self.delay
        self._log(log, f"  - Scheduling pulse on '{self.when_triggered}' at T={fire_time}")
        event = Event(time=fire_time, channel=self.when_triggered, source_id=self.id)
        queue.push(event)
        return event

    @staticmethod
    def _log(log: Optional[LogFn], message: str) -> None:
        if log is not None:
            log(message)

    # --- state management ---
    def reset(self) -> None:
        self.state = self.initial_state

    def manual_toggle(self) -> bool:
        """Flip the state and make the new state the reset baseline."""
        self.state = not self.state
        self.initial_state = self.state
        return self.state

    def listens_to(self, channel: str) -> bool:
        return channel in self.activate_on or channel in self.deactivate_on or channel in self.trigger_on

    def update_field(self, name: str, value: Any) -> str:
        """Set one editable field from user input and return the attribute name.

        Channel sets are parsed from their comma-delimited form, `delay` is
        parsed as a number and an empty `whenTriggered` clears it. The id and
        the live state cannot be edited this way.
        """
        attr = _FIELD_ALIASES.get(name, name)
        if attr not in _EDITABLE_FIELDS:
            raise InvalidTriggerError(f"field '{name}' cannot be edited")

        if attr in _CHANNEL_FIELDS:
            setattr(self, attr, parse_channels(value))
        elif attr == "delay":
            self.delay = _coerce_delay(value)
        elif attr == "when_triggered":
            self.when_triggered = _coerce_channel_name(value)
        else:
            setattr(self, attr, _coerce_position(value))
        return attr

    # --- persistence ---
    def serialize(self) -> Dict[str, Any]:
        """Return the snapshot form of this trigger (channel sets comma-joined)."""
        return {
            "id": self.id,
            "delay": self.delay,
            "activateOn": join_channels(self.activate_on),
            "deactivateOn": join_channels(self.deactivate_on),
            "triggerOn": join_channels(self.trigger_on),
            "whenTriggered": self.when_triggered,
            "initialState": self.initial_state,
            "x": self.x,
            "y": self.y,
        }

    def __repr__(self) -> str:
        status = "ACTIVE" if self.state else "INACTIVE"
        return f"Trigger(id={self.id!r}, state={status}, delay={self.delay!r})"
