"""Simulation engine: the run loop plus the operations a front end calls.

The engine owns the event queue and the logical clock, and works on the
triggers held by its registry. A run starts when a pulse is injected (or a
trigger is fired by hand) and ends when the queue is empty. Each step pops
the earliest event, advances the clock to it, emits the flash cues, then
hands delivery of the pulse to the pacer. Delivery presents the channel to
every trigger in registry order and moves on to the next step.

Only one run may be in progress. Operations that would start a second run or
edit triggers mid-run are refused with a log line instead of raising.
"""
from __future__ import annotations

from functools import partial
import json
import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Union

from .errors import InvalidTriggerError, SnapshotFormatError
from .event import EXTERNAL_SOURCE, Event
from .listener import FLASH_FIRE, FLASH_LISTEN, SimulationListener
from .pacing import ImmediatePacer, ManualPacer, Pacer
from .registry import TriggerRegistry, validate_snapshot
from .scheduler import EventQueue
from .trigger import Trigger

_logger = logging.getLogger(__name__)

IDLE = "idle"
RUNNING = "running"


class SimulationEngine:
    def __init__(self, pacer: Optional[Pacer] = None, registry: Optional[TriggerRegistry] = None):
        """Create an engine with an empty queue.

        Args:
            pacer: Step scheduler deciding when each popped event is
                delivered. Defaults to `ImmediatePacer`, which runs a whole
                simulation synchronously.
            registry: Trigger registry to work on. A new empty one is created
                if omitted.
        """
        self.pacer = pacer if pacer is not None else ImmediatePacer()
        self.registry = registry if registry is not None else TriggerRegistry()
        self.queue = EventQueue()
        self._time: float = 0
        self._running = False
        self._pending = None
        # Bumped on every cancellation so a step scheduled by an older run is ignored.
        self._run_id = 0
        self._listeners: List[SimulationListener] = []

    # --- state ---
    @property
    def time(self) -> float:
        return self._time

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def status(self) -> str:
        return RUNNING if self._running else IDLE

    # --- listeners ---
    def add_listener(self, listener: SimulationListener) -> SimulationListener:
        self._listeners.append(listener)
        return listener

    def remove_listener(self, listener: SimulationListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def log(self, message: str, emphasis: bool = False) -> None:
        """Emit a trace line to the module logger and every listener."""
        if emphasis:
            _logger.info(message)
        else:
            _logger.debug(message)
        for listener in list(self._listeners):
            listener.on_log(message, emphasis)

    def _reject(self, message: str) -> None:
        _logger.warning(message)
        for listener in list(self._listeners):
            listener.on_log(message, True)

    def _notify_state(self, trigger: Trigger) -> None:
        for listener in list(self._listeners):
            listener.on_state_changed(trigger)

    def _flash(self, trigger_id: str, kind: str) -> None:
        for listener in list(self._listeners):
            listener.on_flash(trigger_id, kind)

    # --- starting a run ---
    def inject_pulse(self, channel: str, time: float = 0) -> bool:
        """Queue an external pulse on `channel` at `time` and start a run.

        Returns False (and logs why) if a run is already in progress, the
        channel is empty or `time` is not a finite non-negative number. If a
        listener raises during a synchronous run, the run is dropped and the
        exception propagates.
        """
        if self._running:
            self._reject("Cannot pulse; simulation is already running.")
            return False
        if not isinstance(channel, str) or not channel.strip():
            self._reject("Channel name cannot be empty.")
            return False
        if isinstance(time, bool) or not isinstance(time, (int, float)) or not math.isfinite(time) or time < 0:
            self._reject(f"Cannot pulse at T={time!r}; time must be a finite non-negative number.")
            return False

        channel = channel.strip()
        self._running = True
        run_id = self._run_id
        try:
            self.log(f"⚡ Injecting initial pulse on channel '{channel}' at T={time}", emphasis=True)
            self.queue.push(Event(time=time, channel=channel, source_id=EXTERNAL_SOURCE))
            self._advance()
        except BaseException:
            if run_id == self._run_id:
                self._abort_run()
            raise
        return True

    def manual_fire(self, trigger_id: str) -> bool:
        """Fire `trigger_id` by hand at the current time and start a run.

        The trigger must exist and be active. Its output (if any) is scheduled
        exactly as a channel-driven fire would schedule it.
        """
        if self._running:
            self._reject("Cannot manually trigger; simulation is already running.")
            return False

        trigger = self.registry.get(trigger_id)
        if trigger is None:
            return False

        if not trigger.state:
            self._reject(f"Cannot manually trigger '{trigger_id}'; it is inactive.")
            return False

        self._running = True
        run_id = self._run_id
        try:
            self.log(f"⚡ Manually triggering '{trigger_id}' at T={self._time}", emphasis=True)
            trigger.manual_fire(self.queue, self._time, log=self.log)
            self._flash(trigger.id, FLASH_FIRE)
            self._advance()
        except BaseException:
            if run_id == self._run_id:
                self._abort_run()
            raise
        return True

    # --- run loop ---
    def _advance(self) -> None:
        if self.queue.is_empty():
            self._finish_run()
            return

        event = self.queue.pop_min()
        self._time = event.time
        self.log(f"--- Processing T={event.time}, Channel='{event.channel}' ---", emphasis=True)

        triggers = self.registry.snapshot()
        if event.source_id in self.registry:
            self._flash(event.source_id, FLASH_FIRE)
        for trigger in triggers:
            if trigger.listens_to(event.channel):
                self._flash(trigger.id, FLASH_LISTEN)

        run_id = self._run_id
        handle = self.pacer.schedule(partial(self._deliver, event, run_id))
        # An immediate pacer may already have finished the run by now.
        if self._running and self._run_id == run_id:
            self._pending = handle

    def _deliver(self, event: Event, run_id: int) -> None:
        if run_id != self._run_id or not self._running:
            _logger.debug("dropping stale step for %r", event)
            return
        self._pending = None
        try:
            self._deliver_to_triggers(event, run_id)
        except BaseException:
            if run_id == self._run_id:
                self._abort_run()
            raise

    def _deliver_to_triggers(self, event: Event, run_id: int) -> None:
        handled_any = False
        for trigger in self.registry.snapshot():
            before = trigger.state
            if trigger.handle_pulse(event.channel, self.queue, self._time, log=self.log):
                handled_any = True
            if trigger.state != before:
                self._notify_state(trigger)
            if run_id != self._run_id:
                # A listener reset the engine mid-delivery.
                return

        if not handled_any:
            self.log(f"  - Pulse on '{event.channel}' was not handled by any trigger.")
        if run_id == self._run_id:
            self._advance()

    def _finish_run(self) -> None:
        self._running = False
        self._pending = None
        self.log("--- Simulation End ---", emphasis=True)
        for listener in list(self._listeners):
            listener.on_run_finished(self._time)

    def _abort_run(self) -> None:
        """Drop the current run, keeping the clock where it stopped."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self._run_id += 1
        self.queue.clear()
        self._running = False

    def _cancel_run(self) -> None:
        self._abort_run()
        self._time = 0

    def run_until_idle(self, max_steps: Optional[int] = None) -> int:
        """Drive a run paced by a `ManualPacer` to completion.

        Returns the number of steps delivered. With the default immediate
        pacer every run is already complete, so this returns 0.
        """
        if isinstance(self.pacer, ManualPacer):
            return self.pacer.drain(max_steps=max_steps)
        if self._running:
            raise TypeError(f"{type(self.pacer).__name__} cannot be driven synchronously")
        return 0

    # --- reset / teardown ---
    def reset_simulation(self) -> None:
        """Abort any run, empty the queue, rewind the clock and restore initial states."""
        self._cancel_run()
        for trigger in self.registry.snapshot():
            before = trigger.state
            trigger.reset()
            if trigger.state != before:
                self._notify_state(trigger)
        self.log("Simulation reset to initial states.")

    def clear_all(self) -> None:
        """Abort any run and remove every trigger."""
        self._cancel_run()
        self.registry.clear()
        self.log("Cleared all triggers.")

    def close(self) -> None:
        self._cancel_run()
        self._listeners = []

    # --- trigger editing ---
    def add_trigger(self, config: Union[Trigger, Mapping[str, Any]]) -> Optional[Trigger]:
        if self._running:
            self._reject("Cannot add triggers while the simulation is running.")
            return None
        try:
            trigger = self.registry.add_trigger(config)
        except InvalidTriggerError as exc:
            self._reject(str(exc))
            return None
        self.log(f"Trigger '{trigger.id}' created.")
        self._notify_state(trigger)
        return trigger

    def delete_trigger(self, trigger_id: str) -> bool:
        if self._running:
            self._reject("Cannot delete triggers while the simulation is running.")
            return False
        if self.registry.delete_trigger(trigger_id) is None:
            return False
        self.log(f"Deleted trigger '{trigger_id}'.")
        return True

    def select_trigger(self, trigger_id: Optional[str]) -> Optional[Trigger]:
        try:
            return self.registry.select(trigger_id)
        except KeyError:
            return None

    def update_trigger_field(self, trigger_id: str, field: str, value: Any) -> bool:
        if self._running:
            self._reject("Cannot edit triggers while the simulation is running.")
            return False
        trigger = self.registry.get(trigger_id)
        if trigger is None:
            self._reject(f"No trigger named '{trigger_id}'.")
            return False
        try:
            trigger.update_field(field, value)
        except InvalidTriggerError as exc:
            self._reject(f"Cannot update '{field}' for trigger '{trigger_id}': {exc}")
            return False
        self.log(f"Updated '{field}' for trigger '{trigger_id}'.")
        self._notify_state(trigger)
        return True

    def toggle_trigger(self, trigger_id: str) -> bool:
        if self._running:
            self._reject("Cannot toggle state while the simulation is running.")
            return False
        trigger = self.registry.get(trigger_id)
        if trigger is None:
            return False
        trigger.manual_toggle()
        self.log(f"Manually toggled '{trigger_id}' to {'Active' if trigger.state else 'Inactive'}.")
        self._notify_state(trigger)
        return True

    # --- snapshots ---
    def save_snapshot(self) -> List[Dict[str, Any]]:
        return self.registry.serialize_all()

    def load_snapshot(self, data: Any, source: Optional[str] = None) -> List[Trigger]:
        """Replace every trigger with the ones described by `data`.

        `data` is a snapshot list or its JSON text. The whole payload is
        checked before anything is touched; a malformed one raises
        SnapshotFormatError and leaves the current triggers as they were.
        Entries with an empty or duplicate id are reported and skipped, the
        same as an interactive add.
        """
        if isinstance(data, (str, bytes, bytearray)):
            try:
                data = json.loads(data)
            except ValueError as exc:
                self._reject("Failed to load layout. The file may be corrupted or in the wrong format.")
                raise SnapshotFormatError(f"snapshot is not valid JSON: {exc}") from exc
        try:
            entries = validate_snapshot(data)
        except SnapshotFormatError:
            self._reject("Failed to load layout. The file may be corrupted or in the wrong format.")
            raise

        self.clear_all()
        loaded = []
        for config in entries:
            trigger = self.add_trigger(config)
            if trigger is not None:
                loaded.append(trigger)
        self.log(f"Layout loaded from {source}" if source else "Layout loaded.")
        return loaded

    # --- diagnostics ---
    def print_status(self) -> None:
        """Print a compact status of the engine, its triggers and the queue.

        Shows the clock, run state, trigger states and the pending events as
          T | channel | source
        """
        events = self.queue.peek_events()
        print(f"Status at T={self._time}: {self.status}, {len(events)} event(s) in queue")
        if events:
            print(f"Next event: T={events[0].time}")
            print(f"Last  event: T={events[-1].time}")

        print("Triggers:")
        for trigger in self.registry.snapshot():
            print(f"  {trigger.id:20s} {'ACTIVE' if trigger.state else 'INACTIVE'}")

        print("Events:")
        for event in events:
            print(f"{str(event.time):>6} | {event.channel:20s} | {event.source_id}")

    def __repr__(self) -> str:
        return f"SimulationEngine(status={self.status!r}, time={self._time!r}, triggers={len(self.registry)}, pending={len(self.queue)})"
