"""Registry of triggers keyed by id.

The registry owns every Trigger. Insertion order is preserved so that a pulse
is presented to triggers in a fixed, reproducible order. It also tracks the
single "selected" trigger the edit panel works on, and converts the whole set
to and from the flat snapshot format used for layout files.
"""
from __future__ import annotations

from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from .errors import InvalidTriggerError, SnapshotFormatError
from .trigger import Trigger


def validate_snapshot(data: Any) -> List[Mapping[str, Any]]:
    """Check a whole snapshot payload before anything is mutated.

    A snapshot is a list of mappings. Per-entry problems such as a duplicate
    id are left to `add_trigger`; this only rejects payloads with the wrong
    overall shape.
    """
    if not isinstance(data, list):
        raise SnapshotFormatError(f"snapshot must be a list of triggers, got {type(data).__name__}")
    for index, entry in enumerate(data):
        if not isinstance(entry, Mapping):
            raise SnapshotFormatError(f"snapshot entry {index} is not a mapping: {entry!r}")
    return data


class TriggerRegistry:
    def __init__(self):
        self._triggers: Dict[str, Trigger] = {}
        self._selected_id: Optional[str] = None

    def add_trigger(self, config: Union[Trigger, Mapping[str, Any]]) -> Trigger:
        """Register a trigger built from `config` (or an existing Trigger).

        Raises InvalidTriggerError if the id is empty or already registered.
        Nothing is registered when an error is raised.
        """
        trigger = config if isinstance(config, Trigger) else Trigger.from_config(config)
        if not trigger.id or trigger.id in self._triggers:
            raise InvalidTriggerError("Invalid or duplicate trigger ID.")
        self._triggers[trigger.id] = trigger
        return trigger

    def get(self, trigger_id: str) -> Optional[Trigger]:
        return self._triggers.get(trigger_id)

    def delete_trigger(self, trigger_id: str) -> Optional[Trigger]:
        """Remove and return the trigger, or None if it is not registered."""
        trigger = self._triggers.pop(trigger_id, None)
        if trigger is not None and self._selected_id == trigger_id:
            self._selected_id = None
        return trigger

    def clear(self) -> None:
        self._triggers = {}
        self._selected_id = None

    # --- selection (edit panel target) ---
    def select(self, trigger_id: Optional[str]) -> Optional[Trigger]:
        if trigger_id is not None and trigger_id not in self._triggers:
            raise KeyError(trigger_id)
        self._selected_id = trigger_id
        return self.selected

    @property
    def selected(self) -> Optional[Trigger]:
        if self._selected_id is None:
            return None
        return self._triggers.get(self._selected_id)

    # --- iteration ---
    def snapshot(self) -> List[Trigger]:
        """Return the registered triggers as a list, in insertion order.

        Callers iterate the copy so that the set of triggers stays fixed while
        one pulse is being delivered.
        """
        return list(self._triggers.values())

    def ids(self) -> List[str]:
        return list(self._triggers)

    def __iter__(self) -> Iterator[Trigger]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._triggers)

    def __contains__(self, trigger_id: object) -> bool:
        return trigger_id in self._triggers

    # --- persistence ---
    def serialize_all(self) -> List[Dict[str, Any]]:
        return [t.serialize() for t in self._triggers.values()]

    def __repr__(self) -> str:
        return f"TriggerRegistry(triggers={len(self._triggers)})"
