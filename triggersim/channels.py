"""Helpers for channel-name lists.

Channel sets are persisted as comma-delimited strings ("A_ON, RESET") and
held in memory as ordered lists. Duplicates are kept; membership is the only
thing the simulation cares about.
"""
from typing import Any, Iterable, List


def parse_channels(value: Any) -> List[str]:
    """Split `value` on commas and return the trimmed, non-empty names in order.

    Strings are split on ``,``. Lists and tuples (as written in YAML layouts)
    have each string item split the same way, so a name can never carry a
    comma. Anything else, including None, yields an empty list.
    """
    if isinstance(value, str):
        parts = value.split(",")
    elif isinstance(value, (list, tuple)):
        parts = [part for item in value if isinstance(item, str) for part in item.split(",")]
    else:
        return []
    return [p.strip() for p in parts if p.strip()]


def join_channels(names: Iterable[str]) -> str:
    return ", ".join(names)
