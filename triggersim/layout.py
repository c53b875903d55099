"""Reading and writing trigger layouts on disk.

Two formats are understood:

- JSON snapshot files: a bare list of trigger snapshots, exactly what
  `SimulationEngine.save_snapshot()` returns.
- YAML layouts (``.yaml``/``.yml``): either the same bare list, or a mapping

      name: Optional layout name
      triggers:
        - id: T_A_MEM
          activateOn: A_ON
          deactivateOn: [RESET]
          initialState: true
      pulses:
        - RESET
        - channel: A_ON
          time: 0

  `pulses` is an optional script of external pulses for runners to inject
  one after another.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union, TYPE_CHECKING

import yaml

from .errors import SnapshotFormatError
from .registry import validate_snapshot

if TYPE_CHECKING:
    from .engine import SimulationEngine

_logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


@dataclass
class Layout:
    name: str
    triggers: List[Dict[str, Any]] = field(default_factory=list)
    pulses: List[Tuple[str, float]] = field(default_factory=list)


def _parse_pulses(raw: Any) -> List[Tuple[str, float]]:
    pulses = []
    for entry in raw or []:
        if isinstance(entry, str):
            channel, time = entry, 0
        elif isinstance(entry, dict):
            channel, time = entry.get("channel"), entry.get("time", 0)
        else:
            raise SnapshotFormatError(f"pulse entry must be a channel name or mapping: {entry!r}")
        if not isinstance(channel, str) or not channel.strip():
            raise SnapshotFormatError(f"pulse entry has no channel: {entry!r}")
        if isinstance(time, bool) or not isinstance(time, (int, float)) or not math.isfinite(time) or time < 0:
            raise SnapshotFormatError(f"pulse time must be a finite non-negative number: {entry!r}")
        pulses.append((channel.strip(), time))
    return pulses


def read_layout(filepath: Union[str, Path]) -> Layout:
    """Parse a layout file without touching any engine.

    Raises FileNotFoundError if the file is missing and SnapshotFormatError if
    it cannot be parsed or has the wrong shape.
    """
    p = Path(filepath)
    if not p.exists():
        raise FileNotFoundError(f"Layout file not found: {filepath}")

    text = p.read_text(encoding="utf-8")
    try:
        if p.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise SnapshotFormatError(f"cannot parse layout {p.name}: {exc}") from exc

    name = p.stem
    pulses: List[Tuple[str, float]] = []
    if isinstance(data, dict) and p.suffix.lower() in YAML_SUFFIXES:
        name = data.get("name") or name
        pulses = _parse_pulses(data.get("pulses"))
        data = data.get("triggers", [])
        if data is None:
            data = []

    triggers = validate_snapshot(data)
    return Layout(name=name, triggers=[dict(t) for t in triggers], pulses=pulses)


def load_layout(engine: "SimulationEngine", filepath: Union[str, Path]) -> Layout:
    """Read `filepath` and replace the engine's triggers with its contents.

    The engine is left untouched if the file is malformed.
    """
    try:
        layout = read_layout(filepath)
    except SnapshotFormatError:
        engine.log("Failed to load layout. The file may be corrupted or in the wrong format.", emphasis=True)
        raise
    engine.load_snapshot(layout.triggers, source=Path(filepath).name)
    _logger.debug("loaded layout %r with %d trigger(s)", layout.name, len(layout.triggers))
    return layout


def save_layout(engine: "SimulationEngine", filepath: Union[str, Path], name: Optional[str] = None) -> Path:
    """Write the engine's triggers to `filepath` (JSON, or YAML by suffix)."""
    p = Path(filepath)
    snapshot = engine.save_snapshot()
    if p.suffix.lower() in YAML_SUFFIXES:
        payload: Any = {"name": name or p.stem, "triggers": snapshot}
        text = yaml.safe_dump(payload, sort_keys=False)
    else:
        text = json.dumps(snapshot, indent=2)
    p.write_text(text, encoding="utf-8")
    engine.log(f"Layout saved to {p.name}")
    return p
