"""Command-line runner: load a layout, inject pulses, print the trace.

Usage:
  python -m triggersim simulations/AndGate/layout.yaml -p RESET -p A_ON -p B_ON
  python -m triggersim --interval 0.7      # paced, built-in AND gate

Each pulse runs to completion before the next one is injected.
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional, Sequence, Tuple

try:
    # Prefer absolute import when run as a module
    from triggersim.engine import SimulationEngine
    from triggersim.errors import SnapshotFormatError
    from triggersim.examples import AND_GATE_PULSES, build_and_gate
    from triggersim.layout import load_layout, save_layout
    from triggersim.listener import SimulationListener
    from triggersim.pacing import AsyncioPacer
except ImportError:
    # Fallback for running in environments where absolute imports fail
    from .engine import SimulationEngine
    from .errors import SnapshotFormatError
    from .examples import AND_GATE_PULSES, build_and_gate
    from .layout import load_layout, save_layout
    from .listener import SimulationListener
    from .pacing import AsyncioPacer


class ConsolePrinter(SimulationListener):
    """Print trace lines as they happen; milestone lines are prefixed with '*'."""

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stdout

    def on_log(self, message: str, emphasis: bool = False) -> None:
        prefix = "* " if emphasis else "  "
        print(f"{prefix}{message}", file=self.stream)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="triggersim", description="Run a trigger network simulation")
    parser.add_argument("layout", nargs="?", help="layout file (.json snapshot or .yaml); defaults to the built-in AND gate")
    parser.add_argument("-p", "--pulse", action="append", default=None, metavar="CHANNEL",
                        help="channel to pulse; repeat for a sequence (default: the layout's pulses)")
    parser.add_argument("--time", type=float, default=0, help="logical time for injected pulses (default: 0)")
    parser.add_argument("--interval", type=float, default=0.0,
                        help="wall-clock seconds per processed event; 0 runs synchronously")
    parser.add_argument("--save", metavar="PATH", help="write the final trigger snapshot to PATH")
    parser.add_argument("--status", action="store_true", help="print engine status after the run")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser.parse_args(argv)


async def _run_paced(engine: SimulationEngine, pulses: List[Tuple[str, float]]) -> None:
    loop = asyncio.get_running_loop()

    class _Done(SimulationListener):
        def __init__(self):
            self.future = None

        def on_run_finished(self, time):
            if self.future is not None and not self.future.done():
                self.future.set_result(time)

    done = engine.add_listener(_Done())
    try:
        for channel, time in pulses:
            done.future = loop.create_future()
            if engine.inject_pulse(channel, time):
                await done.future
    finally:
        engine.remove_listener(done)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    paced = args.interval > 0
    engine = SimulationEngine(pacer=AsyncioPacer(interval=args.interval) if paced else None)
    engine.add_listener(ConsolePrinter())

    layout_pulses: List[Tuple[str, float]] = []
    if args.layout:
        try:
            layout = load_layout(engine, args.layout)
        except (SnapshotFormatError, FileNotFoundError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
        layout_pulses = layout.pulses
    else:
        build_and_gate(engine)
        layout_pulses = [(channel, 0) for channel in AND_GATE_PULSES]

    if args.pulse:
        pulses = [(channel, args.time) for channel in args.pulse]
    else:
        pulses = layout_pulses

    if paced:
        asyncio.run(_run_paced(engine, pulses))
    else:
        for channel, time in pulses:
            engine.inject_pulse(channel, time)

    if args.status:
        engine.print_status()
    if args.save:
        save_layout(engine, args.save)
    engine.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
