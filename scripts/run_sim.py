"""Simple demo runner for the trigger simulator."""
from triggersim import SimulationEngine, TraceRecorder
from triggersim.examples import build_and_gate

def main():
    engine = SimulationEngine()
    trace = engine.add_listener(TraceRecorder())
    build_and_gate(engine)

    print("Running simulation...")
    for channel in ("RESET", "A_ON", "B_ON"):
        engine.inject_pulse(channel)

    for line in trace.lines:
        marker = "*" if line.emphasis else " "
        print(f"{marker} {line.message}")

    states = ", ".join(f"{t.id}={'on' if t.state else 'off'}" for t in engine.registry)
    print(f"Final states at T={engine.time}: {states}")

if __name__ == "__main__":
    main()
