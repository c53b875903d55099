import json

import pytest
import yaml

from triggersim.engine import SimulationEngine
from triggersim.errors import SnapshotFormatError
from triggersim.examples import AND_GATE
from triggersim.layout import load_layout, read_layout, save_layout
from triggersim.listener import TraceRecorder


def write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


class TestReadLayout:
    def test_json_snapshot(self, tmp_path):
        p = write(tmp_path / "gate.json", json.dumps(AND_GATE))
        layout = read_layout(p)
        assert layout.name == "gate"
        assert [t["id"] for t in layout.triggers] == ["T_A_MEM", "T_B_MEM", "T_CHAIN", "T_RESULT"]
        assert layout.pulses == []

    def test_yaml_mapping_with_pulses(self, tmp_path):
        p = write(tmp_path / "net.yaml", """
name: Demo
triggers:
  - id: A
    activateOn: [X, Y]
pulses:
  - X
  - channel: Y
    time: 4
""")
        layout = read_layout(p)
        assert layout.name == "Demo"
        assert layout.triggers == [{"id": "A", "activateOn": ["X", "Y"]}]
        assert layout.pulses == [("X", 0), ("Y", 4)]

    def test_yaml_bare_list(self, tmp_path):
        p = write(tmp_path / "net.yml", "- id: A\n- id: B\n")
        assert [t["id"] for t in read_layout(p).triggers] == ["A", "B"]

    def test_yaml_mapping_without_triggers(self, tmp_path):
        p = write(tmp_path / "empty.yaml", "name: Nothing\n")
        layout = read_layout(p)
        assert layout.triggers == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_layout(tmp_path / "nope.json")

    @pytest.mark.parametrize("name,text", [
        ("bad.json", "{not json"),
        ("obj.json", '{"id": "A"}'),
        ("bad.yaml", "triggers: [unclosed"),
        ("scalar.yaml", "just text"),
        ("pulses.yaml", "triggers: []\npulses:\n  - 3\n"),
        ("neg.yaml", "triggers: []\npulses:\n  - channel: A\n    time: -1\n"),
        ("nan.yaml", "triggers: []\npulses:\n  - channel: A\n    time: .nan\n"),
        ("inf.yaml", "triggers: []\npulses:\n  - channel: A\n    time: .inf\n"),
    ])
    def test_malformed(self, tmp_path, name, text):
        with pytest.raises(SnapshotFormatError):
            read_layout(write(tmp_path / name, text))


class TestLoadSaveLayout:
    def test_load_replaces_triggers(self, tmp_path):
        engine = SimulationEngine()
        engine.add_trigger({"id": "OLD"})
        p = write(tmp_path / "gate.json", json.dumps(AND_GATE))
        load_layout(engine, p)
        assert engine.registry.ids() == ["T_A_MEM", "T_B_MEM", "T_CHAIN", "T_RESULT"]

    def test_malformed_file_leaves_engine_untouched(self, tmp_path):
        engine = SimulationEngine()
        engine.add_trigger({"id": "KEEP"})
        trace = engine.add_listener(TraceRecorder())
        with pytest.raises(SnapshotFormatError):
            load_layout(engine, write(tmp_path / "bad.json", "[{]"))
        assert engine.registry.ids() == ["KEEP"]
        assert trace.lines[-1].emphasis is True

    def test_save_json_then_load(self, tmp_path):
        engine = SimulationEngine()
        engine.load_snapshot(AND_GATE)
        saved = save_layout(engine, tmp_path / "out.json")
        assert json.loads(saved.read_text()) == engine.save_snapshot()

        other = SimulationEngine()
        load_layout(other, saved)
        assert other.save_snapshot() == engine.save_snapshot()

    def test_save_yaml(self, tmp_path):
        engine = SimulationEngine()
        engine.load_snapshot(AND_GATE)
        trace = engine.add_listener(TraceRecorder())
        saved = save_layout(engine, tmp_path / "out.yaml", name="Gate")
        data = yaml.safe_load(saved.read_text())
        assert data["name"] == "Gate"
        assert data["triggers"] == engine.save_snapshot()
        assert trace.messages == ["Layout saved to out.yaml"]

        other = SimulationEngine()
        load_layout(other, saved)
        assert other.save_snapshot() == engine.save_snapshot()
