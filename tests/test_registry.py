import pytest

from triggersim.errors import InvalidTriggerError, SnapshotFormatError
from triggersim.registry import TriggerRegistry, validate_snapshot
from triggersim.trigger import Trigger


class TestTriggerRegistry:
    def test_add_get_delete(self):
        reg = TriggerRegistry()
        t = reg.add_trigger({"id": "T1", "activateOn": "A"})
        assert reg.get("T1") is t
        assert "T1" in reg
        assert len(reg) == 1
        assert reg.delete_trigger("T1") is t
        assert reg.get("T1") is None
        assert len(reg) == 0

    def test_add_accepts_trigger_instance(self):
        reg = TriggerRegistry()
        t = Trigger(id="T1")
        assert reg.add_trigger(t) is t

    def test_duplicate_id_rejected_without_mutation(self):
        reg = TriggerRegistry()
        first = reg.add_trigger({"id": "T1", "delay": 1})
        with pytest.raises(InvalidTriggerError):
            reg.add_trigger({"id": "T1", "delay": 9})
        assert reg.get("T1") is first
        assert len(reg) == 1

    def test_empty_id_rejected(self):
        reg = TriggerRegistry()
        with pytest.raises(InvalidTriggerError):
            reg.add_trigger({"id": ""})
        with pytest.raises(InvalidTriggerError):
            reg.add_trigger(Trigger(id=""))
        assert len(reg) == 0

    def test_delete_missing_is_noop(self):
        reg = TriggerRegistry()
        reg.add_trigger({"id": "T1"})
        assert reg.delete_trigger("nope") is None
        assert len(reg) == 1

    def test_insertion_order(self):
        reg = TriggerRegistry()
        for tid in ["C", "A", "B"]:
            reg.add_trigger({"id": tid})
        assert reg.ids() == ["C", "A", "B"]
        assert [t.id for t in reg] == ["C", "A", "B"]
        assert [s["id"] for s in reg.serialize_all()] == ["C", "A", "B"]

    def test_snapshot_is_a_copy(self):
        reg = TriggerRegistry()
        reg.add_trigger({"id": "A"})
        snap = reg.snapshot()
        reg.add_trigger({"id": "B"})
        assert [t.id for t in snap] == ["A"]

    def test_delete_clears_selection(self):
        reg = TriggerRegistry()
        reg.add_trigger({"id": "A"})
        reg.add_trigger({"id": "B"})
        reg.select("A")
        reg.delete_trigger("B")
        assert reg.selected.id == "A"
        reg.delete_trigger("A")
        assert reg.selected is None

    def test_select_unknown_raises(self):
        reg = TriggerRegistry()
        with pytest.raises(KeyError):
            reg.select("ghost")
        assert reg.select(None) is None

    def test_clear(self):
        reg = TriggerRegistry()
        reg.add_trigger({"id": "A"})
        reg.select("A")
        reg.clear()
        assert len(reg) == 0
        assert reg.selected is None


class TestValidateSnapshot:
    def test_accepts_list_of_mappings(self):
        data = [{"id": "A"}, {"id": "B"}]
        assert validate_snapshot(data) is data

    def test_accepts_empty_list(self):
        assert validate_snapshot([]) == []

    @pytest.mark.parametrize("bad", [{"id": "A"}, "A", None, 3, [{"id": "A"}, "B"], [[1, 2]]])
    def test_rejects_wrong_shape(self, bad):
        with pytest.raises(SnapshotFormatError):
            validate_snapshot(bad)
