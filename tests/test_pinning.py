"""Tests für PinManager (manuelle Zuweisungen und Ausschlüsse)."""

import json

import pytest

from models.errors import DuplicatePinError
from models.keys import SlotKey
from solver.pinning import ForbiddenAssignment, ManualAssignment, PinManager


@pytest.fixture
def pm():
    return PinManager()


class TestManualPins:
    def test_add_and_get(self, pm):
        updated = pm.add_pin(ManualAssignment(student_id=1, slot="101_CS"))
        assert updated is False
        pins = pm.get_pins()
        assert len(pins) == 1
        assert pins[0].slot == SlotKey.real(101, "CS")

    def test_replace_existing_pin(self, pm):
        """Ein zweiter Pin derselben Bewerbung ersetzt den ersten."""
        pm.add_pin(ManualAssignment(student_id=1, slot="101_CS"))
        updated = pm.add_pin(ManualAssignment(student_id=1, slot="102_CS"))
        assert updated is True
        assert [p.slot for p in pm.get_pins()] == [SlotKey.real(102, "CS")]

    def test_remove(self, pm):
        pm.add_pin(ManualAssignment(student_id=1, slot="101_CS"))
        assert pm.remove_pin(1) is True
        assert pm.remove_pin(1) is False
        assert pm.get_pins() == []

    def test_invalid_slot_text(self):
        with pytest.raises(ValueError):
            ManualAssignment(student_id=1, slot="101")


class TestForbiddenPins:
    def test_duplicate_rejected(self, pm):
        pm.add_forbidden(ForbiddenAssignment(student_id=2, slot="101_CS"))
        with pytest.raises(DuplicatePinError):
            pm.add_forbidden(ForbiddenAssignment(student_id=2, slot="101_CS"))
        assert len(pm.get_forbidden()) == 1

    def test_several_slots_per_student(self, pm):
        pm.add_forbidden(ForbiddenAssignment(student_id=2, slot="101_CS"))
        pm.add_forbidden(ForbiddenAssignment(student_id=2, slot="102_CS"))
        assert len(pm) == 2

    def test_remove(self, pm):
        pm.add_forbidden(ForbiddenAssignment(student_id=2, slot="101_CS"))
        assert pm.remove_forbidden(2, SlotKey.real(101, "CS")) is True
        assert pm.remove_forbidden(2, SlotKey.real(101, "CS")) is False


class TestSnapshot:
    def test_snapshot_isolated_from_later_changes(self, pm):
        pm.add_pin(ManualAssignment(student_id=1, slot="101_CS"))
        snap = pm.snapshot()
        pm.add_pin(ManualAssignment(student_id=2, slot="102_CS"))
        pm.add_forbidden(ForbiddenAssignment(student_id=3, slot="101_CS"))
        assert len(snap.manual) == 1
        assert snap.forbidden == ()

    def test_repr(self, pm):
        assert repr(pm) == "PinManager(0 pins, 0 forbidden)"


class TestPersistence:
    def test_roundtrip(self, pm, tmp_path):
        pm.add_pin(ManualAssignment(student_id=1, slot="101_CS"))
        pm.add_pin(ManualAssignment(student_id=2, slot="unlisted-3"))
        pm.add_forbidden(ForbiddenAssignment(student_id=3, slot="102_EE"))
        path = tmp_path / "sub" / "pins.json"
        pm.save_json(path)

        raw = json.loads(path.read_text(encoding="utf-8"))
        assert raw["manual"][0] == {"student_id": 1, "slot": "101_CS"}
        assert raw["forbidden"] == [{"student_id": 3, "slot": "102_EE"}]

        loaded = PinManager()
        loaded.load_json(path)
        assert loaded.get_pins() == pm.get_pins()
        assert loaded.get_forbidden() == pm.get_forbidden()
        assert loaded.get_pins()[1].slot == SlotKey.unlisted(3)

    def test_load_replaces_current_pins(self, pm, tmp_path):
        path = tmp_path / "pins.json"
        PinManager().save_json(path)
        pm.add_pin(ManualAssignment(student_id=1, slot="101_CS"))
        pm.load_json(path)
        assert len(pm) == 0

    def test_missing_file(self, pm, tmp_path):
        with pytest.raises(FileNotFoundError):
            pm.load_json(tmp_path / "fehlt.json")


class TestSlotKeyParse:
    @pytest.mark.parametrize("text,expected", [
        ("101_CS", SlotKey.real(101, "CS")),
        (" 7_EE ", SlotKey.real(7, "EE")),
        ("3_A_B", SlotKey.real(3, "A_B")),
        ("unlisted-2", SlotKey.unlisted(2)),
        ("overflow", SlotKey.overflow()),
    ])
    def test_parse(self, text, expected):
        assert SlotKey.parse(text) == expected
        assert SlotKey.parse(str(expected)) == expected

    @pytest.mark.parametrize("text", ["CS", "101_", "abc_CS"])
    def test_parse_invalid(self, text):
        with pytest.raises(ValueError):
            SlotKey.parse(text)
