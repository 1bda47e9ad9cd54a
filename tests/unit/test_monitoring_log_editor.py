from __future__ import annotations

from datetime import datetime

import pytest

from sedation_chart.application.services.monitoring_log_editor import MonitoringLogEditor
from sedation_chart.domain.models.iv_sedation import FlowEntry, SedationFieldRegistry
from sedation_chart.domain.models.medication_catalog import DEFAULT_CATALOG, Medication, MedicationCatalog
from sedation_chart.domain.rules.iv_sedation_rules import is_step_complete
from sedation_chart.domain.rules.monitoring_log import FlowEntryBuffer, join_blood_pressure, split_blood_pressure


def _editor(registry: SedationFieldRegistry, changes: list[list[FlowEntry]] | None = None) -> MonitoringLogEditor:
    ids = iter(["e-1", "e-2", "e-3"])
    return MonitoringLogEditor(
        registry,
        on_entries_changed=changes.append if changes is not None else None,
        id_factory=lambda: next(ids),
        now=lambda: datetime(2025, 3, 1, 14, 30),
    )


def test_add_edit_remove_scenario(complete_registry: SedationFieldRegistry) -> None:
    complete_registry.flow_entries = []
    changes: list[list[FlowEntry]] = []
    editor = _editor(complete_registry, changes)

    buffer = editor.begin_add()
    buffer.time = "14:30"
    buffer.systolic = "120"
    buffer.diastolic = "80"
    entry = editor.confirm()

    assert entry is not None
    assert entry.bp == "120/80"
    assert complete_registry.flow_entries == [entry]
    assert is_step_complete(complete_registry, 4) is True

    buffer = editor.begin_edit("e-1")
    assert (buffer.systolic, buffer.diastolic) == ("120", "80")
    buffer.heart_rate = "72"
    edited = editor.confirm()

    assert edited is not None
    assert edited.id == "e-1"
    assert edited.bp == "120/80"
    assert edited.heart_rate == "72"

    editor.remove("e-1")

    assert complete_registry.flow_entries == []
    assert is_step_complete(complete_registry, 4) is False
    assert [len(item) for item in changes] == [1, 1, 0]


def test_confirm_requires_time() -> None:
    registry = SedationFieldRegistry()
    changes: list[list[FlowEntry]] = []
    editor = _editor(registry, changes)

    editor.begin_add().systolic = "120"

    assert editor.confirm() is None
    assert editor.is_open
    assert registry.flow_entries == []
    assert changes == []


def test_stamp_current_time_uses_clock() -> None:
    editor = _editor(SedationFieldRegistry())
    editor.begin_add()

    assert editor.stamp_current_time() == "14:30"
    assert editor.buffer is not None and editor.buffer.can_confirm


def test_toggle_medication_in_buffer() -> None:
    editor = _editor(SedationFieldRegistry())
    editor.begin_add()

    editor.toggle_medication("midazolam")
    editor.toggle_medication("fentanyl")
    assert editor.toggle_medication("midazolam") == ["fentanyl"]


def test_cancel_leaves_entries_untouched() -> None:
    registry = SedationFieldRegistry(flow_entries=[FlowEntry(id="a", time="10:00")])
    changes: list[list[FlowEntry]] = []
    editor = _editor(registry, changes)

    editor.begin_edit("a").time = "11:00"
    editor.cancel()

    assert registry.flow_entries[0].time == "10:00"
    assert not editor.is_open
    assert changes == []


def test_begin_edit_unknown_entry() -> None:
    editor = _editor(SedationFieldRegistry())

    with pytest.raises(ValueError, match="not found"):
        editor.begin_edit("missing")


def test_operations_without_open_buffer_raise() -> None:
    editor = _editor(SedationFieldRegistry())

    with pytest.raises(ValueError, match="No monitoring entry"):
        editor.confirm()


def test_remove_unknown_entry_is_noop() -> None:
    registry = SedationFieldRegistry(flow_entries=[FlowEntry(id="a", time="10:00")])
    changes: list[list[FlowEntry]] = []
    editor = _editor(registry, changes)

    editor.remove("missing")

    assert len(registry.flow_entries) == 1
    assert changes == []


def test_medication_labels_fall_back_to_id() -> None:
    editor = _editor(SedationFieldRegistry())
    entry = FlowEntry(id="a", time="10:00", medications=["midazolam", "unknown-drug"])

    assert editor.medication_labels(entry) == ["Midazolam (Versed)", "unknown-drug"]


def test_blood_pressure_join_and_split() -> None:
    assert join_blood_pressure(" 120 ", "80") == "120/80"
    assert join_blood_pressure("", "") == ""
    assert split_blood_pressure("120/80") == ("120", "80")
    assert split_blood_pressure("") == ("", "")
    assert FlowEntryBuffer(time=" 14:30 ").to_entry("x").time == "14:30"


def test_catalog_groups_by_category_and_keeps_first_duplicate() -> None:
    catalog = MedicationCatalog(
        [
            Medication("a", "Alpha", "Sedative"),
            Medication("b", "Beta", "Opioid"),
            Medication("a", "Alpha again", "Opioid"),
        ]
    )

    assert len(catalog) == 2
    assert "a" in catalog
    assert catalog.label_for("a") == "Alpha"
    assert [item.id for item in catalog.by_category()["Sedative"]] == ["a"]
    assert "Sedative" in DEFAULT_CATALOG.by_category()
