from __future__ import annotations

from types import SimpleNamespace

from PySide6.QtTest import QTest
from PySide6.QtWidgets import QDialog, QDialogButtonBox

from sedation_chart.application.iv_sedation_mapper import registry_to_record
from sedation_chart.application.services.monitoring_log_editor import MonitoringLogEditor
from sedation_chart.domain.models.iv_sedation import PatientContext, SedationFieldRegistry
from sedation_chart.domain.models.medication_catalog import DEFAULT_CATALOG
from sedation_chart.infrastructure.db.remote_store import IV_SEDATION_TABLE
from sedation_chart.ui.iv_sedation.iv_sedation_wizard import IvSedationWizard
from sedation_chart.ui.iv_sedation.monitoring_dialog import MonitoringEntryDialog


def _service(store) -> SimpleNamespace:  # noqa: ANN001
    return SimpleNamespace(store=store, catalog=DEFAULT_CATALOG)


def test_next_is_blocked_but_badges_jump(qapp, memory_store, patient: PatientContext) -> None:  # noqa: ARG001
    wizard = IvSedationWizard(_service(memory_store), patient)

    wizard._btn_next.click()
    assert wizard.session.current_step == 1
    assert wizard._stack.currentIndex() == 0

    wizard._step_badges[3].click()
    assert wizard.session.current_step == 4
    assert wizard._stack.currentIndex() == 3
    assert wizard._btn_back.isEnabled() is True

    wizard._step_badges[4].click()
    assert wizard._btn_next.text() == "Review"

    wizard._btn_back.click()
    assert wizard.session.current_step == 4
    wizard.reject()


def test_reopened_draft_shows_completed_steps(
    qapp, memory_store, patient: PatientContext, complete_registry: SedationFieldRegistry  # noqa: ARG001
) -> None:
    record = memory_store.create(
        IV_SEDATION_TABLE, registry_to_record(complete_registry, patient=patient, status="draft")
    )
    wizard = IvSedationWizard(_service(memory_store), patient, record=record)

    assert wizard._step_badges[0].property("stepState") == "active"
    assert [badge.text() for badge in wizard._step_badges[1:]] == ["✓", "✓", "✓", "✓"]
    wizard.reject()


def test_close_flushes_pending_edit_as_draft(qapp, memory_store, patient: PatientContext) -> None:  # noqa: ARG001
    wizard = IvSedationWizard(_service(memory_store), patient)

    wizard.session.set_field("weight", "150")
    assert memory_store.rows(IV_SEDATION_TABLE) == []

    wizard.reject()

    rows = memory_store.rows(IV_SEDATION_TABLE)
    assert len(rows) == 1
    assert rows[0]["status"] == "draft"
    assert rows[0]["weight"] == 150
    assert wizard.session.current_draft_id is None


def test_monitoring_dialog_requires_time_and_joins_bp(qapp) -> None:  # noqa: ARG001
    registry = SedationFieldRegistry()
    changes: list[list] = []
    editor = MonitoringLogEditor(registry, on_entries_changed=changes.append)
    editor.begin_add()
    dialog = MonitoringEntryDialog(editor)
    ok_button = dialog.buttons.button(QDialogButtonBox.StandardButton.Ok)

    assert ok_button.isEnabled() is False
    QTest.keyClicks(dialog.time_edit, "14:30")
    QTest.keyClicks(dialog.systolic_edit, "120")
    QTest.keyClicks(dialog.diastolic_edit, "80")
    assert ok_button.isEnabled() is True
    dialog.medication_boxes["midazolam"].click()

    dialog.accept()

    assert dialog.result() == QDialog.DialogCode.Accepted
    assert registry.flow_entries[0].bp == "120/80"
    assert registry.flow_entries[0].medications == ["midazolam"]
    assert len(changes) == 1
    assert editor.is_open is False


def test_monitoring_dialog_cancel_leaves_log_untouched(qapp) -> None:  # noqa: ARG001
    registry = SedationFieldRegistry()
    editor = MonitoringLogEditor(registry)
    editor.begin_add()
    dialog = MonitoringEntryDialog(editor)

    QTest.keyClicks(dialog.time_edit, "09:00")
    dialog.reject()

    assert registry.flow_entries == []
    assert editor.is_open is False
