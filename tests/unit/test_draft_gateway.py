from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from sedation_chart.application.notifications import RecordingNotifier
from sedation_chart.application.services.draft_gateway import SAVE_FAILED_MESSAGE, DraftPersistenceGateway
from sedation_chart.domain.models.iv_sedation import PatientContext, SedationFieldRegistry
from sedation_chart.infrastructure.db.remote_store import IV_SEDATION_TABLE


class _FakeClock:
    def __init__(self) -> None:
        self.value = 100.0

    def __call__(self) -> float:
        return self.value


class _Deferred:
    def __init__(self) -> None:
        self.jobs: list[Callable[[], None]] = []

    def __call__(self, job: Callable[[], None]) -> None:
        self.jobs.append(job)

    def run(self, index: int) -> None:
        self.jobs[index]()


def _gateway(store, patient: PatientContext, **kwargs) -> DraftPersistenceGateway:  # noqa: ANN001, ANN003
    registry = SedationFieldRegistry(patient_name=patient.display_name, patient_gender=patient.gender)
    return DraftPersistenceGateway(store, patient=patient, registry=registry, **kwargs)


def test_repeated_autosave_creates_once(memory_store, patient: PatientContext) -> None:
    gateway = _gateway(memory_store, patient)

    gateway.auto_save({"weight": "150"})
    gateway.auto_save({"weight": "150"})

    assert memory_store.calls == [("create", IV_SEDATION_TABLE), ("update", IV_SEDATION_TABLE)]
    rows = memory_store.rows(IV_SEDATION_TABLE)
    assert len(rows) == 1
    assert rows[0]["weight"] == 150
    assert rows[0]["status"] == "draft"
    assert rows[0]["patient_id"] == patient.id
    assert rows[0]["patient_name"] == "Jane Doe"
    assert gateway.current_draft_id == rows[0]["id"]
    assert gateway.is_edit_mode


def test_empty_update_is_ignored(memory_store, patient: PatientContext) -> None:
    gateway = _gateway(memory_store, patient)

    assert gateway.auto_save({}) is None
    assert memory_store.calls == []
    assert gateway.save_status == "idle"


def test_successful_save_sets_last_saved(memory_store, patient: PatientContext) -> None:
    gateway = _gateway(memory_store, patient, now=lambda: datetime(2025, 3, 1, 9, 30, 15, 123456))

    gateway.auto_save({"sedation_date": "2025-03-01"})

    assert gateway.save_status == "saved"
    assert gateway.last_saved_at == datetime(2025, 3, 1, 9, 30, 15)
    assert gateway.last_saved_label() == "Last saved 09:30:15"
    assert gateway.records[0]["id"] == gateway.current_draft_id


def test_failed_save_keeps_previous_timestamp(memory_store, patient: PatientContext) -> None:
    notifier = RecordingNotifier()
    moments = iter([datetime(2025, 3, 1, 9, 0, 0), datetime(2025, 3, 1, 9, 5, 0)])
    gateway = _gateway(memory_store, patient, notifier=notifier, now=lambda: next(moments))

    gateway.auto_save({"weight": "150"})
    memory_store.fail_next = 1
    gateway.auto_save({"weight": "155"})

    assert gateway.save_status == "error"
    assert gateway.last_saved_at == datetime(2025, 3, 1, 9, 0, 0)
    assert notifier.texts("error") == [SAVE_FAILED_MESSAGE]
    assert memory_store.rows(IV_SEDATION_TABLE)[0]["weight"] == 150


def test_error_status_reverts_after_display_window(memory_store, patient: PatientContext) -> None:
    clock = _FakeClock()
    gateway = _gateway(memory_store, patient, clock=clock, error_display_seconds=3.0)
    memory_store.fail_next = 1

    gateway.auto_save({"weight": "150"})
    assert gateway.save_status == "error"

    clock.value += 2.9
    assert gateway.save_status == "error"
    clock.value += 0.2
    assert gateway.save_status == "idle"


def test_failed_first_create_retries_as_create(memory_store, patient: PatientContext) -> None:
    gateway = _gateway(memory_store, patient)
    memory_store.fail_next = 1

    gateway.auto_save({"weight": "150"})
    assert gateway.current_draft_id is None
    gateway.auto_save({"weight": "150"})

    assert memory_store.calls == [("create", IV_SEDATION_TABLE), ("create", IV_SEDATION_TABLE)]
    assert len(memory_store.rows(IV_SEDATION_TABLE)) == 1


def test_status_is_saving_until_job_runs(memory_store, patient: PatientContext) -> None:
    dispatcher = _Deferred()
    changes: list[str] = []
    gateway = _gateway(memory_store, patient, dispatcher=dispatcher)
    gateway.on_state_changed = lambda: changes.append(gateway.save_status)

    gateway.auto_save({"weight": "150"})

    assert gateway.save_status == "saving"
    assert gateway.visible_last_saved is None
    assert memory_store.calls == []
    dispatcher.run(0)
    assert changes == ["saving", "saved"]


def test_stale_response_does_not_override_newer_request(memory_store, patient: PatientContext) -> None:
    dispatcher = _Deferred()
    gateway = _gateway(memory_store, patient, dispatcher=dispatcher)

    first = gateway.auto_save({"weight": "150"})
    second = gateway.auto_save({"weight": "160"})
    assert first is not None and second is not None and second > first

    dispatcher.run(0)
    # The create still hands over the draft id even though its response is stale.
    assert gateway.current_draft_id is not None
    assert gateway.save_status == "saving"

    dispatcher.run(1)
    assert gateway.save_status == "saved"
    assert len(memory_store.rows(IV_SEDATION_TABLE)) == 1
    assert memory_store.rows(IV_SEDATION_TABLE)[0]["weight"] == 160


def test_stale_failure_does_not_flag_error(memory_store, patient: PatientContext) -> None:
    dispatcher = _Deferred()
    notifier = RecordingNotifier()
    gateway = _gateway(memory_store, patient, dispatcher=dispatcher, notifier=notifier)

    gateway.auto_save({"weight": "150"})
    gateway.auto_save({"weight": "160"})
    memory_store.fail_next = 1
    dispatcher.run(0)

    assert gateway.save_status == "saving"
    assert notifier.texts("error") == [SAVE_FAILED_MESSAGE]
    dispatcher.run(1)
    assert gateway.save_status == "saved"


def test_close_drops_queued_saves(memory_store, patient: PatientContext) -> None:
    dispatcher = _Deferred()
    gateway = _gateway(memory_store, patient, dispatcher=dispatcher)

    gateway.auto_save({"weight": "150"})
    gateway.close()
    dispatcher.run(0)

    assert memory_store.calls == []
    assert gateway.auto_save({"weight": "160"}) is None
    assert gateway.current_draft_id is None


def test_existing_draft_updates_by_id(memory_store, patient: PatientContext) -> None:
    existing = memory_store.create(IV_SEDATION_TABLE, {"patient_id": patient.id, "status": "draft"})
    gateway = _gateway(memory_store, patient, current_draft_id=existing["id"], records=[existing])

    gateway.auto_save({"npo_status": "Not NPO"})

    assert memory_store.calls[-1] == ("update", IV_SEDATION_TABLE)
    assert len(gateway.records) == 1
    assert gateway.records[0]["npo_status"] == "Not NPO"


def test_failed_fields_are_handed_back_for_retry(memory_store, patient: PatientContext) -> None:
    failed: list[dict] = []
    gateway = _gateway(memory_store, patient, on_save_failed=failed.append)
    gateway.auto_save({"sedation_date": "2025-03-01"})

    memory_store.fail_next = 1
    gateway.auto_save({"weight": "150", "npo_status": "NPO After Midnight"})

    assert failed == [{"weight": "150", "npo_status": "NPO After Midnight"}]
    assert gateway.has_unsaved_changes is True

    gateway.auto_save(failed[0])
    assert gateway.has_unsaved_changes is False


def test_retry_skips_fields_resent_by_a_newer_save(memory_store, patient: PatientContext) -> None:
    dispatcher = _Deferred()
    failed: list[dict] = []
    gateway = _gateway(memory_store, patient, dispatcher=dispatcher, on_save_failed=failed.append)

    gateway.auto_save({"weight": "150", "npo_status": "NPO After Midnight"})
    gateway.auto_save({"weight": "155"})
    memory_store.fail_next = 1
    dispatcher.run(0)
    dispatcher.run(1)

    assert failed == [{"npo_status": "NPO After Midnight"}]
    assert memory_store.rows(IV_SEDATION_TABLE)[0]["weight"] == 155
    assert gateway.has_unsaved_changes is True


def test_queued_save_dropped_on_close_stays_unsaved(memory_store, patient: PatientContext) -> None:
    dispatcher = _Deferred()
    gateway = _gateway(memory_store, patient, dispatcher=dispatcher)

    gateway.auto_save({"weight": "150"})
    gateway.close()
    dispatcher.run(0)

    assert memory_store.calls == []
    assert gateway.has_unsaved_changes is True
