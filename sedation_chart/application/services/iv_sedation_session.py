from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from sedation_chart.application.iv_sedation_mapper import merge_pending_updates, record_to_registry
from sedation_chart.application.notifications import Notifier, RecordingNotifier
from sedation_chart.application.services.draft_gateway import Dispatcher, DraftPersistenceGateway, run_inline
from sedation_chart.application.services.monitoring_log_editor import MonitoringLogEditor
from sedation_chart.application.services.review_submit import ReviewProjection, ReviewSubmitController
from sedation_chart.application.services.step_navigator import StepNavigator
from sedation_chart.domain.models.iv_sedation import (
    IV_SEDATION_STATUS_DRAFT,
    MULTI_SELECT_OPTIONS,
    NEGATING_OPTIONS,
    OTHER_OPTION,
    OTHER_TEXT_FIELDS,
    READ_ONLY_FIELDS,
    REGISTRY_FIELD_NAMES,
    FlowEntry,
    MorningMedications,
    PatientContext,
    SedationFieldRegistry,
)
from sedation_chart.domain.models.medication_catalog import DEFAULT_CATALOG, MedicationCatalog
from sedation_chart.domain.rules import iv_sedation_rules as rules
from sedation_chart.domain.rules.iv_sedation_calculations import bmi_category, procedure_durations, registry_bmi
from sedation_chart.infrastructure.db.remote_store import RemoteStore

logger = logging.getLogger(__name__)


def _selection(field_name: str, value: Any) -> list[str]:
    """Normalise a multi-select value: no duplicates, negating option stands alone."""
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{field_name} takes a list of options")
    selected: list[str] = []
    for item in value:
        text = str(item)
        if text not in selected:
            selected.append(text)
    negating = NEGATING_OPTIONS.get(field_name)
    if negating is not None and negating in selected:
        return [negating]
    return selected


class IvSedationFormSession:
    """One open IV sedation form: field edits, step moves, autosave and submit.

    With ``immediate_save`` every edit is sent to the gateway at once. Without
    it edits are merged into ``pending_updates`` until ``flush`` is called,
    which the UI does from its debounce timer and before any step change,
    review or close. Fields whose save failed go back into ``pending_updates``
    and are sent again with the next flush.
    """

    def __init__(
        self,
        store: RemoteStore,
        *,
        patient: PatientContext,
        registry: SedationFieldRegistry | None = None,
        current_draft_id: str | None = None,
        records: list[dict[str, Any]] | None = None,
        notifier: Notifier | None = None,
        dispatcher: Dispatcher = run_inline,
        catalog: MedicationCatalog = DEFAULT_CATALOG,
        immediate_save: bool = True,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = datetime.now,
        on_pending: Callable[[], None] | None = None,
        on_save_state_changed: Callable[[], None] | None = None,
        on_step_changed: Callable[[int], None] | None = None,
        on_review_requested: Callable[[], None] | None = None,
        on_submitted: Callable[[dict[str, Any]], None] | None = None,
    ) -> None:
        self.patient = patient
        self.registry = registry or SedationFieldRegistry()
        self.registry.patient_name = self.registry.patient_name or patient.display_name
        self.registry.patient_gender = patient.gender
        self.notifier = notifier or RecordingNotifier()
        self.immediate_save = immediate_save
        self.on_pending = on_pending
        self.pending_updates: dict[str, Any] = {}
        self._pending_lock = threading.Lock()

        self.gateway = DraftPersistenceGateway(
            store,
            patient=patient,
            registry=self.registry,
            notifier=self.notifier,
            dispatcher=dispatcher,
            clock=clock,
            now=now,
            current_draft_id=current_draft_id,
            records=records,
            on_state_changed=on_save_state_changed,
            on_save_failed=self._requeue_failed,
        )
        self.navigator = StepNavigator(
            self.registry,
            notifier=self.notifier,
            on_step_changed=on_step_changed,
            on_review_requested=on_review_requested,
        )
        self.review = ReviewSubmitController(
            store,
            gateway=self.gateway,
            registry=self.registry,
            patient=patient,
            notifier=self.notifier,
            catalog=catalog,
            on_submitted=on_submitted,
        )
        self.monitoring = MonitoringLogEditor(
            self.registry,
            on_entries_changed=lambda entries: self._queue({"flow_entries": entries}),
            catalog=catalog,
            now=now,
        )

    @classmethod
    def from_record(
        cls,
        store: RemoteStore,
        record: Mapping[str, Any],
        *,
        patient: PatientContext,
        **kwargs: Any,
    ) -> IvSedationFormSession:
        if record.get("status") != IV_SEDATION_STATUS_DRAFT:
            raise ValueError("Only draft IV sedation forms can be reopened for editing")
        registry = record_to_registry(record, patient=patient)
        return cls(store, patient=patient, registry=registry, current_draft_id=str(record["id"]), **kwargs)

    @property
    def current_step(self) -> int:
        return self.navigator.current_step

    @property
    def current_draft_id(self) -> str | None:
        return self.gateway.current_draft_id

    def set_field(self, field_name: str, value: Any) -> None:
        if field_name not in REGISTRY_FIELD_NAMES:
            raise ValueError(f"Unknown IV sedation field: {field_name}")
        if field_name in READ_ONLY_FIELDS:
            raise ValueError(f"Field is read-only: {field_name}")
        if field_name in MULTI_SELECT_OPTIONS:
            self._set_selection(field_name, _selection(field_name, value))
            return
        if field_name == "morning_medications":
            if not isinstance(value, MorningMedications):
                raise ValueError("morning_medications takes a MorningMedications value")
            self.set_morning_medications(value.taken, value.detail)
            return
        if field_name == "flow_entries":
            entries = list(value or [])
            if not all(isinstance(entry, FlowEntry) for entry in entries):
                raise ValueError("flow_entries takes a list of FlowEntry values")
            self.registry.flow_entries = entries
            self._queue({field_name: entries})
            return
        text = "" if value is None else str(value)
        setattr(self.registry, field_name, text)
        self._queue({field_name: text})

    def toggle_option(self, field_name: str, option: str) -> list[str]:
        current = list(getattr(self.registry, field_name))
        selected = rules.toggle_option(current, option, NEGATING_OPTIONS.get(field_name))
        self._set_selection(field_name, selected)
        return selected

    def _set_selection(self, field_name: str, selected: list[str]) -> None:
        current = getattr(self.registry, field_name)
        setattr(self.registry, field_name, selected)
        updates: dict[str, Any] = {field_name: selected}
        other_field = OTHER_TEXT_FIELDS.get(field_name)
        if other_field and OTHER_OPTION in current and OTHER_OPTION not in selected:
            setattr(self.registry, other_field, "")
            updates[other_field] = ""
        self._queue(updates)

    def set_single_choice(self, field_name: str, value: str) -> None:
        """Single-select fields with an "Other" option drop the companion text on change."""
        updates: dict[str, Any] = {field_name: value}
        setattr(self.registry, field_name, value)
        other_field = OTHER_TEXT_FIELDS.get(field_name)
        if other_field and value != OTHER_OPTION and getattr(self.registry, other_field):
            setattr(self.registry, other_field, "")
            updates[other_field] = ""
        self._queue(updates)

    def set_morning_medications(self, taken: bool | None, detail: str = "") -> None:
        value = MorningMedications(taken=taken, detail=str(detail or "") if taken else "")
        self.registry.morning_medications = value
        self._queue({"morning_medications": value})

    def is_option_enabled(self, field_name: str, option: str) -> bool:
        return rules.is_option_enabled(
            getattr(self.registry, field_name), option, NEGATING_OPTIONS.get(field_name)
        )

    def completion(self) -> dict[int, bool]:
        return rules.step_completion(self.registry)

    def missing_fields(self, step: int | None = None) -> list[str]:
        return rules.validate_step(self.registry, step or self.current_step)

    def bmi(self) -> float | None:
        return registry_bmi(self.registry)

    def bmi_category(self) -> str:
        return bmi_category(self.bmi())

    def durations(self) -> dict[str, str]:
        return procedure_durations(self.registry)

    def next_step(self) -> bool:
        self.flush()
        return self.navigator.next()

    def previous_step(self) -> bool:
        self.flush()
        return self.navigator.previous()

    def jump_to(self, step: int) -> None:
        self.flush()
        self.navigator.jump_to(step)

    def enter_review(self) -> ReviewProjection:
        self.flush()
        return self.review.enter_review()

    def back_to_edit(self) -> None:
        self.review.back_to_edit()

    def submit(self) -> dict[str, Any] | None:
        self.flush()
        return self.review.submit()

    def close(self) -> None:
        self.flush()
        self.review.close_form()

    def flush(self) -> int | None:
        with self._pending_lock:
            if not self.pending_updates:
                return None
            updates = self.pending_updates
            self.pending_updates = {}
        return self.gateway.auto_save(updates)

    def _requeue_failed(self, updates: Mapping[str, Any]) -> None:
        with self._pending_lock:
            # Newer edits to the same field win over the failed values.
            self.pending_updates = merge_pending_updates(updates, self.pending_updates)
        logger.info("Will resend %d field(s) after a failed draft save", len(updates))

    def _queue(self, updates: Mapping[str, Any]) -> None:
        if self.review.state == "submitted":
            logger.debug("Ignoring edit after submit: %s", sorted(updates))
            return
        with self._pending_lock:
            self.pending_updates = merge_pending_updates(self.pending_updates, updates)
        if self.immediate_save:
            self.flush()
        elif self.on_pending is not None:
            self.on_pending()
