from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

from sedation_chart.application.iv_sedation_mapper import registry_to_record
from sedation_chart.application.notifications import Notifier, RecordingNotifier
from sedation_chart.application.services.draft_gateway import DraftPersistenceGateway
from sedation_chart.domain.models.iv_sedation import (
    IV_SEDATION_STATUS_COMPLETED,
    IV_SEDATION_STEP_TITLES,
    NO,
    OTHER_OPTION,
    OTHER_TEXT_FIELDS,
    RECOVERY_CRITERIA,
    YES,
    FlowEntry,
    MorningMedications,
    PatientContext,
    SedationFieldRegistry,
)
from sedation_chart.domain.models.medication_catalog import DEFAULT_CATALOG, MedicationCatalog
from sedation_chart.domain.rules.iv_sedation_calculations import (
    bmi_category,
    is_valid_iso_date,
    procedure_durations,
    registry_bmi,
)
from sedation_chart.domain.rules.iv_sedation_rules import is_diabetic, is_female
from sedation_chart.infrastructure.db.remote_store import IV_SEDATION_TABLE, RemoteStore

logger = logging.getLogger(__name__)

ReviewState = Literal["editing", "reviewing", "submitted"]

SUBMIT_SUCCESS_MESSAGE = "IV sedation form completed"
SAVED_AS_DRAFT_MESSAGE = "Saved as draft"
UNSAVED_CHANGES_MESSAGE = "Some changes could not be saved"
MISSING_DATE_MESSAGE = "Please select a sedation date before submitting"
EMPTY_VALUE = "-"


@dataclass(frozen=True, slots=True)
class ReviewSection:
    title: str
    rows: tuple[tuple[str, str], ...]


@dataclass(frozen=True, slots=True)
class ReviewFlowRow:
    time: str
    bp: str
    heart_rate: str
    rr: str
    spo2: str
    medications: str


@dataclass(frozen=True, slots=True)
class ReviewProjection:
    patient_name: str
    sedation_date: str
    bmi: float | None
    bmi_category: str
    sections: tuple[ReviewSection, ...]
    durations: dict[str, str] = field(default_factory=dict)
    flow_rows: tuple[ReviewFlowRow, ...] = ()


def format_value(value: object) -> str:
    if value is None:
        return EMPTY_VALUE
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value) or EMPTY_VALUE
    text = str(value).strip()
    if text == YES:
        return "Yes"
    if text == NO:
        return "No"
    return text or EMPTY_VALUE


def format_selection(registry: SedationFieldRegistry, field_name: str) -> str:
    value = getattr(registry, field_name)
    other_field = OTHER_TEXT_FIELDS.get(field_name)
    other_text = str(getattr(registry, other_field) or "").strip() if other_field else ""
    items = list(value) if isinstance(value, list) else ([value] if value else [])
    if other_text:
        items = [f"{OTHER_OPTION}: {other_text}" if item == OTHER_OPTION else item for item in items]
    return format_value(items)


def format_morning_medications(value: MorningMedications) -> str:
    if value.taken is None:
        return EMPTY_VALUE
    if not value.taken:
        return "No"
    return f"Yes: {value.detail.strip()}" if value.detail.strip() else "Yes"


def _flow_row(entry: FlowEntry, catalog: MedicationCatalog) -> ReviewFlowRow:
    return ReviewFlowRow(
        time=entry.time or EMPTY_VALUE,
        bp=entry.bp or EMPTY_VALUE,
        heart_rate=entry.heart_rate or EMPTY_VALUE,
        rr=entry.rr or EMPTY_VALUE,
        spo2=entry.spo2 or EMPTY_VALUE,
        medications=format_value(catalog.labels_for(entry.medications)),
    )


def build_review_projection(
    registry: SedationFieldRegistry,
    *,
    catalog: MedicationCatalog = DEFAULT_CATALOG,
) -> ReviewProjection:
    bmi = registry_bmi(registry)
    feet = str(registry.height_feet or "").strip()
    inches = str(registry.height_inches or "").strip()
    weight = str(registry.weight or "").strip()
    height = f"{feet}' {inches or '0'}\"" if feet else EMPTY_VALUE

    basic: list[tuple[str, str]] = [
        ("Patient", format_value(registry.patient_name)),
        ("Date", format_value(registry.sedation_date)),
        ("Upper Treatment", format_value(registry.upper_treatment)),
        ("Upper Surgery Type", format_value(registry.upper_surgery_type)),
        ("Lower Treatment", format_value(registry.lower_treatment)),
        ("Lower Surgery Type", format_value(registry.lower_surgery_type)),
        ("Height", height),
        ("Weight", f"{weight} lbs" if weight else EMPTY_VALUE),
        ("BMI", f"{bmi:.2f} ({bmi_category(bmi)})" if bmi is not None else bmi_category(bmi)),
    ]

    assessment: list[tuple[str, str]] = [
        ("NPO Status", format_value(registry.npo_status)),
        ("Morning Medications", format_morning_medications(registry.morning_medications)),
        ("Allergies", format_selection(registry, "allergies")),
    ]
    if is_female(registry):
        assessment.extend(
            [
                ("Pregnancy Risk", format_value(registry.pregnancy_risk)),
                ("Last Menstrual Cycle", format_value(registry.last_menstrual_cycle)),
            ]
        )
    assessment.extend(
        [
            ("Anesthesia History", format_selection(registry, "anesthesia_history")),
            ("Respiratory Problems", format_selection(registry, "respiratory_problems")),
            ("Cardiovascular Problems", format_selection(registry, "cardiovascular_problems")),
            ("Gastrointestinal Problems", format_selection(registry, "gastrointestinal_problems")),
            ("Neurologic Problems", format_selection(registry, "neurologic_problems")),
            ("Endocrine/Renal Problems", format_selection(registry, "endocrine_renal_problems")),
        ]
    )
    if is_diabetic(registry):
        assessment.append(("Last A1C Level", format_value(registry.last_a1c_level)))
    assessment.extend(
        [
            ("Miscellaneous", format_selection(registry, "miscellaneous")),
            ("Social History", format_selection(registry, "social_history")),
            ("Well Developed & Nourished", format_value(registry.well_developed_nourished)),
            ("Patient Anxious", format_value(registry.patient_anxious)),
            ("ASA Classification", format_value(registry.asa_classification)),
            ("Airway Evaluation", format_selection(registry, "airway_evaluation")),
            ("Mallampati Score", format_value(registry.mallampati_score)),
            ("Heart & Lung Evaluation", format_selection(registry, "heart_lung_evaluation")),
        ]
    )

    plan: list[tuple[str, str]] = [
        ("Sedation Type", format_value(registry.sedation_type)),
        ("Medications Planned", format_selection(registry, "medications_planned")),
        ("Route of Administration", format_value(registry.administration_route)),
        ("Instruments Checklist", format_value(registry.instruments_checklist)),
        ("Emergency Protocols", format_value(registry.emergency_protocols)),
    ]

    monitoring: list[tuple[str, str]] = [
        ("Time In Room", format_value(registry.time_in_room)),
        ("Sedation Start Time", format_value(registry.sedation_start_time)),
        ("Sedation End Time", format_value(registry.sedation_end_time)),
        ("Out Of Room Time", format_value(registry.out_of_room_time)),
        ("Level of Sedation", format_value(registry.level_of_sedation)),
        ("Monitoring Entries", str(len(registry.flow_entries))),
    ]

    recovery: list[tuple[str, str]] = [
        (label, format_value(getattr(registry, name))) for name, label in RECOVERY_CRITERIA
    ]
    recovery.extend(
        [
            ("Post-Op Instructions Given To", format_value(registry.post_op_instructions_given_to)),
            ("Follow-Up Instructions Given To", format_value(registry.follow_up_instructions_given_to)),
            ("Discharged To", format_value(registry.discharged_to)),
            ("Pain Level at Discharge", format_value(registry.pain_level_discharge)),
            ("Other Remarks", format_value(registry.other_remarks)),
        ]
    )

    sections = tuple(
        ReviewSection(title=title, rows=tuple(rows))
        for title, rows in zip(IV_SEDATION_STEP_TITLES, (basic, assessment, plan, monitoring, recovery), strict=True)
    )
    return ReviewProjection(
        patient_name=registry.patient_name,
        sedation_date=registry.sedation_date,
        bmi=bmi,
        bmi_category=bmi_category(bmi),
        sections=sections,
        durations=procedure_durations(registry),
        flow_rows=tuple(_flow_row(entry, catalog) for entry in registry.flow_entries),
    )


class ReviewSubmitController:
    def __init__(
        self,
        store: RemoteStore,
        *,
        gateway: DraftPersistenceGateway,
        registry: SedationFieldRegistry,
        patient: PatientContext,
        notifier: Notifier | None = None,
        catalog: MedicationCatalog = DEFAULT_CATALOG,
        on_submitted: Callable[[dict[str, Any]], None] | None = None,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.registry = registry
        self.patient = patient
        self.notifier = notifier or RecordingNotifier()
        self.catalog = catalog
        self.on_submitted = on_submitted
        self.state: ReviewState = "editing"
        self.projection: ReviewProjection | None = None

    def enter_review(self) -> ReviewProjection:
        if self.state == "submitted":
            raise ValueError("The form has already been submitted")
        self.projection = build_review_projection(self.registry, catalog=self.catalog)
        self.state = "reviewing"
        return self.projection

    def back_to_edit(self) -> None:
        if self.state == "reviewing":
            self.state = "editing"

    def submit(self) -> dict[str, Any] | None:
        if self.state != "reviewing":
            raise ValueError("Submit is only available from the review screen")
        if not is_valid_iso_date(self.registry.sedation_date):
            self.notifier.notify("error", MISSING_DATE_MESSAGE)
            return None
        record = registry_to_record(self.registry, patient=self.patient, status=IV_SEDATION_STATUS_COMPLETED)
        with self.gateway.lock:
            draft_id = self.gateway.current_draft_id
            try:
                if draft_id is not None:
                    saved = self.store.update(IV_SEDATION_TABLE, draft_id, record)
                else:
                    saved = self.store.create(IV_SEDATION_TABLE, record)
            except Exception:  # noqa: BLE001
                operation = "update" if draft_id is not None else "save"
                logger.exception("Failed to %s IV sedation form", operation)
                self.notifier.notify("error", f"Failed to {operation} IV sedation form")
                return None
            self.gateway.upsert_record(saved)
            self.gateway.close()
        self.state = "submitted"
        logger.info("IV sedation form %s completed", saved.get("id"))
        self.notifier.notify("success", SUBMIT_SUCCESS_MESSAGE)
        if self.on_submitted is not None:
            self.on_submitted(saved)
        return saved

    def close_form(self) -> None:
        with self.gateway.lock:
            had_draft = self.gateway.current_draft_id is not None
            unsaved = self.gateway.has_unsaved_changes
            self.gateway.close()
        if self.state == "submitted":
            return
        if unsaved:
            logger.warning("IV sedation form closed with unsaved fields")
            self.notifier.notify("error", UNSAVED_CHANGES_MESSAGE)
        elif had_draft:
            self.notifier.notify("info", SAVED_AS_DRAFT_MESSAGE)
