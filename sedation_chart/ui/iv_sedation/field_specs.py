from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from sedation_chart.domain.models import iv_sedation as opts
from sedation_chart.domain.models.iv_sedation import SedationFieldRegistry
from sedation_chart.domain.rules.iv_sedation_rules import (
    STEP_REQUIREMENTS,
    has_lower_treatment,
    has_upper_treatment,
    is_diabetic,
    is_female,
)

FieldKind = Literal[
    "readonly",
    "text",
    "textarea",
    "date",
    "time",
    "integer",
    "choice",
    "multi",
    "yes_no",
    "morning_medications",
    "bmi",
    "flow_log",
]


@dataclass(frozen=True, slots=True)
class FieldSpec:
    name: str
    label: str
    kind: FieldKind
    options: tuple[str, ...] = ()
    visible_when: Callable[[SedationFieldRegistry], bool] | None = None
    placeholder: str = ""
    columns: int = 3


def _multi(name: str, label: str, columns: int = 3) -> FieldSpec:
    return FieldSpec(name, label, "multi", opts.MULTI_SELECT_OPTIONS[name], columns=columns)


STEP_FIELDS: dict[int, tuple[FieldSpec, ...]] = {
    1: (
        FieldSpec("patient_name", "Patient", "readonly"),
        FieldSpec("sedation_date", "Date", "date"),
        FieldSpec("upper_treatment", "Upper Treatment", "choice", opts.TREATMENT_OPTIONS),
        FieldSpec(
            "upper_surgery_type",
            "Upper Surgery Type",
            "choice",
            opts.SURGERY_TYPE_OPTIONS,
            visible_when=has_upper_treatment,
        ),
        FieldSpec("lower_treatment", "Lower Treatment", "choice", opts.TREATMENT_OPTIONS),
        FieldSpec(
            "lower_surgery_type",
            "Lower Surgery Type",
            "choice",
            opts.SURGERY_TYPE_OPTIONS,
            visible_when=has_lower_treatment,
        ),
        FieldSpec("height_feet", "Height (Feet)", "integer", placeholder="4-8"),
        FieldSpec("height_inches", "Height (Inches)", "integer", placeholder="0-11"),
        FieldSpec("weight", "Weight (lbs)", "integer"),
        FieldSpec("bmi", "BMI", "bmi"),
    ),
    2: (
        FieldSpec("npo_status", "NPO Status", "choice", opts.NPO_STATUS_OPTIONS),
        FieldSpec("morning_medications", "Morning Medications", "morning_medications"),
        _multi("allergies", "Allergies"),
        FieldSpec("pregnancy_risk", "Pregnancy Risk", "choice", opts.PREGNANCY_RISK_OPTIONS, visible_when=is_female),
        FieldSpec("last_menstrual_cycle", "Last Menstrual Cycle", "date", visible_when=is_female),
        FieldSpec("anesthesia_history", "Anesthesia History", "choice", opts.ANESTHESIA_HISTORY_OPTIONS),
        _multi("respiratory_problems", "Respiratory Problems"),
        _multi("cardiovascular_problems", "Cardiovascular Problems"),
        _multi("gastrointestinal_problems", "Gastrointestinal Problems"),
        _multi("neurologic_problems", "Neurologic Problems"),
        _multi("endocrine_renal_problems", "Endocrine/Renal Problems"),
        FieldSpec("last_a1c_level", "Last A1C Level", "text", visible_when=is_diabetic),
        _multi("miscellaneous", "Miscellaneous"),
        _multi("social_history", "Social History"),
        FieldSpec("well_developed_nourished", "Well Developed & Nourished", "yes_no"),
        FieldSpec("patient_anxious", "Patient Anxious", "yes_no"),
        FieldSpec("asa_classification", "ASA Classification", "choice", opts.ASA_CLASSIFICATION_OPTIONS),
        _multi("airway_evaluation", "Airway Evaluation", columns=2),
        FieldSpec("mallampati_score", "Mallampati Score", "choice", opts.MALLAMPATI_OPTIONS),
        _multi("heart_lung_evaluation", "Heart & Lung Evaluation", columns=2),
    ),
    3: (
        FieldSpec("sedation_type", "Sedation Type", "choice", opts.SEDATION_TYPE_OPTIONS),
        _multi("medications_planned", "Medications Planned", columns=2),
        _multi("administration_route", "Route of Administration", columns=4),
        _multi("instruments_checklist", "Instruments Checklist", columns=2),
        _multi("emergency_protocols", "Emergency Protocols", columns=2),
    ),
    4: (
        FieldSpec("time_in_room", "Time In Room", "time"),
        FieldSpec("sedation_start_time", "Sedation Start Time", "time"),
        FieldSpec("sedation_end_time", "Sedation End Time", "time"),
        FieldSpec("out_of_room_time", "Out Of Room Time", "time"),
        FieldSpec("level_of_sedation", "Level of Sedation", "choice", opts.LEVEL_OF_SEDATION_OPTIONS),
        FieldSpec("flow_entries", "Monitoring Log", "flow_log"),
    ),
    5: (
        *(FieldSpec(name, label, "yes_no") for name, label in opts.RECOVERY_CRITERIA),
        FieldSpec("post_op_instructions_given_to", "Post-Op Instructions Given To", "text"),
        FieldSpec("follow_up_instructions_given_to", "Follow-Up Instructions Given To", "text"),
        FieldSpec("discharged_to", "Discharged To", "choice", opts.DISCHARGE_DESTINATIONS),
        FieldSpec("pain_level_discharge", "Pain Level at Discharge (0-10)", "integer", placeholder="0-10"),
        FieldSpec("other_remarks", "Other Remarks", "textarea"),
    ),
}


def required_field_names(step: int) -> frozenset[str]:
    return frozenset(item.field for item in STEP_REQUIREMENTS[step])


def is_visible(spec: FieldSpec, registry: SedationFieldRegistry) -> bool:
    return spec.visible_when is None or spec.visible_when(registry)
