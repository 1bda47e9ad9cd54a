from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from sedation_chart.domain.models.iv_sedation import (
    DIABETES,
    IV_SEDATION_STEP_COUNT,
    NO,
    NO_TREATMENT,
    RECOVERY_CRITERIA,
    YES,
    SedationFieldRegistry,
)
from sedation_chart.domain.rules.iv_sedation_calculations import is_valid_iso_date, is_valid_time, parse_int

Predicate = Callable[[SedationFieldRegistry], bool]

_FEMALE_VALUES = {"f", "female", "woman"}


def toggle_option(selected: Sequence[str], option: str, negating: str | None = None) -> list[str]:
    current = list(selected)
    if option in current:
        return [item for item in current if item != option]
    if negating is not None and option == negating:
        return [negating]
    if negating is not None:
        current = [item for item in current if item != negating]
    current.append(option)
    return current


def is_option_enabled(selected: Sequence[str], option: str, negating: str | None) -> bool:
    if negating is None or option == negating:
        return True
    return negating not in selected


def is_female(registry: SedationFieldRegistry) -> bool:
    return registry.patient_gender.strip().lower() in _FEMALE_VALUES


def has_upper_treatment(registry: SedationFieldRegistry) -> bool:
    return bool(registry.upper_treatment) and registry.upper_treatment != NO_TREATMENT


def has_lower_treatment(registry: SedationFieldRegistry) -> bool:
    return bool(registry.lower_treatment) and registry.lower_treatment != NO_TREATMENT


def is_diabetic(registry: SedationFieldRegistry) -> bool:
    return DIABETES in registry.endocrine_renal_problems


def _always(_registry: SedationFieldRegistry) -> bool:
    return True


def _filled(field_name: str) -> Predicate:
    def _check(registry: SedationFieldRegistry) -> bool:
        return bool(str(getattr(registry, field_name) or "").strip())

    return _check


def _non_empty(field_name: str) -> Predicate:
    def _check(registry: SedationFieldRegistry) -> bool:
        return len(getattr(registry, field_name) or []) > 0

    return _check


def _int_in_range(field_name: str, low: int, high: int | None = None) -> Predicate:
    def _check(registry: SedationFieldRegistry) -> bool:
        value = parse_int(getattr(registry, field_name))
        if value is None or value < low:
            return False
        return high is None or value <= high

    return _check


def _iso_date(field_name: str) -> Predicate:
    def _check(registry: SedationFieldRegistry) -> bool:
        return is_valid_iso_date(getattr(registry, field_name))

    return _check


def _time(field_name: str) -> Predicate:
    def _check(registry: SedationFieldRegistry) -> bool:
        return is_valid_time(getattr(registry, field_name))

    return _check


def _yes_no(field_name: str) -> Predicate:
    def _check(registry: SedationFieldRegistry) -> bool:
        return str(getattr(registry, field_name) or "").strip().lower() in {YES, NO}

    return _check


def morning_medications_answered(registry: SedationFieldRegistry) -> bool:
    answer = registry.morning_medications
    if answer.taken is None:
        return False
    if answer.taken:
        return bool(answer.detail.strip())
    return True


@dataclass(frozen=True, slots=True)
class FieldRequirement:
    field: str
    label: str
    is_satisfied: Predicate
    applies: Predicate = _always


STEP_REQUIREMENTS: dict[int, tuple[FieldRequirement, ...]] = {
    1: (
        FieldRequirement("sedation_date", "Date", _iso_date("sedation_date")),
        FieldRequirement("upper_treatment", "Upper Treatment", _filled("upper_treatment")),
        FieldRequirement("lower_treatment", "Lower Treatment", _filled("lower_treatment")),
        FieldRequirement("height_feet", "Height (Feet)", _int_in_range("height_feet", 4, 8)),
        FieldRequirement("height_inches", "Height (Inches)", _int_in_range("height_inches", 0, 11)),
        FieldRequirement("weight", "Weight", _int_in_range("weight", 1)),
    ),
    2: (
        FieldRequirement("npo_status", "NPO Status", _filled("npo_status")),
        FieldRequirement("morning_medications", "Morning Medications", morning_medications_answered),
        FieldRequirement("allergies", "Allergies", _non_empty("allergies")),
        FieldRequirement("pregnancy_risk", "Pregnancy Risk", _filled("pregnancy_risk"), is_female),
        FieldRequirement(
            "last_menstrual_cycle", "Last Menstrual Cycle", _iso_date("last_menstrual_cycle"), is_female
        ),
        FieldRequirement("anesthesia_history", "Anesthesia History", _filled("anesthesia_history")),
        FieldRequirement("respiratory_problems", "Respiratory Problems", _non_empty("respiratory_problems")),
        FieldRequirement(
            "cardiovascular_problems", "Cardiovascular Problems", _non_empty("cardiovascular_problems")
        ),
        FieldRequirement(
            "gastrointestinal_problems", "Gastrointestinal Problems", _non_empty("gastrointestinal_problems")
        ),
        FieldRequirement("neurologic_problems", "Neurologic Problems", _non_empty("neurologic_problems")),
        FieldRequirement(
            "endocrine_renal_problems", "Endocrine/Renal Problems", _non_empty("endocrine_renal_problems")
        ),
        FieldRequirement("last_a1c_level", "Last A1C Level", _filled("last_a1c_level"), is_diabetic),
        FieldRequirement("miscellaneous", "Miscellaneous", _non_empty("miscellaneous")),
        FieldRequirement("social_history", "Social History", _non_empty("social_history")),
        FieldRequirement(
            "well_developed_nourished", "Well Developed & Nourished", _yes_no("well_developed_nourished")
        ),
        FieldRequirement("patient_anxious", "Patient Anxious", _yes_no("patient_anxious")),
        FieldRequirement("asa_classification", "ASA Classification", _filled("asa_classification")),
        FieldRequirement("airway_evaluation", "Airway Evaluation", _non_empty("airway_evaluation")),
        FieldRequirement("mallampati_score", "Mallampati Score", _filled("mallampati_score")),
        FieldRequirement(
            "heart_lung_evaluation", "Heart & Lung Evaluation", _non_empty("heart_lung_evaluation")
        ),
    ),
    3: (
        FieldRequirement("sedation_type", "Sedation Type", _filled("sedation_type")),
        FieldRequirement("medications_planned", "Medications Planned", _non_empty("medications_planned")),
        FieldRequirement("instruments_checklist", "Instruments Checklist", _non_empty("instruments_checklist")),
        FieldRequirement("administration_route", "Route of Administration", _non_empty("administration_route")),
        FieldRequirement("emergency_protocols", "Emergency Protocols", _non_empty("emergency_protocols")),
    ),
    4: (
        FieldRequirement("time_in_room", "Time In Room", _time("time_in_room")),
        FieldRequirement("sedation_start_time", "Sedation Start Time", _time("sedation_start_time")),
        FieldRequirement("sedation_end_time", "Sedation End Time", _time("sedation_end_time")),
        FieldRequirement("out_of_room_time", "Out Of Room Time", _time("out_of_room_time")),
        FieldRequirement("level_of_sedation", "Level of Sedation", _filled("level_of_sedation")),
        FieldRequirement("flow_entries", "Monitoring Log", _non_empty("flow_entries")),
    ),
    5: (
        *(FieldRequirement(name, label, _yes_no(name)) for name, label in RECOVERY_CRITERIA),
        FieldRequirement(
            "post_op_instructions_given_to",
            "Post-Op Instructions Given To",
            _filled("post_op_instructions_given_to"),
        ),
        FieldRequirement(
            "follow_up_instructions_given_to",
            "Follow-Up Instructions Given To",
            _filled("follow_up_instructions_given_to"),
        ),
        FieldRequirement("discharged_to", "Discharged To", _filled("discharged_to")),
        FieldRequirement(
            "pain_level_discharge", "Pain Level at Discharge", _int_in_range("pain_level_discharge", 0, 10)
        ),
    ),
}


def _requirements_for(step: int) -> tuple[FieldRequirement, ...]:
    if step not in STEP_REQUIREMENTS:
        raise ValueError(f"Unknown IV sedation step: {step}")
    return STEP_REQUIREMENTS[step]


def validate_step(registry: SedationFieldRegistry, step: int) -> list[str]:
    return [
        requirement.label
        for requirement in _requirements_for(step)
        if requirement.applies(registry) and not requirement.is_satisfied(registry)
    ]


def is_step_complete(registry: SedationFieldRegistry, step: int) -> bool:
    return all(
        requirement.is_satisfied(registry)
        for requirement in _requirements_for(step)
        if requirement.applies(registry)
    )


def step_completion(registry: SedationFieldRegistry) -> dict[int, bool]:
    return {step: is_step_complete(registry, step) for step in range(1, IV_SEDATION_STEP_COUNT + 1)}


def format_missing_fields(missing: Sequence[str]) -> str:
    return "Please complete the required fields: " + ", ".join(missing)
