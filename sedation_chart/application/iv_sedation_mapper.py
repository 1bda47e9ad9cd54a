from __future__ import annotations

from collections.abc import Mapping
from dataclasses import fields
from typing import Any

from sedation_chart.application.dto.iv_sedation_dto import FlowEntryDto
from sedation_chart.domain.models.iv_sedation import (
    IV_SEDATION_STATUS_DRAFT,
    MULTI_SELECT_OPTIONS,
    NO,
    REGISTRY_FIELD_NAMES,
    YES,
    FlowEntry,
    MorningMedications,
    PatientContext,
    SedationFieldRegistry,
)
from sedation_chart.domain.rules.iv_sedation_calculations import parse_int

# Registry fields that never reach the store.
_LOCAL_ONLY_FIELDS = frozenset({"patient_gender"})
_INTEGER_COLUMNS = frozenset({"height_feet", "height_inches", "weight", "pain_level_discharge"})
_LIST_FIELDS = frozenset(MULTI_SELECT_OPTIONS)
# "yes: <detail>" keeps typed detail apart from the bare yes/no answers.
_TAKEN_DETAIL_PREFIX = f"{YES}:"


def field_name_for_column(column: str) -> str | None:
    if column in REGISTRY_FIELD_NAMES and column not in _LOCAL_ONLY_FIELDS:
        return column
    return None


def encode_morning_medications(value: MorningMedications) -> str:
    if value.taken is None:
        return ""
    if not value.taken:
        return NO
    detail = value.detail.strip()
    return f"{_TAKEN_DETAIL_PREFIX} {detail}" if detail else YES


def decode_morning_medications(raw: object) -> MorningMedications:
    text = str(raw or "").strip()
    if not text:
        return MorningMedications()
    if text.lower() == NO:
        return MorningMedications(taken=False)
    if text.lower() == YES:
        return MorningMedications(taken=True)
    if text.lower().startswith(_TAKEN_DETAIL_PREFIX):
        return MorningMedications(taken=True, detail=text[len(_TAKEN_DETAIL_PREFIX) :].strip())
    # Rows written before the prefix hold the bare detail text.
    return MorningMedications(taken=True, detail=text)


def flow_entry_to_json(entry: FlowEntry) -> dict[str, Any]:
    dto = FlowEntryDto(
        id=entry.id,
        time=entry.time,
        bp=entry.bp,
        heart_rate=entry.heart_rate,
        rr=entry.rr,
        spo2=entry.spo2,
        medications=list(entry.medications),
    )
    return dto.model_dump(by_alias=True)


def flow_entries_to_json(entries: list[FlowEntry]) -> list[dict[str, Any]]:
    return [flow_entry_to_json(item) for item in entries]


def flow_entries_from_json(raw: object) -> list[FlowEntry]:
    if not isinstance(raw, list):
        return []
    entries: list[FlowEntry] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        payload = dict(item)
        # Older rows stored the heart rate under "hr".
        if "heartRate" not in payload and "hr" in payload:
            payload["heartRate"] = payload.pop("hr")
        payload["medications"] = _as_str_list(payload.get("medications"))
        for key in ("time", "bp", "heartRate", "rr", "spo2"):
            if payload.get(key) is not None:
                payload[key] = str(payload[key])
        if not payload.get("id"):
            continue
        dto = FlowEntryDto.model_validate(payload)
        entries.append(
            FlowEntry(
                id=dto.id,
                time=dto.time,
                bp=dto.bp,
                heart_rate=dto.heart_rate,
                rr=dto.rr,
                spo2=dto.spo2,
                medications=list(dto.medications),
            )
        )
    return entries


def encode_field(field_name: str, value: Any) -> Any:
    if field_name == "morning_medications":
        return encode_morning_medications(value)
    if field_name == "flow_entries":
        return flow_entries_to_json(list(value or []))
    if field_name in _INTEGER_COLUMNS:
        return parse_int(value)
    if field_name in _LIST_FIELDS:
        return [str(item) for item in (value or [])]
    if value is None:
        return None
    return str(value)


def decode_field(field_name: str, raw: Any) -> Any:
    if field_name == "morning_medications":
        return decode_morning_medications(raw)
    if field_name == "flow_entries":
        return flow_entries_from_json(raw)
    if field_name in _LIST_FIELDS:
        return _as_str_list(raw)
    if raw is None:
        return ""
    return str(raw)


def to_record_columns(updates: Mapping[str, Any]) -> dict[str, Any]:
    columns: dict[str, Any] = {}
    for field_name, value in updates.items():
        if field_name not in REGISTRY_FIELD_NAMES:
            raise ValueError(f"Unknown IV sedation field: {field_name}")
        if field_name in _LOCAL_ONLY_FIELDS:
            continue
        columns[field_name] = encode_field(field_name, value)
    return columns


def placeholder_patient_name(patient_id: str) -> str:
    return f"Patient {patient_id[:8]}"


def build_draft_payload(
    updates: Mapping[str, Any],
    *,
    registry: SedationFieldRegistry,
    patient: PatientContext,
) -> dict[str, Any]:
    payload = to_record_columns(updates)
    _apply_identity(payload, registry=registry, patient=patient, status=IV_SEDATION_STATUS_DRAFT)
    return payload


def registry_to_record(registry: SedationFieldRegistry, *, patient: PatientContext, status: str) -> dict[str, Any]:
    updates = {item.name: getattr(registry, item.name) for item in fields(SedationFieldRegistry)}
    payload = to_record_columns(updates)
    _apply_identity(payload, registry=registry, patient=patient, status=status)
    return payload


def _apply_identity(
    payload: dict[str, Any],
    *,
    registry: SedationFieldRegistry,
    patient: PatientContext,
    status: str,
) -> None:
    payload["patient_id"] = patient.id
    payload["patient_name"] = (
        registry.patient_name.strip() or patient.display_name or placeholder_patient_name(patient.id)
    )
    payload["sedation_date"] = registry.sedation_date or None
    payload["status"] = status


def record_to_registry(record: Mapping[str, Any], *, patient: PatientContext | None = None) -> SedationFieldRegistry:
    registry = SedationFieldRegistry()
    for column, raw in record.items():
        field_name = field_name_for_column(column)
        if field_name is None:
            continue
        setattr(registry, field_name, decode_field(field_name, raw))
    if patient is not None:
        registry.patient_name = registry.patient_name or patient.display_name
        registry.patient_gender = patient.gender
    return registry


def merge_pending_updates(pending: Mapping[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(pending)
    merged.update(updates)
    return merged


def _as_str_list(raw: object) -> list[str]:
    if isinstance(raw, (list, tuple)):
        return [str(item) for item in raw if item is not None]
    if raw is None or raw == "":
        return []
    return [str(raw)]
