from __future__ import annotations

import os
import shutil
from collections.abc import Generator, Mapping
from copy import deepcopy
from pathlib import Path
from typing import Any
from uuid import uuid4

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
os.environ.setdefault("SEDATIONCHART_DATA_DIR", str(Path("pytest_artifacts") / "app_data"))

from sedation_chart.domain.models.iv_sedation import (  # noqa: E402
    NO,
    RECOVERY_CRITERIA,
    YES,
    FlowEntry,
    MorningMedications,
    PatientContext,
    SedationFieldRegistry,
)


class MemoryStore:
    """In-memory record store with optional injected failures."""

    def __init__(self) -> None:
        self.tables: dict[str, dict[str, dict[str, Any]]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_next: int = 0

    def _maybe_fail(self) -> None:
        if self.fail_next > 0:
            self.fail_next -= 1
            raise ConnectionError("store unavailable")

    def create(self, table: str, record: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append(("create", table))
        self._maybe_fail()
        row = deepcopy(dict(record))
        row["id"] = uuid4().hex
        self.tables.setdefault(table, {})[row["id"]] = row
        return deepcopy(row)

    def update(self, table: str, record_id: str, partial: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append(("update", table))
        self._maybe_fail()
        rows = self.tables.setdefault(table, {})
        if record_id not in rows:
            raise ValueError(f"Record {record_id} not found in {table}")
        rows[record_id].update(deepcopy(dict(partial)))
        return deepcopy(rows[record_id])

    def query(self, table: str, filters: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        rows = self.tables.get(table, {}).values()
        return [
            deepcopy(row)
            for row in rows
            if all(row.get(key) == value for key, value in (filters or {}).items())
        ]

    def delete(self, table: str, record_id: str) -> bool:
        return self.tables.get(table, {}).pop(record_id, None) is not None

    def rows(self, table: str) -> list[dict[str, Any]]:
        return list(self.tables.get(table, {}).values())


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


@pytest.fixture
def tmp_path() -> Generator[Path, None, None]:
    base = Path("pytest_artifacts")
    base.mkdir(parents=True, exist_ok=True)
    path = base / uuid4().hex
    path.mkdir(parents=True, exist_ok=True)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def patient() -> PatientContext:
    return PatientContext(id="p-1", first_name="Jane", last_name="Doe", gender="female", date_of_birth="1980-04-02")


@pytest.fixture
def male_patient() -> PatientContext:
    return PatientContext(id="p-2", first_name="John", last_name="Roe", gender="male")


def _complete_registry(patient: PatientContext) -> SedationFieldRegistry:
    registry = SedationFieldRegistry(
        patient_name=patient.display_name,
        patient_gender=patient.gender,
        sedation_date="2025-03-01",
        upper_treatment="FULL ARCH FIXED",
        upper_surgery_type="Implants Only",
        lower_treatment="NO TREATMENT",
        height_feet="5",
        height_inches="6",
        weight="150",
        npo_status="NPO After Midnight",
        morning_medications=MorningMedications(taken=False),
        allergies=["NKDA"],
        pregnancy_risk="Not Pregnant",
        last_menstrual_cycle="2025-02-14",
        anesthesia_history="No Previous Anesthetic History",
        respiratory_problems=["NONE"],
        cardiovascular_problems=["NONE"],
        gastrointestinal_problems=["NONE"],
        neurologic_problems=["NONE"],
        endocrine_renal_problems=["NONE"],
        miscellaneous=["NONE"],
        social_history=["None"],
        well_developed_nourished=YES,
        patient_anxious=NO,
        asa_classification="2",
        airway_evaluation=["Good range of motion of neck and jaw"],
        mallampati_score="Class II",
        heart_lung_evaluation=["Heart Regular Rate and Rhythm"],
        sedation_type="Moderate Sedation",
        medications_planned=["Midazolam"],
        instruments_checklist=["ECG", "BP"],
        administration_route=["IV"],
        emergency_protocols=["Emergency Cart Ready"],
        time_in_room="09:00",
        sedation_start_time="09:15",
        sedation_end_time="10:05",
        out_of_room_time="10:40",
        level_of_sedation="Moderate",
        flow_entries=[FlowEntry(id="e-1", time="09:20", bp="120/80", heart_rate="72", medications=["midazolam"])],
        post_op_instructions_given_to="Spouse",
        follow_up_instructions_given_to="Spouse",
        discharged_to="Home",
        pain_level_discharge="2",
    )
    for name, _label in RECOVERY_CRITERIA:
        setattr(registry, name, YES)
    return registry


@pytest.fixture
def complete_registry(patient: PatientContext) -> SedationFieldRegistry:
    return _complete_registry(patient)
