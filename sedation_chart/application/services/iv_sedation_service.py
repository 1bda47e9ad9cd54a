from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, cast

from sedation_chart.application.dto.iv_sedation_dto import (
    IvSedationListItemDto,
    PatientContextDto,
    PatientCreateRequest,
)
from sedation_chart.application.iv_sedation_mapper import record_to_registry
from sedation_chart.application.services.review_submit import build_review_projection
from sedation_chart.config import EXPORT_DIR
from sedation_chart.domain.models.iv_sedation import PatientContext, SedationFieldRegistry
from sedation_chart.domain.models.medication_catalog import DEFAULT_CATALOG, MedicationCatalog
from sedation_chart.infrastructure.db.remote_store import IV_SEDATION_TABLE, PATIENTS_TABLE, RemoteStore, SqlRemoteStore
from sedation_chart.infrastructure.reporting.iv_sedation_pdf_report import export_iv_sedation_pdf

logger = logging.getLogger(__name__)


def _to_patient_context(record: dict[str, Any]) -> PatientContext:
    dob = record.get("date_of_birth")
    return PatientContext(
        id=str(record["id"]),
        first_name=str(record.get("first_name") or ""),
        last_name=str(record.get("last_name") or ""),
        gender=str(record.get("gender") or ""),
        date_of_birth=dob.isoformat() if isinstance(dob, date) else (str(dob) if dob else None),
    )


class IvSedationService:
    def __init__(self, store: RemoteStore | None = None, catalog: MedicationCatalog = DEFAULT_CATALOG) -> None:
        self.store = store or SqlRemoteStore()
        self.catalog = catalog

    def list_patients(self) -> list[PatientContextDto]:
        rows = self.store.query(PATIENTS_TABLE)
        rows.sort(key=lambda item: (str(item.get("last_name") or "").lower(), str(item.get("first_name") or "").lower()))
        return [PatientContextDto.model_validate(row) for row in rows]

    def get_patient(self, patient_id: str) -> PatientContext:
        rows = self.store.query(PATIENTS_TABLE, {"id": patient_id})
        if not rows:
            raise ValueError("Patient not found")
        return _to_patient_context(rows[0])

    def create_patient(self, request: PatientCreateRequest) -> PatientContextDto:
        record = self.store.create(PATIENTS_TABLE, request.model_dump())
        logger.info("Created patient %s", record["id"])
        return PatientContextDto.model_validate(record)

    def list_forms(self, patient_id: str) -> list[IvSedationListItemDto]:
        rows = self.store.query(IV_SEDATION_TABLE, {"patient_id": patient_id})
        return [
            IvSedationListItemDto(
                id=str(row["id"]),
                patient_id=str(row["patient_id"]),
                patient_name=str(row.get("patient_name") or ""),
                sedation_date=cast(str | None, row.get("sedation_date")),
                status=row["status"],
                level_of_sedation=cast(str | None, row.get("level_of_sedation")),
                created_at=cast(datetime | None, row.get("created_at")),
                updated_at=cast(datetime | None, row.get("updated_at")),
            )
            for row in rows
        ]

    def list_form_records(self, patient_id: str) -> list[dict[str, Any]]:
        return self.store.query(IV_SEDATION_TABLE, {"patient_id": patient_id})

    def get_form(self, form_id: str) -> dict[str, Any]:
        rows = self.store.query(IV_SEDATION_TABLE, {"id": form_id})
        if not rows:
            raise ValueError("IV sedation form not found")
        return rows[0]

    def open_registry(self, form_id: str, patient: PatientContext | None = None) -> SedationFieldRegistry:
        record = self.get_form(form_id)
        if patient is None:
            patient = self.get_patient(str(record["patient_id"]))
        return record_to_registry(record, patient=patient)

    def delete_form(self, form_id: str) -> bool:
        deleted = self.store.delete(IV_SEDATION_TABLE, form_id)
        if deleted:
            logger.info("Deleted IV sedation form %s", form_id)
        return deleted

    def default_export_path(self, form_id: str) -> Path:
        return EXPORT_DIR / f"iv_sedation_{form_id}.pdf"

    def export_pdf(self, form_id: str, file_path: str | Path | None = None) -> Path:
        record = self.get_form(form_id)
        patient = self.get_patient(str(record["patient_id"]))
        registry = record_to_registry(record, patient=patient)
        projection = build_review_projection(registry, catalog=self.catalog)
        header = {
            "Patient": projection.patient_name or patient.display_name,
            "Date of Birth": patient.date_of_birth or "",
            "Sedation Date": projection.sedation_date,
            "Status": str(record.get("status") or "").capitalize(),
            "BMI": f"{projection.bmi:.2f} ({projection.bmi_category})"
            if projection.bmi is not None
            else projection.bmi_category,
            "Last Updated": record.get("updated_at"),
        }
        path = export_iv_sedation_pdf(
            header=header,
            sections=[(section.title, section.rows) for section in projection.sections],
            flow_rows=[
                [row.time, row.bp, row.heart_rate, row.rr, row.spo2, row.medications]
                for row in projection.flow_rows
            ],
            durations=projection.durations,
            file_path=file_path or self.default_export_path(form_id),
        )
        logger.info("Exported IV sedation form %s to %s", form_id, path)
        return path
