from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, MetaData, String, Text
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql import expression

naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    # avoid constraint_name token to allow unnamed CheckConstraint
    "ck": "ck_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=naming_convention)

# Columns flagged this way hold JSON text and are decoded by the store.
JSON_INFO = {"json": True}


class Base(DeclarativeBase):
    metadata = metadata


def utc_now() -> datetime:
    return datetime.now(UTC)


def _json_list() -> Column:
    return Column(Text, nullable=False, server_default=expression.literal("[]"), info=JSON_INFO)


class Patient(Base):
    __tablename__ = "patients"

    id = Column(String(36), primary_key=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    gender = Column(
        String,
        CheckConstraint("gender in ('male','female','other','')"),
        nullable=False,
        server_default=expression.literal(""),
    )
    date_of_birth = Column(Date)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now)


class IvSedationForm(Base):
    __tablename__ = "iv_sedation_forms"

    id = Column(String(36), primary_key=True)
    patient_id = Column(String(36), ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        String,
        CheckConstraint("status in ('draft','completed')"),
        nullable=False,
        server_default=expression.literal("draft"),
    )
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now)

    # Basic info
    patient_name = Column(String, nullable=False, server_default=expression.literal(""))
    sedation_date = Column(String(10))
    upper_treatment = Column(String)
    lower_treatment = Column(String)
    upper_surgery_type = Column(String)
    lower_surgery_type = Column(String)
    height_feet = Column(Integer)
    height_inches = Column(Integer)
    weight = Column(Integer)

    # Pre-assessment
    npo_status = Column(String)
    morning_medications = Column(Text)
    allergies = _json_list()
    allergies_other = Column(Text)
    pregnancy_risk = Column(String)
    last_menstrual_cycle = Column(String)
    anesthesia_history = Column(String)
    anesthesia_history_other = Column(Text)
    respiratory_problems = _json_list()
    respiratory_problems_other = Column(Text)
    cardiovascular_problems = _json_list()
    cardiovascular_problems_other = Column(Text)
    gastrointestinal_problems = _json_list()
    gastrointestinal_problems_other = Column(Text)
    neurologic_problems = _json_list()
    neurologic_problems_other = Column(Text)
    endocrine_renal_problems = _json_list()
    endocrine_renal_problems_other = Column(Text)
    last_a1c_level = Column(String)
    miscellaneous = _json_list()
    miscellaneous_other = Column(Text)
    social_history = _json_list()
    social_history_other = Column(Text)
    well_developed_nourished = Column(String)
    patient_anxious = Column(String)
    asa_classification = Column(String)
    airway_evaluation = _json_list()
    airway_evaluation_other = Column(Text)
    mallampati_score = Column(String)
    heart_lung_evaluation = _json_list()
    heart_lung_evaluation_other = Column(Text)

    # Sedation plan
    sedation_type = Column(String)
    medications_planned = _json_list()
    medications_other = Column(Text)
    instruments_checklist = _json_list()
    administration_route = _json_list()
    emergency_protocols = _json_list()

    # Flow / monitoring
    time_in_room = Column(String(5))
    sedation_start_time = Column(String(5))
    sedation_end_time = Column(String(5))
    out_of_room_time = Column(String(5))
    level_of_sedation = Column(String)
    flow_entries = _json_list()

    # Recovery
    alert_oriented = Column(String)
    protective_reflexes = Column(String)
    breathing_spontaneously = Column(String)
    post_op_nausea = Column(String)
    caregiver_present = Column(String)
    baseline_mental_status = Column(String)
    responsive_verbal_commands = Column(String)
    saturating_room_air = Column(String)
    vital_signs_baseline = Column(String)
    pain_during_recovery = Column(String)
    post_op_instructions_given_to = Column(String)
    follow_up_instructions_given_to = Column(String)
    discharged_to = Column(String)
    pain_level_discharge = Column(Integer)
    other_remarks = Column(Text)

    __table_args__ = (
        Index("ix_iv_sedation_forms_status", "status"),
        Index("ix_iv_sedation_forms_updated_at", "updated_at"),
    )
