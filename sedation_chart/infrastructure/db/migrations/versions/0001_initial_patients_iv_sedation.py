"""Create patients and IV sedation form tables.

Revision ID: 0001_initial_patients_iv_sedation
Revises:
Create Date: 2026-10-16
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial_patients_iv_sedation"
down_revision = None
branch_labels = None
depends_on = None

_JSON_LIST_COLUMNS = (
    "allergies",
    "respiratory_problems",
    "cardiovascular_problems",
    "gastrointestinal_problems",
    "neurologic_problems",
    "endocrine_renal_problems",
    "miscellaneous",
    "social_history",
    "airway_evaluation",
    "heart_lung_evaluation",
    "medications_planned",
    "instruments_checklist",
    "administration_route",
    "emergency_protocols",
    "flow_entries",
)

_STRING_COLUMNS = (
    "upper_treatment",
    "lower_treatment",
    "upper_surgery_type",
    "lower_surgery_type",
    "npo_status",
    "pregnancy_risk",
    "last_menstrual_cycle",
    "anesthesia_history",
    "last_a1c_level",
    "well_developed_nourished",
    "patient_anxious",
    "asa_classification",
    "mallampati_score",
    "sedation_type",
    "level_of_sedation",
    "alert_oriented",
    "protective_reflexes",
    "breathing_spontaneously",
    "post_op_nausea",
    "caregiver_present",
    "baseline_mental_status",
    "responsive_verbal_commands",
    "saturating_room_air",
    "vital_signs_baseline",
    "pain_during_recovery",
    "post_op_instructions_given_to",
    "follow_up_instructions_given_to",
    "discharged_to",
)

_TEXT_COLUMNS = (
    "morning_medications",
    "allergies_other",
    "anesthesia_history_other",
    "respiratory_problems_other",
    "cardiovascular_problems_other",
    "gastrointestinal_problems_other",
    "neurologic_problems_other",
    "endocrine_renal_problems_other",
    "miscellaneous_other",
    "social_history_other",
    "airway_evaluation_other",
    "heart_lung_evaluation_other",
    "medications_other",
    "other_remarks",
)

_TIME_COLUMNS = ("time_in_room", "sedation_start_time", "sedation_end_time", "out_of_room_time")
_INTEGER_COLUMNS = ("height_feet", "height_inches", "weight", "pain_level_discharge")


def upgrade() -> None:
    op.create_table(
        "patients",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("gender", sa.String(), nullable=False, server_default=sa.text("''")),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("gender in ('male','female','other','')", name="ck_patients_gender"),
        sa.PrimaryKeyConstraint("id", name="pk_patients"),
    )

    columns: list[sa.Column] = [
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("patient_id", sa.String(length=36), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default=sa.text("'draft'")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("patient_name", sa.String(), nullable=False, server_default=sa.text("''")),
        sa.Column("sedation_date", sa.String(length=10), nullable=True),
    ]
    columns.extend(sa.Column(name, sa.String(), nullable=True) for name in _STRING_COLUMNS)
    columns.extend(sa.Column(name, sa.Text(), nullable=True) for name in _TEXT_COLUMNS)
    columns.extend(sa.Column(name, sa.String(length=5), nullable=True) for name in _TIME_COLUMNS)
    columns.extend(sa.Column(name, sa.Integer(), nullable=True) for name in _INTEGER_COLUMNS)
    columns.extend(
        sa.Column(name, sa.Text(), nullable=False, server_default=sa.text("'[]'")) for name in _JSON_LIST_COLUMNS
    )
    op.create_table(
        "iv_sedation_forms",
        *columns,
        sa.CheckConstraint("status in ('draft','completed')", name="ck_iv_sedation_forms_status"),
        sa.ForeignKeyConstraint(
            ["patient_id"],
            ["patients.id"],
            name="fk_iv_sedation_forms_patient_id_patients",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_iv_sedation_forms"),
    )
    op.create_index("ix_iv_sedation_forms_patient_id", "iv_sedation_forms", ["patient_id"])
    op.create_index("ix_iv_sedation_forms_status", "iv_sedation_forms", ["status"])
    op.create_index("ix_iv_sedation_forms_updated_at", "iv_sedation_forms", ["updated_at"])


def downgrade() -> None:
    op.drop_index("ix_iv_sedation_forms_updated_at", table_name="iv_sedation_forms")
    op.drop_index("ix_iv_sedation_forms_status", table_name="iv_sedation_forms")
    op.drop_index("ix_iv_sedation_forms_patient_id", table_name="iv_sedation_forms")
    op.drop_table("iv_sedation_forms")
    op.drop_table("patients")
