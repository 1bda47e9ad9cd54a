from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any, cast

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect, text

from sedation_chart.infrastructure.db.models_sqlalchemy import IvSedationForm, Patient

MIGRATION_MODULE = "sedation_chart.infrastructure.db.migrations.versions.0001_initial_patients_iv_sedation"


def _run_migration(connection, *, fn_name: str) -> None:  # noqa: ANN001
    module = cast(Any, importlib.import_module(MIGRATION_MODULE))
    context = MigrationContext.configure(connection)
    operations = Operations(context)
    original_op = module.op
    try:
        module.op = operations
        getattr(module, fn_name)()
    finally:
        module.op = original_op


def _table_names(connection) -> set[str]:  # noqa: ANN001
    rows = connection.execute(text("SELECT name FROM sqlite_master WHERE type='table'")).fetchall()
    return {str(row[0]) for row in rows}


def test_initial_migration_matches_models(tmp_path: Path) -> None:
    db_path = tmp_path / "initial_migration.db"
    engine = create_engine(f"sqlite:///{db_path.as_posix()}", future=True)

    with engine.begin() as connection:
        _run_migration(connection, fn_name="upgrade")

        assert {"patients", "iv_sedation_forms"} <= _table_names(connection)
        inspector = inspect(connection)
        for model in (Patient, IvSedationForm):
            migrated = {column["name"] for column in inspector.get_columns(model.__tablename__)}
            assert migrated == set(model.__table__.columns.keys())

        connection.execute(
            text(
                "INSERT INTO patients (id, first_name, last_name, created_at, updated_at) "
                "VALUES ('p-1', 'Jane', 'Doe', '2025-03-01 09:00:00', '2025-03-01 09:00:00')"
            )
        )
        connection.execute(
            text(
                "INSERT INTO iv_sedation_forms (id, patient_id, created_at, updated_at) "
                "VALUES ('f-1', 'p-1', '2025-03-01 09:00:00', '2025-03-01 09:00:00')"
            )
        )
        row = connection.execute(text("SELECT status, allergies, flow_entries FROM iv_sedation_forms")).one()
        assert tuple(row) == ("draft", "[]", "[]")

        _run_migration(connection, fn_name="downgrade")
        assert not {"patients", "iv_sedation_forms"} & _table_names(connection)
