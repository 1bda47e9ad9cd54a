from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest
from sqlalchemy import create_engine

from sedation_chart.infrastructure.db.models_sqlalchemy import Base
from sedation_chart.infrastructure.db.remote_store import IV_SEDATION_TABLE, PATIENTS_TABLE, SqlRemoteStore
from sedation_chart.infrastructure.db.session import make_session_scope


def make_store(db_path: Path) -> SqlRemoteStore:
    engine = create_engine(f"sqlite:///{db_path.as_posix()}", future=True)
    Base.metadata.create_all(engine)
    return SqlRemoteStore(session_factory=make_session_scope(engine))


def _patient(store: SqlRemoteStore) -> dict:
    return store.create(
        PATIENTS_TABLE,
        {"first_name": "Jane", "last_name": "Doe", "gender": "female", "date_of_birth": "1980-04-02"},
    )


def test_create_assigns_id_and_timestamps(tmp_path: Path) -> None:
    store = make_store(tmp_path / "store_create.db")

    patient = _patient(store)

    assert len(patient["id"]) == 36
    assert patient["date_of_birth"] == date(1980, 4, 2)
    assert patient["created_at"] is not None
    assert patient["updated_at"] is not None


def test_json_columns_round_trip(tmp_path: Path) -> None:
    store = make_store(tmp_path / "store_json.db")
    patient = _patient(store)

    form = store.create(
        IV_SEDATION_TABLE,
        {
            "patient_id": patient["id"],
            "patient_name": "Jane Doe",
            "status": "draft",
            "allergies": ["NKDA"],
            "flow_entries": [{"id": "a", "time": "10:00", "heartRate": "70", "medications": ["midazolam"]}],
            "not_a_column": "dropped",
        },
    )

    assert form["allergies"] == ["NKDA"]
    assert form["respiratory_problems"] == []
    assert form["flow_entries"][0]["heartRate"] == "70"
    assert "not_a_column" not in form


def test_update_changes_only_given_columns(tmp_path: Path) -> None:
    store = make_store(tmp_path / "store_update.db")
    patient = _patient(store)
    form = store.create(IV_SEDATION_TABLE, {"patient_id": patient["id"], "weight": 150, "npo_status": "Not NPO"})

    updated = store.update(IV_SEDATION_TABLE, form["id"], {"weight": 155, "id": "ignored"})

    assert updated["id"] == form["id"]
    assert updated["weight"] == 155
    assert updated["npo_status"] == "Not NPO"
    assert updated["updated_at"] >= form["updated_at"]


def test_update_missing_record_raises(tmp_path: Path) -> None:
    store = make_store(tmp_path / "store_missing.db")

    with pytest.raises(ValueError, match="not found"):
        store.update(IV_SEDATION_TABLE, "missing", {"weight": 150})


def test_query_filters_and_orders_by_update(tmp_path: Path) -> None:
    store = make_store(tmp_path / "store_query.db")
    patient = _patient(store)
    other = store.create(PATIENTS_TABLE, {"first_name": "John", "last_name": "Roe", "gender": "male"})
    first = store.create(IV_SEDATION_TABLE, {"patient_id": patient["id"]})
    second = store.create(IV_SEDATION_TABLE, {"patient_id": patient["id"]})
    store.create(IV_SEDATION_TABLE, {"patient_id": other["id"]})
    store.update(IV_SEDATION_TABLE, first["id"], {"other_remarks": "touched"})

    rows = store.query(IV_SEDATION_TABLE, {"patient_id": patient["id"]})

    assert [row["id"] for row in rows] == [first["id"], second["id"]]
    assert all(row["status"] == "draft" for row in rows)
    assert store.query(IV_SEDATION_TABLE, {"id": second["id"]})[0]["patient_id"] == patient["id"]


def test_query_rejects_unknown_filter_and_table(tmp_path: Path) -> None:
    store = make_store(tmp_path / "store_filters.db")

    with pytest.raises(ValueError, match="Unknown filter column"):
        store.query(IV_SEDATION_TABLE, {"colour": "blue"})
    with pytest.raises(ValueError, match="Unknown table"):
        store.query("users")


def test_delete_reports_whether_row_existed(tmp_path: Path) -> None:
    store = make_store(tmp_path / "store_delete.db")
    patient = _patient(store)
    form = store.create(IV_SEDATION_TABLE, {"patient_id": patient["id"]})

    assert store.delete(IV_SEDATION_TABLE, form["id"]) is True
    assert store.delete(IV_SEDATION_TABLE, form["id"]) is False
    assert store.query(IV_SEDATION_TABLE) == []
