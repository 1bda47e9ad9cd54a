from __future__ import annotations

from pathlib import Path

from alembic.util.exc import CommandError
from sqlalchemy import create_engine, inspect

from sedation_chart.bootstrap import startup


def test_check_startup_prerequisites_needs_no_alembic_ini(tmp_path: Path, monkeypatch) -> None:
    critical_calls: list[tuple] = []
    monkeypatch.setattr(startup.QMessageBox, "critical", lambda *args, **kwargs: critical_calls.append(args))
    db_file = tmp_path / "data" / "sedation.db"
    db_file.parent.mkdir(parents=True)

    assert startup.check_startup_prerequisites(db_file) is True
    assert critical_calls == []


def test_check_startup_prerequisites_requires_migrations(tmp_path: Path, monkeypatch) -> None:
    critical_calls: list[tuple] = []
    monkeypatch.setattr(startup.QMessageBox, "critical", lambda *args, **kwargs: critical_calls.append(args))
    monkeypatch.setattr(startup, "MIGRATIONS_DIR", tmp_path / "missing")

    assert startup.check_startup_prerequisites(tmp_path / "sedation.db") is False
    assert len(critical_calls) == 1


def test_check_startup_prerequisites_handles_write_error(
    tmp_path: Path,
    monkeypatch,
) -> None:
    root_dir = tmp_path
    db_file = root_dir / "data" / "sedation.db"
    db_file.parent.mkdir(parents=True, exist_ok=True)

    critical_calls: list[tuple] = []
    monkeypatch.setattr(startup.QMessageBox, "critical", lambda *args, **kwargs: critical_calls.append(args))

    original_write_text = Path.write_text

    def _failing_write(self: Path, data: str, encoding: str = "utf-8", errors: str | None = None) -> int:
        if self.name == ".write_test":
            raise OSError("permission denied")
        kwargs = {"encoding": encoding}
        if errors is not None:
            kwargs["errors"] = errors
        return original_write_text(self, data, **kwargs)

    monkeypatch.setattr(Path, "write_text", _failing_write)

    assert startup.check_startup_prerequisites(db_file) is False
    assert len(critical_calls) == 1


def test_run_migrations_writes_error_log_when_upgrade_fails(
    tmp_path: Path,
    monkeypatch,
) -> None:
    root_dir = tmp_path
    db_file = root_dir / "sedation.db"
    log_dir = root_dir / "logs"

    critical_calls: list[tuple] = []
    monkeypatch.setattr(startup.QMessageBox, "critical", lambda *args, **kwargs: critical_calls.append(args))

    def _raise_upgrade(_cfg, _target: str) -> None:  # noqa: ANN001
        raise CommandError("boom")

    monkeypatch.setattr(startup.command, "upgrade", _raise_upgrade)

    ok = startup.run_migrations("sqlite:///tmp.db", log_dir, db_file)
    assert ok is False
    assert len(critical_calls) == 1

    error_log = log_dir / "migration_error.log"
    assert error_log.exists()
    log_text = error_log.read_text(encoding="utf-8")
    assert "Migration error" in log_text
    assert "CommandError" in log_text


def test_build_alembic_config_points_at_packaged_migrations() -> None:
    cfg = startup.build_alembic_config("sqlite:///x.db")

    assert cfg.config_file_name is None
    assert cfg.get_main_option("script_location") == str(startup.MIGRATIONS_DIR)
    assert cfg.get_main_option("sqlalchemy.url") == "sqlite:///x.db"


def test_run_migrations_upgrades_fresh_database_without_ini(tmp_path: Path, monkeypatch) -> None:
    critical_calls: list[tuple] = []
    monkeypatch.setattr(startup.QMessageBox, "critical", lambda *args, **kwargs: critical_calls.append(args))
    db_file = tmp_path.resolve() / "fresh.db"
    database_url = f"sqlite:///{db_file.as_posix()}"

    assert startup.run_migrations(database_url, tmp_path / "logs", db_file) is True
    assert critical_calls == []
    engine = create_engine(database_url, future=True)
    try:
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    assert {"patients", "iv_sedation_forms", "alembic_version"} <= tables


class _FakeService:
    def __init__(self, patients: list[object], *, fail: bool = False) -> None:
        self.patients = patients
        self.created: list[object] = []
        self.fail = fail

    def list_patients(self) -> list[object]:
        if self.fail:
            raise RuntimeError("db unavailable")
        return self.patients

    def create_patient(self, request):  # noqa: ANN001, ANN201
        self.created.append(request)
        return type("Created", (), {"id": "p-1"})()


class _FakeContainer:
    def __init__(self, service: _FakeService) -> None:
        self.iv_sedation_service = service


def test_seed_demo_patient_only_when_empty() -> None:
    empty = _FakeService([])
    startup.seed_demo_patient(_FakeContainer(empty))  # type: ignore[arg-type]
    assert empty.created == [startup.DEMO_PATIENT]

    populated = _FakeService([object()])
    startup.seed_demo_patient(_FakeContainer(populated))  # type: ignore[arg-type]
    assert populated.created == []


def test_seed_demo_patient_logs_failures(caplog) -> None:
    broken = _FakeService([], fail=True)

    startup.seed_demo_patient(_FakeContainer(broken))  # type: ignore[arg-type]

    assert "Failed to seed demo patient" in caplog.text
