from __future__ import annotations

import logging
import traceback
from pathlib import Path

from alembic import command
from alembic.config import Config
from PySide6.QtWidgets import QMessageBox

from sedation_chart.application.dto.iv_sedation_dto import PatientCreateRequest
from sedation_chart.container import Container

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parents[1] / "infrastructure" / "db" / "migrations"
DEMO_PATIENT = PatientCreateRequest(first_name="Jane", last_name="Doe", gender="female")


def check_startup_prerequisites(db_file: Path) -> bool:
    if not MIGRATIONS_DIR.exists():
        QMessageBox.critical(None, "Error", "The migrations directory is missing. Check the application installation.")
        return False
    try:
        test_file = db_file.parent / ".write_test"
        test_file.write_text("ok", encoding="utf-8")
        test_file.unlink(missing_ok=True)
    except OSError:
        QMessageBox.critical(None, "Error", f"The database directory is not writable: {db_file.parent}")
        return False
    return True


def build_alembic_config(database_url: str) -> Config:
    # No ini file: installed copies ship without alembic.ini.
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    cfg.set_main_option("sqlalchemy.url", database_url)
    # Keep the application's logging handlers installed.
    cfg.attributes["configure_logger"] = False
    return cfg


def run_migrations(database_url: str, log_dir: Path, db_file: Path) -> bool:
    try:
        command.upgrade(build_alembic_config(database_url), "head")
        return True
    except Exception:  # noqa: BLE001
        logger.exception("Failed to run migrations")
        error_path = log_dir / "migration_error.log"
        try:
            error_path.parent.mkdir(parents=True, exist_ok=True)
            with error_path.open("a", encoding="utf-8") as handle:
                handle.write("\n--- Migration error ---\n")
                handle.write(f"DB: {db_file}\n")
                handle.write(f"Migrations: {MIGRATIONS_DIR}\n")
                handle.write(traceback.format_exc())
        except OSError:
            logger.exception("Failed to write migration error log")
        QMessageBox.critical(
            None,
            "Error",
            f"Database migrations could not be applied.\nDetails: {error_path}",
        )
        return False


def initialize_database(*, db_file: Path, database_url: str, log_dir: Path) -> bool:
    if not check_startup_prerequisites(db_file):
        return False
    return run_migrations(database_url, log_dir, db_file)


def seed_demo_patient(container: Container) -> None:
    try:
        if container.iv_sedation_service.list_patients():
            return
        patient = container.iv_sedation_service.create_patient(DEMO_PATIENT)
        logger.info("Seeded demo patient %s", patient.id)
    except Exception:  # noqa: BLE001
        logger.exception("Failed to seed demo patient")
