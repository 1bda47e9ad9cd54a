from __future__ import annotations

import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Ensure project root on sys.path when running as script or bundled app
_MEIPASS = getattr(sys, "_MEIPASS", None)
ROOT_DIR = Path(_MEIPASS) if _MEIPASS else Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from PySide6.QtCore import QtMsgType, qInstallMessageHandler  # noqa: E402
from PySide6.QtWidgets import QApplication, QMainWindow, QMessageBox  # noqa: E402

from sedation_chart.bootstrap.startup import initialize_database, seed_demo_patient  # noqa: E402
from sedation_chart.config import DB_FILE, LOG_DIR, settings  # noqa: E402
from sedation_chart.container import build_container  # noqa: E402
from sedation_chart.ui.main_window import MainWindow  # noqa: E402
from sedation_chart.ui.theme import apply_theme  # noqa: E402


def _setup_logging() -> Path:
    log_path = LOG_DIR / "app.log"
    handler = RotatingFileHandler(log_path, maxBytes=2_000_000, backupCount=3, encoding="utf-8")
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.addHandler(handler)
    return log_path


def _install_exception_hook(log_path: Path) -> None:
    def _handle_exception(exc_type, exc, tb) -> None:
        logging.getLogger(__name__).error("Unhandled exception", exc_info=(exc_type, exc, tb))
        if QApplication.instance() is not None:
            QMessageBox.critical(
                None,
                "Error",
                f"An unexpected error occurred.\nReport: {log_path}",
            )
        sys.__excepthook__(exc_type, exc, tb)

    sys.excepthook = _handle_exception


def _install_qt_message_handler() -> None:
    last_msg: dict[str, float] = {}

    def _handle_qt_message(msg_type: QtMsgType, _context, message: str) -> None:
        now = time.monotonic()
        last_time = last_msg.get(message)
        if last_time and now - last_time < 2.0:
            return
        last_msg[message] = now
        logger = logging.getLogger("qt")
        if msg_type == QtMsgType.QtCriticalMsg:
            logger.error("Qt: %s", message)
        elif msg_type == QtMsgType.QtWarningMsg:
            logger.warning("Qt: %s", message)
        else:
            logger.info("Qt: %s", message)

    qInstallMessageHandler(_handle_qt_message)


def main() -> int:
    log_path = _setup_logging()
    _install_exception_hook(log_path)
    _install_qt_message_handler()
    app = QApplication(sys.argv)
    apply_theme(app)
    if not initialize_database(
        db_file=DB_FILE,
        database_url=settings.database_url,
        log_dir=LOG_DIR,
    ):
        return 1
    container = build_container()
    if settings.seed_demo_patient:
        seed_demo_patient(container)

    window = MainWindow(container=container)
    _apply_initial_window_size(window, app)
    window.show()
    return app.exec()


def _apply_initial_window_size(window: QMainWindow, app: QApplication) -> None:
    screen = window.screen() or app.primaryScreen()
    if not screen:
        return
    available = screen.availableGeometry()
    width = max(900, int(available.width() * 0.8))
    height = max(700, int(available.height() * 0.85))
    window.resize(width, height)
    x = available.x() + max(0, (available.width() - width) // 2)
    y = available.y() + max(0, (available.height() - height) // 2)
    window.move(x, y)


if __name__ == "__main__":
    sys.exit(main())
