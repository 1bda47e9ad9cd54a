from __future__ import annotations

import logging

from PySide6.QtWidgets import QLabel, QMessageBox, QSizePolicy, QWidget

from sedation_chart.application.services.draft_gateway import SaveStatus

_PILL_MAX_WIDTH = 360

_SAVE_STATUS_TEXT: dict[str, tuple[str, str]] = {
    "saving": ("Saving...", "info"),
    "saved": ("Saved", "success"),
    "error": ("Save failed", "error"),
}


def _refresh_status_style(label: QLabel) -> None:
    style = label.style()
    style.unpolish(label)
    style.polish(label)
    label.update()


def set_status(label: QLabel, message: str, level: str = "info") -> None:
    if not message:
        clear_status(label)
        return
    label.setText(message)
    label.setObjectName("statusLabel")
    label.setProperty("statusLevel", level if level in {"info", "success", "error"} else "info")
    label.setSizePolicy(QSizePolicy.Policy.Maximum, QSizePolicy.Policy.Preferred)
    label.setMaximumWidth(min(_PILL_MAX_WIDTH, label.sizeHint().width() + 16))
    _refresh_status_style(label)


def clear_status(label: QLabel) -> None:
    label.clear()
    label.setObjectName("statusLabel")
    label.setProperty("statusLevel", "")
    label.setMaximumWidth(_PILL_MAX_WIDTH)
    _refresh_status_style(label)


def save_status_message(status: SaveStatus, last_saved_label: str = "") -> tuple[str, str]:
    """Text and level for the save pill; idle shows the last save time if any."""
    if status == "idle":
        return last_saved_label, "info"
    text, level = _SAVE_STATUS_TEXT[status]
    if status == "saved" and last_saved_label:
        text = last_saved_label
    return text, level


def show_save_status(label: QLabel, status: SaveStatus, last_saved_label: str = "") -> None:
    text, level = save_status_message(status, last_saved_label)
    set_status(label, text, level)


def show_error(parent: QWidget | None, message: str, title: str = "Error") -> None:
    logging.getLogger(__name__).error("%s: %s", title, message)
    box = QMessageBox(parent)
    box.setWindowTitle(title)
    box.setText(message)
    box.setIcon(QMessageBox.Icon.Critical)
    box.exec()
