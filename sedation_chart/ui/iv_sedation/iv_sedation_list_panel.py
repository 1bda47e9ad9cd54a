from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from PySide6.QtCore import Qt, QUrl
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import (
    QAbstractItemView,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QMessageBox,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from sedation_chart.application.dto.iv_sedation_dto import IvSedationListItemDto
from sedation_chart.application.services.iv_sedation_service import IvSedationService
from sedation_chart.application.services.review_submit import build_review_projection
from sedation_chart.domain.models.iv_sedation import PatientContext
from sedation_chart.ui.iv_sedation.iv_sedation_wizard import IvSedationWizard
from sedation_chart.ui.iv_sedation.review_dialog import ReviewDialog
from sedation_chart.ui.widgets.async_task import run_async
from sedation_chart.ui.widgets.notifications import clear_status, set_status, show_error
from sedation_chart.ui.widgets.toast import show_toast

logger = logging.getLogger(__name__)

_COLUMNS = ("Sedation Date", "Status", "Level of Sedation", "Last Updated")


class IvSedationListPanel(QWidget):
    """Forms of the selected patient with new/continue/view/export/delete actions."""

    def __init__(self, service: IvSedationService, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.service = service
        self.patient: PatientContext | None = None
        self._items: list[IvSedationListItemDto] = []
        self._export_task: Any = None

        layout = QVBoxLayout(self)
        title = QLabel("IV Sedation Forms")
        title.setObjectName("sectionTitle")
        layout.addWidget(title)

        self.table = QTableWidget(0, len(_COLUMNS))
        self.table.setHorizontalHeaderLabels(list(_COLUMNS))
        self.table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.table.itemSelectionChanged.connect(self._update_buttons)
        self.table.cellDoubleClicked.connect(lambda _row, _col: self._open_selected())
        layout.addWidget(self.table, 1)

        buttons = QHBoxLayout()
        self.new_button = QPushButton("New IV Sedation Form")
        self.new_button.clicked.connect(self._new_form)
        self.open_button = QPushButton("Continue Draft")
        self.open_button.setObjectName("secondary")
        self.open_button.clicked.connect(self._open_selected)
        self.export_button = QPushButton("Export PDF")
        self.export_button.setObjectName("secondary")
        self.export_button.clicked.connect(self._export_selected)
        self.delete_button = QPushButton("Delete")
        self.delete_button.setObjectName("ghost")
        self.delete_button.clicked.connect(self._delete_selected)
        self.status_label = QLabel()
        for button in (self.new_button, self.open_button, self.export_button, self.delete_button):
            buttons.addWidget(button)
        buttons.addStretch(1)
        buttons.addWidget(self.status_label)
        layout.addLayout(buttons)
        self._update_buttons()

    def set_patient(self, patient: PatientContext | None) -> None:
        self.patient = patient
        self.refresh()

    def refresh(self) -> None:
        self._items = self.service.list_forms(self.patient.id) if self.patient else []
        self.table.setRowCount(len(self._items))
        for row, item in enumerate(self._items):
            updated = item.updated_at.strftime("%Y-%m-%d %H:%M") if item.updated_at else ""
            values = (item.sedation_date or "-", item.status.capitalize(), item.level_of_sedation or "-", updated)
            for column, value in enumerate(values):
                cell = QTableWidgetItem(value)
                cell.setData(Qt.ItemDataRole.UserRole, item.id)
                self.table.setItem(row, column, cell)
        self._update_buttons()

    def _selected(self) -> IvSedationListItemDto | None:
        row = self.table.currentRow()
        if 0 <= row < len(self._items):
            return self._items[row]
        return None

    def _update_buttons(self) -> None:
        selected = self._selected()
        self.new_button.setEnabled(self.patient is not None)
        self.open_button.setEnabled(selected is not None)
        self.open_button.setText("View" if selected is not None and not selected.is_draft else "Continue Draft")
        self.export_button.setEnabled(selected is not None and self._export_task is None)
        self.delete_button.setEnabled(selected is not None)

    def _new_form(self) -> None:
        if self.patient is None:
            return
        self._run_wizard(None)

    def _open_selected(self) -> None:
        selected = self._selected()
        if selected is None or self.patient is None:
            return
        try:
            record = self.service.get_form(selected.id)
        except ValueError as exc:
            show_error(self, str(exc))
            self.refresh()
            return
        if selected.is_draft:
            self._run_wizard(record)
            return
        registry = self.service.open_registry(selected.id, patient=self.patient)
        ReviewDialog(build_review_projection(registry, catalog=self.service.catalog), self, read_only=True).exec()

    def _run_wizard(self, record: dict[str, Any] | None) -> None:
        assert self.patient is not None
        records = self.service.list_form_records(self.patient.id)
        wizard = IvSedationWizard(self.service, self.patient, record=record, records=records, parent=self.window())
        wizard.records_changed.connect(self.refresh)
        wizard.exec()
        self.refresh()

    def _export_selected(self) -> None:
        selected = self._selected()
        if selected is None:
            return
        form_id = selected.id
        set_status(self.status_label, "Exporting PDF...", "info")

        def _finished() -> None:
            self._export_task = None
            self._update_buttons()

        self._export_task = run_async(
            self,
            lambda: self.service.export_pdf(form_id),
            on_success=self._on_exported,
            on_error=self._on_export_failed,
            on_finished=_finished,
        )
        self._update_buttons()

    def _on_exported(self, path: Path) -> None:
        set_status(self.status_label, f"Saved {path.name}", "success")
        QDesktopServices.openUrl(QUrl.fromLocalFile(str(path)))

    def _on_export_failed(self, exc: Exception) -> None:
        logger.error("PDF export failed: %s", exc)
        clear_status(self.status_label)
        show_toast(self, "PDF export failed", "error")

    def _delete_selected(self) -> None:
        selected = self._selected()
        if selected is None:
            return
        answer = QMessageBox.question(
            self,
            "Delete IV sedation form",
            f"Delete the {selected.status} form dated {selected.sedation_date or 'without date'}?",
        )
        if answer != QMessageBox.StandardButton.Yes:
            return
        self.service.delete_form(selected.id)
        show_toast(self, "IV sedation form deleted", "info")
        self.refresh()
