from __future__ import annotations

import logging

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QPushButton,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from sedation_chart.container import Container
from sedation_chart.ui.iv_sedation.iv_sedation_list_panel import IvSedationListPanel
from sedation_chart.ui.patient.patient_create_dialog import PatientCreateDialog
from sedation_chart.ui.widgets.notifications import show_error
from sedation_chart.ui.widgets.toast import show_toast

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, container: Container) -> None:
        super().__init__()
        self.container = container
        self.service = container.iv_sedation_service
        self.setWindowTitle("Sedation Chart")

        splitter = QSplitter(Qt.Orientation.Horizontal)

        left = QWidget()
        left_lay = QVBoxLayout(left)
        title = QLabel("Patients")
        title.setObjectName("sectionTitle")
        left_lay.addWidget(title)
        self.patient_list = QListWidget()
        self.patient_list.currentItemChanged.connect(self._on_patient_changed)
        left_lay.addWidget(self.patient_list, 1)
        btn_row = QHBoxLayout()
        new_patient = QPushButton("New Patient")
        new_patient.clicked.connect(self._new_patient)
        btn_row.addWidget(new_patient)
        btn_row.addStretch(1)
        left_lay.addLayout(btn_row)

        self.forms_panel = IvSedationListPanel(self.service)
        splitter.addWidget(left)
        splitter.addWidget(self.forms_panel)
        splitter.setStretchFactor(0, 1)
        splitter.setStretchFactor(1, 3)
        self.setCentralWidget(splitter)

        self.reload_patients()

    def reload_patients(self, select_id: str | None = None) -> None:
        self.patient_list.blockSignals(True)
        self.patient_list.clear()
        selected_row = 0
        for row, patient in enumerate(self.service.list_patients()):
            name = f"{patient.last_name}, {patient.first_name}".strip(", ")
            item = QListWidgetItem(name or patient.id)
            item.setData(Qt.ItemDataRole.UserRole, patient.id)
            self.patient_list.addItem(item)
            if patient.id == select_id:
                selected_row = row
        self.patient_list.blockSignals(False)
        if self.patient_list.count():
            self.patient_list.setCurrentRow(selected_row)
        else:
            self.forms_panel.set_patient(None)

    def _on_patient_changed(self, current: QListWidgetItem | None, _previous: QListWidgetItem | None) -> None:
        if current is None:
            self.forms_panel.set_patient(None)
            return
        patient_id = str(current.data(Qt.ItemDataRole.UserRole))
        try:
            patient = self.service.get_patient(patient_id)
        except ValueError as exc:
            show_error(self, str(exc))
            return
        logger.info("Selected patient %s", patient_id)
        self.forms_panel.set_patient(patient)

    def _new_patient(self) -> None:
        dialog = PatientCreateDialog(self.service, self)
        if dialog.exec() != QDialog.DialogCode.Accepted or dialog.created is None:
            return
        self.reload_patients(select_id=dialog.created.id)
        show_toast(self, "Patient created", "success")
