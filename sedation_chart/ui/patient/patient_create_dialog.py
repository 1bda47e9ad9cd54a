from __future__ import annotations

from datetime import date

from PySide6.QtCore import QDate, Qt
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDateEdit,
    QDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)
from pydantic import ValidationError

from sedation_chart.application.dto.iv_sedation_dto import PatientContextDto, PatientCreateRequest
from sedation_chart.application.services.iv_sedation_service import IvSedationService
from sedation_chart.ui.widgets.notifications import clear_status, set_status

_GENDERS = (("Female", "female"), ("Male", "male"), ("Other", "other"), ("Not specified", ""))


class PatientCreateDialog(QDialog):
    def __init__(self, service: IvSedationService, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.service = service
        self.created: PatientContextDto | None = None
        self.setWindowTitle("New Patient")
        self.setWindowFlag(Qt.WindowType.WindowContextHelpButtonHint, False)
        self.setMinimumWidth(420)
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(12)

        box = QGroupBox("Patient")
        form = QFormLayout(box)
        self.first_name = QLineEdit()
        self.last_name = QLineEdit()
        self.gender = QComboBox()
        for label, value in _GENDERS:
            self.gender.addItem(label, value)
        self.dob_known = QCheckBox("Known")
        self.dob = QDateEdit()
        self.dob.setCalendarPopup(True)
        self.dob.setDisplayFormat("yyyy-MM-dd")
        self.dob.setMinimumDate(QDate(1900, 1, 1))
        self.dob.setMaximumDate(QDate.currentDate())
        self.dob.setEnabled(False)
        self.dob_known.toggled.connect(self.dob.setEnabled)
        dob_row = QHBoxLayout()
        dob_row.addWidget(self.dob_known)
        dob_row.addWidget(self.dob, 1)

        form.addRow("First Name *", self.first_name)
        form.addRow("Last Name *", self.last_name)
        form.addRow("Gender", self.gender)
        form.addRow("Date of Birth", dob_row)
        layout.addWidget(box)

        self.status = QLabel("")
        self.status.setObjectName("statusLabel")
        layout.addWidget(self.status)

        btn_row = QHBoxLayout()
        btn_row.addStretch()
        save_btn = QPushButton("Save")
        save_btn.clicked.connect(self._on_save)
        cancel_btn = QPushButton("Cancel")
        cancel_btn.setObjectName("secondary")
        cancel_btn.clicked.connect(self.reject)
        btn_row.addWidget(save_btn)
        btn_row.addWidget(cancel_btn)
        layout.addLayout(btn_row)

    def _date_value(self) -> date | None:
        if not self.dob_known.isChecked():
            return None
        qd = self.dob.date()
        return date(qd.year(), qd.month(), qd.day())

    def _on_save(self) -> None:
        clear_status(self.status)
        try:
            request = PatientCreateRequest(
                first_name=self.first_name.text(),
                last_name=self.last_name.text(),
                gender=self.gender.currentData(),
                date_of_birth=self._date_value(),
            )
        except ValidationError:
            set_status(self.status, "First and last name are required.", "error")
            return
        try:
            self.created = self.service.create_patient(request)
        except Exception as exc:  # noqa: BLE001
            QMessageBox.critical(self, "Error", str(exc))
            return
        self.accept()
