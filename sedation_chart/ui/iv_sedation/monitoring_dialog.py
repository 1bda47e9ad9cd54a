from __future__ import annotations

from PySide6.QtGui import QIntValidator
from PySide6.QtWidgets import (
    QCheckBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from sedation_chart.application.services.monitoring_log_editor import MonitoringLogEditor


class MonitoringEntryDialog(QDialog):
    """Edits the editor's open buffer; accept confirms it, reject cancels it."""

    def __init__(self, editor: MonitoringLogEditor, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        if editor.buffer is None:
            raise ValueError("No monitoring entry is being edited")
        self.editor = editor
        self.buffer = editor.buffer
        self.setWindowTitle("Edit Monitoring Entry" if editor.editing_id else "Add Monitoring Entry")
        self.setMinimumWidth(520)

        layout = QVBoxLayout(self)
        form = QFormLayout()

        time_row = QHBoxLayout()
        self.time_edit = QLineEdit(self.buffer.time)
        self.time_edit.setPlaceholderText("HH:MM")
        self.time_edit.setMaximumWidth(100)
        self.time_edit.textEdited.connect(self._on_time_edited)
        now_button = QPushButton("Now")
        now_button.setObjectName("secondary")
        now_button.clicked.connect(self._stamp_now)
        time_row.addWidget(self.time_edit)
        time_row.addWidget(now_button)
        time_row.addStretch(1)
        form.addRow("Time *", time_row)

        bp_row = QHBoxLayout()
        self.systolic_edit = self._vital_edit(self.buffer.systolic, "systolic")
        self.diastolic_edit = self._vital_edit(self.buffer.diastolic, "diastolic")
        bp_row.addWidget(self.systolic_edit)
        bp_row.addWidget(QLabel("/"))
        bp_row.addWidget(self.diastolic_edit)
        bp_row.addStretch(1)
        form.addRow("BP", bp_row)
        form.addRow("HR", self._vital_edit(self.buffer.heart_rate, "heart_rate"))
        form.addRow("RR", self._vital_edit(self.buffer.rr, "rr"))
        form.addRow("SpO2", self._vital_edit(self.buffer.spo2, "spo2"))
        layout.addLayout(form)

        self.medication_boxes: dict[str, QCheckBox] = {}
        for category, medications in editor.catalog.by_category().items():
            group = QGroupBox(category)
            grid = QGridLayout(group)
            for index, medication in enumerate(medications):
                checkbox = QCheckBox(medication.display_name)
                checkbox.setChecked(medication.id in self.buffer.medications)
                checkbox.clicked.connect(lambda _checked, mid=medication.id: self.editor.toggle_medication(mid))
                grid.addWidget(checkbox, index // 2, index % 2)
                self.medication_boxes[medication.id] = checkbox
            layout.addWidget(group)

        self.buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)
        layout.addWidget(self.buttons)
        self._update_ok()

    def _vital_edit(self, value: str, attribute: str) -> QLineEdit:
        edit = QLineEdit(value)
        edit.setValidator(QIntValidator(0, 400, edit))
        edit.setMaximumWidth(80)
        edit.textEdited.connect(lambda text: setattr(self.buffer, attribute, text))
        return edit

    def _on_time_edited(self, text: str) -> None:
        self.buffer.time = text
        self._update_ok()

    def _stamp_now(self) -> None:
        self.time_edit.setText(self.editor.stamp_current_time())
        self._update_ok()

    def _update_ok(self) -> None:
        ok_button = self.buttons.button(QDialogButtonBox.StandardButton.Ok)
        ok_button.setEnabled(self.buffer.can_confirm)

    def accept(self) -> None:
        if self.editor.confirm() is None:
            return
        super().accept()

    def reject(self) -> None:
        self.editor.cancel()
        super().reject()
