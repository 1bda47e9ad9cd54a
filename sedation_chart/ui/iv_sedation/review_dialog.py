from __future__ import annotations

from PySide6.QtWidgets import (
    QDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QPushButton,
    QScrollArea,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from sedation_chart.application.services.review_submit import ReviewProjection
from sedation_chart.ui.iv_sedation.step_page import FLOW_COLUMNS


class ReviewDialog(QDialog):
    """Read-only summary of the form; accept means "Submit", reject means "Back to edit"."""

    def __init__(
        self, projection: ReviewProjection, parent: QWidget | None = None, *, read_only: bool = False
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Review IV Sedation Form")
        self.resize(760, 680)

        layout = QVBoxLayout(self)
        title = QLabel(f"{projection.patient_name} - {projection.sedation_date or 'no date'}")
        title.setObjectName("sectionTitle")
        layout.addWidget(title)

        body = QWidget()
        body_layout = QVBoxLayout(body)
        for section in projection.sections:
            box = QGroupBox(section.title)
            form = QFormLayout(box)
            for label, value in section.rows:
                value_label = QLabel(value)
                value_label.setWordWrap(True)
                form.addRow(f"{label}:", value_label)
            body_layout.addWidget(box)

        if projection.durations:
            box = QGroupBox("Durations")
            form = QFormLayout(box)
            for label, value in projection.durations.items():
                form.addRow(f"{label}:", QLabel(value))
            body_layout.addWidget(box)

        if projection.flow_rows:
            box = QGroupBox("Monitoring Log")
            box_layout = QVBoxLayout(box)
            table = QTableWidget(len(projection.flow_rows), len(FLOW_COLUMNS))
            table.setHorizontalHeaderLabels(list(FLOW_COLUMNS))
            table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
            table.horizontalHeader().setSectionResizeMode(len(FLOW_COLUMNS) - 1, QHeaderView.ResizeMode.Stretch)
            for row, item in enumerate(projection.flow_rows):
                values = (item.time, item.bp, item.heart_rate, item.rr, item.spo2, item.medications)
                for column, value in enumerate(values):
                    table.setItem(row, column, QTableWidgetItem(value))
            box_layout.addWidget(table)
            body_layout.addWidget(box)
        body_layout.addStretch(1)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(body)
        layout.addWidget(scroll, 1)

        buttons = QHBoxLayout()
        self.back_button = QPushButton("Back to Edit")
        self.back_button.setObjectName("secondary")
        self.back_button.clicked.connect(self.reject)
        self.submit_button = QPushButton("Submit")
        self.submit_button.clicked.connect(self.accept)
        if read_only:
            self.setWindowTitle("IV Sedation Form")
            self.back_button.setText("Close")
            self.submit_button.hide()
        buttons.addStretch(1)
        buttons.addWidget(self.back_button)
        buttons.addWidget(self.submit_button)
        layout.addLayout(buttons)
