"""IvSedationWizard: five-step IV sedation flow chart dialog.

Left column shows the step indicator, the centre a QStackedWidget with one
StepPage per step, the bottom bar navigation and the save pill.
"""
from __future__ import annotations

import logging
from typing import Any

from PySide6.QtCore import Qt, QTimer, Signal
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSizePolicy,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from sedation_chart.application.services.iv_sedation_service import IvSedationService
from sedation_chart.application.services.iv_sedation_session import IvSedationFormSession
from sedation_chart.config import settings
from sedation_chart.domain.models.iv_sedation import IV_SEDATION_STEP_COUNT, IV_SEDATION_STEP_TITLES, PatientContext
from sedation_chart.ui.iv_sedation.monitoring_dialog import MonitoringEntryDialog
from sedation_chart.ui.iv_sedation.review_dialog import ReviewDialog
from sedation_chart.ui.iv_sedation.step_page import StepPage
from sedation_chart.ui.widgets.async_task import SerialDispatcher
from sedation_chart.ui.widgets.notifications import show_save_status
from sedation_chart.ui.widgets.toast import QtNotifier

logger = logging.getLogger(__name__)


class IvSedationWizard(QDialog):
    save_state_changed = Signal()
    records_changed = Signal()

    def __init__(
        self,
        service: IvSedationService,
        patient: PatientContext,
        record: dict[str, Any] | None = None,
        records: list[dict[str, Any]] | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._closing = False
        self.setWindowTitle(f"IV Sedation - {patient.display_name}")
        self.setMinimumSize(1000, 720)
        self.setWindowFlag(Qt.WindowType.WindowMaximizeButtonHint, True)

        self._notifier = QtNotifier(self)
        self._dispatcher = SerialDispatcher(self)
        self._debounce = QTimer(self)
        self._debounce.setSingleShot(True)
        self._debounce.setInterval(settings.autosave_debounce_ms)
        self._debounce.timeout.connect(self._flush)
        self.save_state_changed.connect(self._refresh_save_pill)

        session_kwargs: dict[str, Any] = {
            "records": records,
            "notifier": self._notifier,
            "dispatcher": self._dispatcher,
            "catalog": service.catalog,
            "immediate_save": False,
            "on_pending": self._debounce.start,
            "on_save_state_changed": self.save_state_changed.emit,
            "on_step_changed": self._show_step,
            "on_review_requested": lambda: QTimer.singleShot(0, self._open_review),
            "on_submitted": self._on_submitted,
        }
        if record is not None:
            self.session = IvSedationFormSession.from_record(service.store, record, patient=patient, **session_kwargs)
        else:
            self.session = IvSedationFormSession(service.store, patient=patient, **session_kwargs)

        outer = QHBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)
        outer.setSpacing(0)
        outer.addWidget(self._build_step_panel())

        right_frame = QFrame()
        right_lay = QVBoxLayout(right_frame)
        right_lay.setContentsMargins(0, 0, 0, 0)
        right_lay.setSpacing(0)
        outer.addWidget(right_frame, 1)

        self._stack = QStackedWidget()
        right_lay.addWidget(self._stack, 1)
        self._pages: list[StepPage] = []
        for step in range(1, IV_SEDATION_STEP_COUNT + 1):
            page = StepPage(step, self.session)
            page.changed.connect(self._update_step_indicator)
            page.add_entry_requested.connect(self._add_flow_entry)
            page.edit_entry_requested.connect(self._edit_flow_entry)
            self._pages.append(page)
            self._stack.addWidget(page)

        right_lay.addWidget(self._build_nav_bar())
        self._show_step(self.session.current_step)
        self._refresh_save_pill()

    # Layout

    def _build_step_panel(self) -> QFrame:
        step_panel = QFrame()
        step_panel.setObjectName("wizardStepPanel")
        step_panel.setFixedWidth(210)
        sp_lay = QVBoxLayout(step_panel)
        sp_lay.setContentsMargins(16, 28, 16, 20)
        sp_lay.setSpacing(0)

        hdr_title = QLabel("IV Sedation")
        hdr_title.setObjectName("sectionTitle")
        hdr_title.setAlignment(Qt.AlignmentFlag.AlignHCenter)
        sp_lay.addWidget(hdr_title)
        patient_label = QLabel(self.session.patient.display_name)
        patient_label.setObjectName("muted")
        patient_label.setAlignment(Qt.AlignmentFlag.AlignHCenter)
        sp_lay.addWidget(patient_label)
        sp_lay.addSpacing(24)

        self._step_badges: list[QPushButton] = []
        self._step_name_labels: list[QLabel] = []
        for step, name in enumerate(IV_SEDATION_STEP_TITLES, start=1):
            row = QHBoxLayout()
            row.setContentsMargins(0, 0, 0, 0)
            row.setSpacing(12)
            badge = QPushButton(str(step))
            badge.setObjectName("stepBadge")
            badge.setCursor(Qt.CursorShape.PointingHandCursor)
            badge.clicked.connect(lambda _checked=False, s=step: self._jump_to(s))
            self._step_badges.append(badge)
            row.addWidget(badge)

            name_lbl = QLabel(name)
            name_lbl.setObjectName("stepName")
            name_lbl.setWordWrap(True)
            name_lbl.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred)
            self._step_name_labels.append(name_lbl)
            row.addWidget(name_lbl, 1)
            sp_lay.addLayout(row)
            if step < IV_SEDATION_STEP_COUNT:
                sp_lay.addSpacing(18)

        sp_lay.addStretch(1)
        return step_panel

    def _build_nav_bar(self) -> QFrame:
        nav_bar = QFrame()
        nav_bar.setObjectName("wizardNavBar")
        nav_bar.setFixedHeight(56)
        nav_lay = QHBoxLayout(nav_bar)
        nav_lay.setContentsMargins(20, 8, 20, 8)
        nav_lay.setSpacing(10)

        self._btn_back = QPushButton("Back")
        self._btn_back.setObjectName("secondary")
        self._btn_back.setFixedWidth(100)
        self._btn_back.clicked.connect(self._go_back)

        self._btn_next = QPushButton("Next")
        self._btn_next.setFixedWidth(100)
        self._btn_next.clicked.connect(self._go_next)

        self._save_pill = QLabel()

        btn_close = QPushButton("Close")
        btn_close.setObjectName("ghost")
        btn_close.setFixedWidth(90)
        btn_close.clicked.connect(self.reject)

        nav_lay.addWidget(self._btn_back)
        nav_lay.addWidget(self._btn_next)
        nav_lay.addStretch(1)
        nav_lay.addWidget(self._save_pill)
        nav_lay.addWidget(btn_close)
        return nav_bar

    # Navigation

    def _go_back(self) -> None:
        self.session.previous_step()

    def _go_next(self) -> None:
        self.session.next_step()

    def _jump_to(self, step: int) -> None:
        self.session.jump_to(step)

    def _show_step(self, step: int) -> None:
        page = self._pages[step - 1]
        page.refresh()
        self._stack.setCurrentWidget(page)
        self._btn_back.setEnabled(step > 1)
        self._btn_next.setText("Review" if step == IV_SEDATION_STEP_COUNT else "Next")
        self._update_step_indicator()

    def _update_step_indicator(self) -> None:
        completion = self.session.completion()
        current = self.session.current_step
        for step, (badge, name_lbl) in enumerate(
            zip(self._step_badges, self._step_name_labels, strict=False), start=1
        ):
            if step == current:
                state = "active"
            elif completion.get(step):
                state = "done"
            else:
                state = "pending"
            badge.setText("✓" if state == "done" else str(step))
            for widget in (badge, name_lbl):
                widget.setProperty("stepState", state)
                widget.style().unpolish(widget)
                widget.style().polish(widget)

    # Monitoring log

    def _add_flow_entry(self) -> None:
        self.session.monitoring.begin_add()
        self._run_monitoring_dialog()

    def _edit_flow_entry(self, entry_id: str) -> None:
        self.session.monitoring.begin_edit(entry_id)
        self._run_monitoring_dialog()

    def _run_monitoring_dialog(self) -> None:
        dialog = MonitoringEntryDialog(self.session.monitoring, self)
        if dialog.exec() == QDialog.DialogCode.Accepted:
            self._pages[3].refresh()
            self._update_step_indicator()

    # Review and submit

    def _open_review(self) -> None:
        projection = self.session.enter_review()
        dialog = ReviewDialog(projection, self)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            self.session.back_to_edit()
            return
        self._debounce.stop()
        self._dispatcher.wait()
        self._notifier.parent_widget = self.parentWidget() or self
        if self.session.submit() is None:
            self._notifier.parent_widget = self
            self.session.back_to_edit()

    def _on_submitted(self, record: dict[str, Any]) -> None:
        logger.info("IV sedation form %s submitted from wizard", record.get("id"))
        self.records_changed.emit()
        self._closing = True
        self.accept()

    # Saving

    def _flush(self) -> None:
        self.session.flush()

    def _refresh_save_pill(self) -> None:
        gateway = self.session.gateway
        status = gateway.save_status
        show_save_status(self._save_pill, status, gateway.last_saved_label())
        if status == "error":
            QTimer.singleShot(int(gateway.error_display_seconds * 1000) + 50, self._refresh_save_pill)
        elif status == "saved":
            self.records_changed.emit()

    def _shutdown(self) -> None:
        if self._closing:
            return
        self._closing = True
        self._debounce.stop()
        self.session.flush()
        self._dispatcher.wait()
        self._notifier.parent_widget = self.parentWidget() or self
        self.session.close()
        self.records_changed.emit()

    def reject(self) -> None:
        self._shutdown()
        super().reject()

    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802
        self._shutdown()
        super().closeEvent(event)
