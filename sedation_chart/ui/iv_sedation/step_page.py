from __future__ import annotations

from collections.abc import Callable
from datetime import date

from PySide6.QtCore import Signal
from PySide6.QtGui import QIntValidator
from PySide6.QtWidgets import (
    QAbstractItemView,
    QButtonGroup,
    QCheckBox,
    QComboBox,
    QFormLayout,
    QFrame,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QRadioButton,
    QScrollArea,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from sedation_chart.application.services.iv_sedation_session import IvSedationFormSession
from sedation_chart.domain.models.iv_sedation import (
    IV_SEDATION_STEP_TITLES,
    NO,
    OTHER_OPTION,
    OTHER_TEXT_FIELDS,
    YES,
)
from sedation_chart.domain.rules.iv_sedation_calculations import current_time_hhmm, is_obese
from sedation_chart.ui.iv_sedation.field_specs import STEP_FIELDS, FieldSpec, is_visible, required_field_names

FLOW_COLUMNS = ("Time", "BP", "HR", "RR", "SpO2", "Medications")


class StepPage(QWidget):
    """One wizard step built from its field specs and bound to the form session."""

    changed = Signal()
    add_entry_requested = Signal()
    edit_entry_requested = Signal(str)

    def __init__(self, step: int, session: IvSedationFormSession, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.step = step
        self.session = session
        self._specs = STEP_FIELDS[step]
        self._required = required_field_names(step)
        self._row_widgets: dict[str, QWidget] = {}
        self._loaders: list[Callable[[], None]] = []
        self._checkboxes: dict[str, dict[str, QCheckBox]] = {}
        self._other_edits: dict[str, QLineEdit] = {}
        self._bmi_label: QLabel | None = None
        self._flow_table: QTableWidget | None = None

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        box = QGroupBox(f"Step {step}: {IV_SEDATION_STEP_TITLES[step - 1]}")
        self._form = QFormLayout(box)
        self._form.setContentsMargins(20, 16, 20, 16)
        self._form.setVerticalSpacing(10)
        self._form.setHorizontalSpacing(16)
        for spec in self._specs:
            self._add_row(spec)

        self.scroll = QScrollArea()
        self.scroll.setWidgetResizable(True)
        self.scroll.setFrameShape(QFrame.Shape.NoFrame)
        self.scroll.setWidget(box)
        root.addWidget(self.scroll)

        self.load()

    # Building

    def _add_row(self, spec: FieldSpec) -> None:
        builder = getattr(self, f"_build_{spec.kind}")
        widget: QWidget = builder(spec)
        label = spec.label + (" *" if spec.name in self._required else "")
        self._form.addRow(label, widget)
        self._row_widgets[spec.name] = widget
        other_field = OTHER_TEXT_FIELDS.get(spec.name)
        if other_field and OTHER_OPTION in spec.options:
            other_edit = QLineEdit()
            other_edit.setPlaceholderText("Please specify")
            other_edit.textEdited.connect(lambda text, name=other_field: self._set(name, text))
            self._other_edits[spec.name] = other_edit
            self._form.addRow("", other_edit)
            self._loaders.append(
                lambda edit=other_edit, name=other_field: edit.setText(getattr(self.session.registry, name))
            )

    def _build_readonly(self, spec: FieldSpec) -> QWidget:
        label = QLabel()
        self._loaders.append(lambda: label.setText(str(getattr(self.session.registry, spec.name) or "-")))
        return label

    def _build_text(self, spec: FieldSpec) -> QWidget:
        edit = QLineEdit()
        edit.setPlaceholderText(spec.placeholder)
        edit.textEdited.connect(lambda text: self._set(spec.name, text))
        self._loaders.append(lambda: edit.setText(getattr(self.session.registry, spec.name)))
        return edit

    def _build_integer(self, spec: FieldSpec) -> QWidget:
        edit = self._build_text(spec)
        assert isinstance(edit, QLineEdit)
        edit.setValidator(QIntValidator(0, 999, edit))
        edit.setMaximumWidth(120)
        return edit

    def _build_textarea(self, spec: FieldSpec) -> QWidget:
        edit = QPlainTextEdit()
        edit.setFixedHeight(80)
        edit.textChanged.connect(lambda: self._set(spec.name, edit.toPlainText(), refresh=False))
        self._loaders.append(lambda: edit.setPlainText(getattr(self.session.registry, spec.name)))
        return edit

    def _build_stamped(self, spec: FieldSpec, *, placeholder: str, button_text: str, stamp: Callable[[], str]) -> QWidget:
        container = QWidget()
        row = QHBoxLayout(container)
        row.setContentsMargins(0, 0, 0, 0)
        edit = QLineEdit()
        edit.setPlaceholderText(placeholder)
        edit.setMaximumWidth(140)
        edit.textEdited.connect(lambda text: self._set(spec.name, text.strip()))
        button = QPushButton(button_text)
        button.setObjectName("secondary")

        def _stamp() -> None:
            value = stamp()
            edit.setText(value)
            self._set(spec.name, value)

        button.clicked.connect(_stamp)
        row.addWidget(edit)
        row.addWidget(button)
        row.addStretch(1)
        self._loaders.append(lambda: edit.setText(getattr(self.session.registry, spec.name)))
        return container

    def _build_date(self, spec: FieldSpec) -> QWidget:
        return self._build_stamped(
            spec, placeholder="YYYY-MM-DD", button_text="Today", stamp=lambda: date.today().isoformat()
        )

    def _build_time(self, spec: FieldSpec) -> QWidget:
        return self._build_stamped(spec, placeholder="HH:MM", button_text="Now", stamp=current_time_hhmm)

    def _build_choice(self, spec: FieldSpec) -> QWidget:
        combo = QComboBox()
        combo.addItem("")
        combo.addItems(list(spec.options))
        combo.textActivated.connect(lambda text: self._choose(spec.name, text))

        def _load() -> None:
            value = getattr(self.session.registry, spec.name)
            index = combo.findText(value)
            combo.setCurrentIndex(index if index >= 0 else 0)

        self._loaders.append(_load)
        return combo

    def _build_yes_no(self, spec: FieldSpec) -> QWidget:
        container = QWidget()
        row = QHBoxLayout(container)
        row.setContentsMargins(0, 0, 0, 0)
        group = QButtonGroup(container)
        buttons: dict[str, QRadioButton] = {}
        for value, text in ((YES, "Yes"), (NO, "No")):
            radio = QRadioButton(text)
            radio.toggled.connect(lambda checked, v=value: checked and self._set(spec.name, v))
            group.addButton(radio)
            buttons[value] = radio
            row.addWidget(radio)
        row.addStretch(1)

        def _load() -> None:
            current = getattr(self.session.registry, spec.name)
            group.setExclusive(False)
            for value, radio in buttons.items():
                radio.setChecked(value == current)
            group.setExclusive(True)

        self._loaders.append(_load)
        return container

    def _build_morning_medications(self, spec: FieldSpec) -> QWidget:  # noqa: ARG002
        container = QWidget()
        column = QVBoxLayout(container)
        column.setContentsMargins(0, 0, 0, 0)
        row = QHBoxLayout()
        group = QButtonGroup(container)
        yes_radio = QRadioButton("Yes")
        no_radio = QRadioButton("No")
        group.addButton(yes_radio)
        group.addButton(no_radio)
        row.addWidget(yes_radio)
        row.addWidget(no_radio)
        row.addStretch(1)
        detail = QLineEdit()
        detail.setPlaceholderText("Which medications were taken this morning?")
        column.addLayout(row)
        column.addWidget(detail)

        def _push() -> None:
            if yes_radio.isChecked():
                self.session.set_morning_medications(True, detail.text())
            elif no_radio.isChecked():
                self.session.set_morning_medications(False)
            detail.setVisible(yes_radio.isChecked())
            self.changed.emit()

        yes_radio.toggled.connect(lambda _checked: _push())
        no_radio.toggled.connect(lambda checked: checked and _push())
        detail.textEdited.connect(lambda _text: _push())

        def _load() -> None:
            value = self.session.registry.morning_medications
            for radio in (yes_radio, no_radio):
                radio.blockSignals(True)
            group.setExclusive(False)
            yes_radio.setChecked(value.taken is True)
            no_radio.setChecked(value.taken is False)
            group.setExclusive(True)
            for radio in (yes_radio, no_radio):
                radio.blockSignals(False)
            detail.setText(value.detail)
            detail.setVisible(value.taken is True)

        self._loaders.append(_load)
        return container

    def _build_multi(self, spec: FieldSpec) -> QWidget:
        container = QWidget()
        grid = QGridLayout(container)
        grid.setContentsMargins(0, 0, 0, 0)
        boxes: dict[str, QCheckBox] = {}
        for index, option in enumerate(spec.options):
            checkbox = QCheckBox(option)
            checkbox.clicked.connect(lambda _checked, o=option: self._toggle(spec.name, o))
            grid.addWidget(checkbox, index // spec.columns, index % spec.columns)
            boxes[option] = checkbox
        self._checkboxes[spec.name] = boxes
        return container

    def _build_bmi(self, spec: FieldSpec) -> QWidget:  # noqa: ARG002
        self._bmi_label = QLabel()
        self._bmi_label.setObjectName("bmiValue")
        return self._bmi_label

    def _build_flow_log(self, spec: FieldSpec) -> QWidget:  # noqa: ARG002
        container = QWidget()
        column = QVBoxLayout(container)
        column.setContentsMargins(0, 0, 0, 0)
        table = QTableWidget(0, len(FLOW_COLUMNS))
        table.setHorizontalHeaderLabels(list(FLOW_COLUMNS))
        table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        table.horizontalHeader().setSectionResizeMode(len(FLOW_COLUMNS) - 1, QHeaderView.ResizeMode.Stretch)
        table.setMinimumHeight(180)
        table.cellDoubleClicked.connect(lambda row, _col: self._request_edit(row))
        self._flow_table = table

        buttons = QHBoxLayout()
        add_button = QPushButton("Add Entry")
        add_button.clicked.connect(self.add_entry_requested.emit)
        edit_button = QPushButton("Edit")
        edit_button.setObjectName("secondary")
        edit_button.clicked.connect(lambda: self._request_edit(table.currentRow()))
        remove_button = QPushButton("Remove")
        remove_button.setObjectName("secondary")
        remove_button.clicked.connect(self._remove_selected)
        buttons.addWidget(add_button)
        buttons.addWidget(edit_button)
        buttons.addWidget(remove_button)
        buttons.addStretch(1)

        column.addWidget(table)
        column.addLayout(buttons)
        return container

    # Editing

    def _set(self, field_name: str, value: object, *, refresh: bool = True) -> None:
        # Loaders echo stored values back through widget signals.
        if getattr(self.session.registry, field_name) == value:
            return
        self.session.set_field(field_name, value)
        if refresh:
            self.refresh()
        self.changed.emit()

    def _choose(self, field_name: str, value: str) -> None:
        self.session.set_single_choice(field_name, value)
        self.refresh()
        self.changed.emit()

    def _toggle(self, field_name: str, option: str) -> None:
        self.session.toggle_option(field_name, option)
        self.refresh()
        self.changed.emit()

    def _request_edit(self, row: int) -> None:
        entries = self.session.registry.flow_entries
        if 0 <= row < len(entries):
            self.edit_entry_requested.emit(entries[row].id)

    def _remove_selected(self) -> None:
        table = self._flow_table
        if table is None:
            return
        row = table.currentRow()
        entries = self.session.registry.flow_entries
        if 0 <= row < len(entries):
            self.session.monitoring.remove(entries[row].id)
            self.refresh()
            self.changed.emit()

    # State

    def load(self) -> None:
        for loader in self._loaders:
            loader()
        self.refresh()

    def refresh(self) -> None:
        registry = self.session.registry
        for spec in self._specs:
            widget = self._row_widgets[spec.name]
            visible = is_visible(spec, registry)
            self._form.setRowVisible(widget, visible)
            other_edit = self._other_edits.get(spec.name)
            if other_edit is not None:
                selected = getattr(registry, spec.name)
                has_other = OTHER_OPTION in selected if isinstance(selected, list) else selected == OTHER_OPTION
                self._form.setRowVisible(other_edit, visible and has_other)
                if not has_other and other_edit.text():
                    other_edit.clear()

        for field_name, boxes in self._checkboxes.items():
            selected = getattr(registry, field_name)
            for option, checkbox in boxes.items():
                checkbox.setChecked(option in selected)
                checkbox.setEnabled(self.session.is_option_enabled(field_name, option))

        if self._bmi_label is not None:
            bmi = self.session.bmi()
            text = f"{bmi:.2f} ({self.session.bmi_category()})" if bmi is not None else self.session.bmi_category()
            self._bmi_label.setText(text)
            self._bmi_label.setProperty("obese", "true" if is_obese(bmi) else "false")
            self._bmi_label.style().unpolish(self._bmi_label)
            self._bmi_label.style().polish(self._bmi_label)

        if self._flow_table is not None:
            self._fill_flow_table()

    def _fill_flow_table(self) -> None:
        table = self._flow_table
        assert table is not None
        entries = self.session.registry.flow_entries
        table.setRowCount(len(entries))
        for row, entry in enumerate(entries):
            medications = ", ".join(self.session.monitoring.medication_labels(entry))
            values = (entry.time, entry.bp, entry.heart_rate, entry.rr, entry.spo2, medications)
            for column, value in enumerate(values):
                table.setItem(row, column, QTableWidgetItem(value))
