# ui_dialogs.py
from __future__ import annotations

from typing import Any, Callable, Optional

from PyQt6.QtCore import QDate, pyqtSignal
from PyQt6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QGridLayout,
    QLabel,
    QLineEdit,
    QComboBox,
    QTextEdit,
    QDateEdit,
    QDoubleSpinBox,
    QDialogButtonBox,
    QSizePolicy,
    QWidget,
)

from models import ServiceLog, ServiceType, ValidationResult
from ui_styles import ERROR_TEXT_CSS

DATE_FMT = "yyyy-MM-dd"

FIELD_LABELS = {
    "provider_id": "Provider ID",
    "service_order": "Service Order",
    "car_id": "Car ID",
    "odometer": "Odometer (mi)",
    "engine_hours": "Engine Hours",
    "start_date": "Start Date",
    "end_date": "End Date",
    "type": "Service Type",
    "service_description": "Service Description",
}


def _to_qdate(value: Optional[str]) -> QDate:
    d = QDate.fromString(value or "", DATE_FMT)
    return d if d.isValid() else QDate.currentDate()


class ServiceLogFields(QWidget):
    """
    Grid of service log inputs shared by the draft form and the edit dialog.

    ``changed`` is emitted with (field name, new value) on user edits only;
    ``set_values`` never emits.
    """

    changed = pyqtSignal(str, object)

    def __init__(self, parent=None):
        super().__init__(parent)

        grid = QGridLayout(self)
        grid.setContentsMargins(0, 0, 0, 0)
        grid.setHorizontalSpacing(12)
        grid.setVerticalSpacing(6)

        self.provider_edit = QLineEdit()
        self.order_edit = QLineEdit()
        self.car_edit = QLineEdit()

        self.odometer_spin = QDoubleSpinBox()
        self.odometer_spin.setRange(0, 10_000_000)
        self.odometer_spin.setDecimals(0)
        self.engine_hours_spin = QDoubleSpinBox()
        self.engine_hours_spin.setRange(0, 1_000_000)
        self.engine_hours_spin.setDecimals(1)

        self.start_edit = QDateEdit()
        self.end_edit = QDateEdit()
        for w in (self.start_edit, self.end_edit):
            w.setDisplayFormat(DATE_FMT)
            w.setCalendarPopup(True)

        self.type_combo = QComboBox()
        for t in ServiceType:
            self.type_combo.addItem(t.label, t.value)

        self.description_edit = QTextEdit()
        self.description_edit.setAcceptRichText(False)
        self.description_edit.setMinimumHeight(90)
        self.description_edit.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)

        self._errors: dict[str, QLabel] = {}
        layout = [
            ("provider_id", self.provider_edit, 0, 0),
            ("service_order", self.order_edit, 0, 1),
            ("car_id", self.car_edit, 0, 2),
            ("odometer", self.odometer_spin, 2, 0),
            ("engine_hours", self.engine_hours_spin, 2, 1),
            ("type", self.type_combo, 2, 2),
            ("start_date", self.start_edit, 4, 0),
            ("end_date", self.end_edit, 4, 1),
        ]
        for name, widget, row, col in layout:
            grid.addWidget(QLabel(FIELD_LABELS[name] + ":"), row, col * 2)
            grid.addWidget(widget, row, col * 2 + 1)
            err = QLabel("")
            err.setStyleSheet(ERROR_TEXT_CSS)
            err.hide()
            grid.addWidget(err, row + 1, col * 2 + 1)
            self._errors[name] = err

        grid.addWidget(QLabel(FIELD_LABELS["service_description"] + ":"), 6, 0)
        grid.addWidget(self.description_edit, 6, 1, 1, 5)
        for col in (1, 3, 5):
            grid.setColumnStretch(col, 1)

        self._widgets: dict[str, QWidget] = {name: w for name, w, _, _ in layout}
        self._widgets["service_description"] = self.description_edit

        self.provider_edit.textEdited.connect(lambda v: self.changed.emit("provider_id", v))
        self.order_edit.textEdited.connect(lambda v: self.changed.emit("service_order", v))
        self.car_edit.textEdited.connect(lambda v: self.changed.emit("car_id", v))
        self.odometer_spin.valueChanged.connect(lambda v: self.changed.emit("odometer", v))
        self.engine_hours_spin.valueChanged.connect(lambda v: self.changed.emit("engine_hours", v))
        self.start_edit.dateChanged.connect(lambda d: self.changed.emit("start_date", d.toString(DATE_FMT)))
        self.end_edit.dateChanged.connect(lambda d: self.changed.emit("end_date", d.toString(DATE_FMT)))
        self.type_combo.currentIndexChanged.connect(
            lambda _i: self.changed.emit("type", self.type_combo.currentData())
        )
        self.description_edit.textChanged.connect(
            lambda: self.changed.emit("service_description", self.description_edit.toPlainText())
        )

    def values(self) -> dict[str, Any]:
        return {
            "provider_id": self.provider_edit.text().strip(),
            "service_order": self.order_edit.text().strip(),
            "car_id": self.car_edit.text().strip(),
            "odometer": self.odometer_spin.value(),
            "engine_hours": self.engine_hours_spin.value(),
            "start_date": self.start_edit.date().toString(DATE_FMT),
            "end_date": self.end_edit.date().toString(DATE_FMT),
            "type": self.type_combo.currentData(),
            "service_description": self.description_edit.toPlainText().rstrip(),
        }

    def set_values(self, values: dict[str, Any]) -> None:
        for w in self._widgets.values():
            w.blockSignals(True)
        try:
            # only touch widgets whose value differs, so the caret stays put while typing
            for name, edit in (
                ("provider_id", self.provider_edit),
                ("service_order", self.order_edit),
                ("car_id", self.car_edit),
            ):
                text = str(values.get(name) or "")
                if edit.text() != text:
                    edit.setText(text)

            for name, spin in (("odometer", self.odometer_spin), ("engine_hours", self.engine_hours_spin)):
                try:
                    num = float(values.get(name) or 0)
                except (TypeError, ValueError):
                    num = 0.0
                if spin.value() != num:
                    spin.setValue(num)

            for name, dedit in (("start_date", self.start_edit), ("end_date", self.end_edit)):
                qd = _to_qdate(values.get(name))
                if dedit.date() != qd:
                    dedit.setDate(qd)

            t = values.get("type") or ServiceType.PLANNED
            idx = self.type_combo.findData(ServiceType(t).value)
            if idx >= 0 and idx != self.type_combo.currentIndex():
                self.type_combo.setCurrentIndex(idx)

            desc = str(values.get("service_description") or "")
            if self.description_edit.toPlainText() != desc:
                self.description_edit.setPlainText(desc)
        finally:
            for w in self._widgets.values():
                w.blockSignals(False)

    def show_errors(self, errors: dict[str, str]) -> None:
        for name, label in self._errors.items():
            msg = errors.get(name, "")
            label.setText(msg)
            label.setVisible(bool(msg))
            widget = self._widgets[name]
            widget.setProperty("invalid", "true" if msg else "false")
            widget.style().unpolish(widget)
            widget.style().polish(widget)


class EditServiceLogDialog(QDialog):
    """
    Dialog for editing a finalized service log.
    Values are validated before the dialog accepts; Delete closes with
    ``DELETE_RESULT``.
    """

    DELETE_RESULT = 2

    def __init__(
        self,
        log: ServiceLog,
        validator: Callable[[dict[str, Any]], ValidationResult],
        parent=None,
    ):
        super().__init__(parent)
        self.setWindowTitle("Edit Service Log")
        self._validator = validator
        self.result_value: Optional[dict[str, Any]] = None

        # ---- Size & behavior ----
        self.setMinimumSize(760, 460)
        self.setSizeGripEnabled(True)

        root = QVBoxLayout(self)
        root.setContentsMargins(16, 16, 16, 16)
        root.setSpacing(12)

        meta = QLabel(f"Created: {log.created_at}    Updated: {log.updated_at}")
        meta.setStyleSheet("color: #bdbdbd;")
        root.addWidget(meta)

        self.fields = ServiceLogFields(self)
        self.fields.set_values(log.to_dict())
        root.addWidget(self.fields, stretch=1)

        # =====================
        # Buttons
        # =====================
        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Save
            | QDialogButtonBox.StandardButton.Cancel
        )
        btn_delete = buttons.addButton("Delete", QDialogButtonBox.ButtonRole.DestructiveRole)
        btn_delete.setObjectName("danger")
        btn_delete.clicked.connect(lambda _checked=False: self.done(self.DELETE_RESULT))
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)

        root.addWidget(buttons)
        self.fields.provider_edit.setFocus()

    def accept(self) -> None:
        result = self._validator(self.fields.values())
        if not result.ok:
            self.fields.show_errors(result.errors)
            return
        self.result_value = self.get_values()
        super().accept()

    def get_values(self) -> dict[str, Any]:
        return self.fields.values()
