# main.py
from __future__ import annotations

import logging
import sys
from typing import Any, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QColor, QKeySequence
from PyQt6.QtWidgets import (
    QDialog,
    QApplication,
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QGroupBox,
    QComboBox,
    QLineEdit,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QHeaderView,
    QMessageBox,
    QScrollArea,
)

from config import load_settings
from context import AppContext
from form import ServiceLogFormModel
from models import ServiceLog, ServiceType
from scheduling import QtScheduler
from schema import validate_service_log
from ui_dialogs import EditServiceLogDialog, ServiceLogFields
from ui_styles import DARK_QSS, MUTED_TEXT_CSS, STATUS_SAVED_CSS, STATUS_SAVING_CSS, TYPE_COLORS
from views import ROWS_PER_PAGE_OPTIONS, FilteredLogsSelector, TableViewState

log = logging.getLogger(__name__)

NEW_DRAFT = "__new__"

# (header, attribute, sort key or None)
COLUMNS = [
    ("Provider ID", "provider_id", "provider_id"),
    ("Service Order", "service_order", "service_order"),
    ("Car ID", "car_id", None),
    ("Odometer", "odometer", None),
    ("Engine Hours", "engine_hours", None),
    ("Start Date", "start_date", "start_date"),
    ("End Date", "end_date", "end_date"),
    ("Type", "type", None),
]


def _confirm(parent: QWidget, title: str, text: str) -> bool:
    resp = QMessageBox.question(
        parent,
        title,
        text,
        QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
    )
    return resp == QMessageBox.StandardButton.Yes


def _format_number(value: Any) -> str:
    try:
        num = float(value)
    except (TypeError, ValueError):
        return str(value)
    return f"{num:g}"


# -----------------------------
# Main Window
# -----------------------------

class ServiceLogsWindow(QMainWindow):
    def __init__(self, ctx: AppContext):
        super().__init__()
        self.setWindowTitle("Service Logbook")
        self.setMinimumSize(1120, 780)

        self.ctx = ctx
        self.form = ServiceLogFormModel(on_change=self._on_form_changed)
        self.view_state = TableViewState(rows_per_page=ctx.settings.rows_per_page)
        self.selector = FilteredLogsSelector()

        self._form_draft_id: Optional[str] = None
        self._rendered_logs: Optional[tuple[ServiceLog, ...]] = None
        self._page_rows: list[ServiceLog] = []

        self._build_actions_and_menu()
        self._build_ui()

        self._unsubscribe = ctx.subscribe(self._on_state_changed)
        self._load_active_draft()
        self.refresh_drafts()
        self.refresh_table()
        self.statusBar().showMessage("Ready")

    # ---------------- Menu ----------------

    def _build_actions_and_menu(self) -> None:
        self.act_save_draft = QAction("Save Draft", self)
        self.act_save_draft.setShortcut(QKeySequence("Ctrl+S"))
        self.act_save_draft.triggered.connect(self.save_draft)

        self.act_promote = QAction("Create Service Log", self)
        self.act_promote.setShortcut(QKeySequence("Ctrl+Return"))
        self.act_promote.triggered.connect(self.promote_draft)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

        self.act_new_draft = QAction("New Draft", self)
        self.act_new_draft.setShortcut(QKeySequence("Ctrl+N"))
        self.act_new_draft.triggered.connect(self.new_draft)

        self.act_delete_draft = QAction("Delete Draft", self)
        self.act_delete_draft.triggered.connect(self.delete_draft)

        self.act_clear_drafts = QAction("Clear All Drafts", self)
        self.act_clear_drafts.setShortcut(QKeySequence("Ctrl+L"))
        self.act_clear_drafts.triggered.connect(self.clear_drafts)

        self.act_delete_log = QAction("Delete Selected Log", self)
        self.act_delete_log.setShortcut(QKeySequence(Qt.Key.Key_Delete))
        self.act_delete_log.triggered.connect(self.delete_selected_log)

        mb = self.menuBar()
        m_file = mb.addMenu("File")
        m_file.addAction(self.act_save_draft)
        m_file.addAction(self.act_promote)
        m_file.addSeparator()
        m_file.addAction(self.act_exit)

        m_edit = mb.addMenu("Edit")
        m_edit.addAction(self.act_new_draft)
        m_edit.addAction(self.act_delete_draft)
        m_edit.addAction(self.act_clear_drafts)
        m_edit.addSeparator()
        m_edit.addAction(self.act_delete_log)

    # ---------------- UI ----------------

    def _build_ui(self) -> None:
        # Central + Scroll Area (minimized window stays usable)
        central = QWidget()
        self.setCentralWidget(central)
        central_layout = QVBoxLayout(central)
        central_layout.setContentsMargins(0, 0, 0, 0)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        central_layout.addWidget(scroll)

        content = QWidget()
        scroll.setWidget(content)
        content.setMinimumWidth(980)

        root = QVBoxLayout(content)
        root.setContentsMargins(16, 16, 16, 16)
        root.setSpacing(12)

        title = QLabel("Service Logbook")
        title.setStyleSheet("font-size: 22px; font-weight: 700;")
        subtitle = QLabel("Drafts save automatically. Double-click a log to edit it.")
        subtitle.setStyleSheet(MUTED_TEXT_CSS)
        root.addWidget(title)
        root.addWidget(subtitle)

        # -------- Draft form --------
        form_box = QGroupBox("Service Log Draft")
        form_layout = QVBoxLayout(form_box)

        draft_row = QHBoxLayout()
        draft_row.addWidget(QLabel("Draft:"))
        self.draft_combo = QComboBox()
        self.draft_combo.setMinimumWidth(320)
        self.draft_combo.activated.connect(self._on_draft_selected)
        draft_row.addWidget(self.draft_combo)
        draft_row.addStretch(1)
        self.lbl_status = QLabel("")
        draft_row.addWidget(self.lbl_status)
        form_layout.addLayout(draft_row)

        self.fields = ServiceLogFields()
        self.fields.changed.connect(self._on_field_changed)
        form_layout.addWidget(self.fields)

        draft_actions = QHBoxLayout()
        btn_new = QPushButton("New Draft")
        btn_new.clicked.connect(self.new_draft)
        draft_actions.addWidget(btn_new)

        btn_save = QPushButton("Save Draft")
        btn_save.clicked.connect(self.save_draft)
        draft_actions.addWidget(btn_save)

        self.btn_delete_draft = QPushButton("Delete Draft")
        self.btn_delete_draft.setObjectName("danger")
        self.btn_delete_draft.clicked.connect(self.delete_draft)
        draft_actions.addWidget(self.btn_delete_draft)

        self.btn_clear_drafts = QPushButton("Clear All Drafts")
        self.btn_clear_drafts.setObjectName("danger")
        self.btn_clear_drafts.clicked.connect(self.clear_drafts)
        draft_actions.addWidget(self.btn_clear_drafts)

        draft_actions.addStretch(1)

        btn_promote = QPushButton("Create Service Log")
        btn_promote.setObjectName("primary")
        btn_promote.clicked.connect(self.promote_draft)
        draft_actions.addWidget(btn_promote)
        form_layout.addLayout(draft_actions)

        root.addWidget(form_box)

        # -------- Search / Filter --------
        filter_row = QHBoxLayout()
        lbl = QLabel("Filter:")
        lbl.setStyleSheet(MUTED_TEXT_CSS)
        filter_row.addWidget(lbl)

        self.filter_edit = QLineEdit()
        self.filter_edit.setPlaceholderText("Search provider, car or service order...")
        self.filter_edit.textChanged.connect(self.apply_filters)
        filter_row.addWidget(self.filter_edit, 1)

        self.filter_type = QComboBox()
        self.filter_type.addItem("All types", "all")
        for t in ServiceType:
            self.filter_type.addItem(t.label, t.value)
        self.filter_type.currentIndexChanged.connect(self.apply_filters)
        filter_row.addWidget(self.filter_type)

        filter_row.addSpacing(12)
        filter_row.addWidget(QLabel("Start from:"))
        self.date_from = QLineEdit()
        self.date_from.setPlaceholderText("YYYY-MM-DD")
        self.date_from.setFixedWidth(110)
        self.date_from.textChanged.connect(self.apply_filters)
        filter_row.addWidget(self.date_from)

        filter_row.addWidget(QLabel("to:"))
        self.date_to = QLineEdit()
        self.date_to.setPlaceholderText("YYYY-MM-DD")
        self.date_to.setFixedWidth(110)
        self.date_to.textChanged.connect(self.apply_filters)
        filter_row.addWidget(self.date_to)

        btn_clear_filter = QPushButton("Clear")
        btn_clear_filter.clicked.connect(self._clear_filters)
        filter_row.addWidget(btn_clear_filter)

        root.addLayout(filter_row)

        # -------- Service logs --------
        self.table = QTableWidget(0, len(COLUMNS))
        self.table.setHorizontalHeaderLabels([c[0] for c in COLUMNS])
        header = self.table.horizontalHeader()
        for i in range(len(COLUMNS)):
            header.setSectionResizeMode(i, QHeaderView.ResizeMode.Stretch)
        header.setSortIndicatorShown(True)
        header.setSectionsClickable(True)
        header.sectionClicked.connect(self._on_header_clicked)
        self.table.verticalHeader().setVisible(False)
        self.table.setSelectionBehavior(QTableWidget.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(QTableWidget.SelectionMode.SingleSelection)
        self.table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        self.table.cellDoubleClicked.connect(self.edit_selected_row)
        self.table.setMinimumHeight(260)
        root.addWidget(self.table, 1)

        # -------- Pagination / Actions --------
        actions = QHBoxLayout()
        btn_del = QPushButton("Delete Selected")
        btn_del.setObjectName("danger")
        btn_del.clicked.connect(self.delete_selected_log)
        actions.addWidget(btn_del)

        actions.addStretch(1)

        actions.addWidget(QLabel("Rows per page:"))
        self.rows_combo = QComboBox()
        for n in ROWS_PER_PAGE_OPTIONS:
            self.rows_combo.addItem(str(n), n)
        self.rows_combo.setCurrentIndex(self.rows_combo.findData(self.view_state.rows_per_page))
        self.rows_combo.currentIndexChanged.connect(self._on_rows_per_page_changed)
        actions.addWidget(self.rows_combo)

        self.lbl_page = QLabel("")
        self.lbl_page.setStyleSheet(MUTED_TEXT_CSS)
        actions.addWidget(self.lbl_page)

        self.btn_prev = QPushButton("<")
        self.btn_prev.setFixedWidth(40)
        self.btn_prev.clicked.connect(lambda: self._go_to_page(self.view_state.page - 1))
        actions.addWidget(self.btn_prev)

        self.btn_next = QPushButton(">")
        self.btn_next.setFixedWidth(40)
        self.btn_next.clicked.connect(lambda: self._go_to_page(self.view_state.page + 1))
        actions.addWidget(self.btn_next)

        root.addLayout(actions)

    # ---------------- State sync ----------------

    def _on_state_changed(self) -> None:
        if self.ctx.drafts.active_draft_id != self._form_draft_id:
            self._load_active_draft()
        self.refresh_drafts()
        if self.ctx.service_logs.logs is not self._rendered_logs:
            self.refresh_table()

    def _load_active_draft(self) -> None:
        self._form_draft_id = self.ctx.drafts.active_draft_id
        self.fields.show_errors({})
        # resetting the form reports the loaded values to autosave as a new baseline
        self.form.reset(self.ctx.drafts.active_draft())

    def _on_form_changed(self, values: dict[str, Any]) -> None:
        self.fields.set_values(values)
        self.ctx.observe_form(values)

    def _on_field_changed(self, name: str, value: Any) -> None:
        if self.ctx.drafts.active_draft_id is None:
            # typing with no draft selected starts one from the current form
            self.ctx.create_draft(self.form.values)
        self.form.set_value(name, value)

    # ---------------- Drafts ----------------

    def refresh_drafts(self) -> None:
        active = self.ctx.drafts.active_draft_id
        self.draft_combo.blockSignals(True)
        try:
            self.draft_combo.clear()
            self.draft_combo.addItem("+ New draft", NEW_DRAFT)
            for item in self.ctx.drafts.list_drafts():
                self.draft_combo.addItem(item.label, item.id)
            idx = self.draft_combo.findData(active) if active else 0
            self.draft_combo.setCurrentIndex(max(idx, 0))
        finally:
            self.draft_combo.blockSignals(False)

        has_drafts = len(self.ctx.drafts) > 0
        self.btn_delete_draft.setEnabled(active is not None)
        self.act_delete_draft.setEnabled(active is not None)
        self.btn_clear_drafts.setEnabled(has_drafts)
        self.act_clear_drafts.setEnabled(has_drafts)
        self.refresh_status()

    def refresh_status(self) -> None:
        status = self.ctx.drafts.active_status()
        if status == "saving":
            self.lbl_status.setText("Saving...")
            self.lbl_status.setStyleSheet(STATUS_SAVING_CSS)
        elif status == "saved":
            self.lbl_status.setText("✔ Draft saved")
            self.lbl_status.setStyleSheet(STATUS_SAVED_CSS)
        else:
            self.lbl_status.setText("")

    def _on_draft_selected(self, index: int) -> None:
        value = self.draft_combo.itemData(index)
        if value == NEW_DRAFT:
            self.new_draft()
        elif value:
            self.ctx.set_active_draft(value)

    def new_draft(self) -> None:
        self.ctx.create_draft()
        self.statusBar().showMessage("New draft created.")

    def save_draft(self) -> None:
        values = self.form.values
        if self.ctx.drafts.active_draft_id is None:
            self.ctx.create_draft(values)
        else:
            self.ctx.save_active_draft(values)
        self.statusBar().showMessage("Draft saved.")

    def delete_draft(self) -> None:
        draft_id = self.ctx.drafts.active_draft_id
        if not draft_id:
            return
        if not _confirm(self, "Confirm", "Delete this draft?"):
            return
        self.ctx.delete_draft(draft_id)
        self.statusBar().showMessage("Draft deleted.")

    def clear_drafts(self) -> None:
        if len(self.ctx.drafts) == 0:
            return
        if not _confirm(self, "Confirm", "Clear all drafts?"):
            return
        self.ctx.clear_all_drafts()
        self.statusBar().showMessage("All drafts cleared.")

    def promote_draft(self) -> None:
        values = self.form.values
        if self.ctx.drafts.active_draft_id is None:
            self.ctx.create_draft(values)

        result = self.ctx.promote_active_draft(values)
        self.fields.show_errors(result.errors)
        if not result.ok:
            self.statusBar().showMessage("Fix the highlighted fields before creating the service log.")
            return
        self.statusBar().showMessage("Service log created.")

    # ---------------- Filtering / Sorting / Paging ----------------

    def _clear_filters(self) -> None:
        for w in (self.filter_edit, self.date_from, self.date_to, self.filter_type):
            w.blockSignals(True)
        self.filter_edit.setText("")
        self.date_from.setText("")
        self.date_to.setText("")
        self.filter_type.setCurrentIndex(0)
        for w in (self.filter_edit, self.date_from, self.date_to, self.filter_type):
            w.blockSignals(False)
        self.apply_filters()

    def apply_filters(self) -> None:
        self.view_state.update_filters(
            search_text=self.filter_edit.text(),
            type=self.filter_type.currentData(),
            start_date_from=self.date_from.text().strip(),
            start_date_to=self.date_to.text().strip(),
        )
        self.refresh_table()

    def _on_header_clicked(self, col: int) -> None:
        key = COLUMNS[col][2]
        if key is None:
            return
        self.view_state.toggle_sort(key)
        self.refresh_table()

    def _on_rows_per_page_changed(self, _index: int) -> None:
        n = self.rows_combo.currentData()
        if n:
            self.view_state.set_rows_per_page(int(n))
            self.refresh_table()

    def _go_to_page(self, page: int) -> None:
        self.view_state.set_page(page)
        self.refresh_table()

    def refresh_table(self) -> None:
        self._rendered_logs = self.ctx.service_logs.logs
        view = self.view_state.render(self._rendered_logs, self.selector)
        self._page_rows = view.rows

        self.table.setRowCount(0)
        for log_item in view.rows:
            self._append_row(log_item)

        sort_col = next(i for i, c in enumerate(COLUMNS) if c[2] == self.view_state.sort_key)
        order = Qt.SortOrder.AscendingOrder if self.view_state.sort_direction == "asc" else Qt.SortOrder.DescendingOrder
        self.table.horizontalHeader().setSortIndicator(sort_col, order)

        if view.total:
            first = view.page * self.view_state.rows_per_page + 1
            last = first + len(view.rows) - 1
            self.lbl_page.setText(f"{first}–{last} of {view.total}")
        else:
            self.lbl_page.setText("No service logs")
        self.btn_prev.setEnabled(view.page > 0)
        self.btn_next.setEnabled(view.page < view.page_count - 1)

    def _append_row(self, item: ServiceLog) -> None:
        row = self.table.rowCount()
        self.table.insertRow(row)
        for col, (_, attr, _) in enumerate(COLUMNS):
            value = getattr(item, attr)
            if attr == "type":
                text = value.label
            elif attr in ("odometer", "engine_hours"):
                text = _format_number(value)
            else:
                text = str(value)
            cell = QTableWidgetItem(text)
            if col == 0:
                cell.setData(Qt.ItemDataRole.UserRole, item.id)  # row -> log id
            if attr == "type":
                cell.setForeground(QColor(TYPE_COLORS[value]))
            if item.service_description:
                cell.setToolTip(item.service_description)
            self.table.setItem(row, col, cell)

    # ---------------- Edit / Delete logs ----------------

    def _log_id_at(self, row: int) -> Optional[str]:
        if row < 0:
            return None
        it = self.table.item(row, 0)
        return it.data(Qt.ItemDataRole.UserRole) if it else None

    def edit_selected_row(self, row: int, col: int) -> None:
        log_id = self._log_id_at(row)
        item = next((x for x in self._page_rows if x.id == log_id), None)
        if item is None:
            return

        dlg = EditServiceLogDialog(item, validate_service_log, self)
        code = dlg.exec()
        if code == EditServiceLogDialog.DELETE_RESULT:
            if _confirm(self, "Confirm", "Delete this service log?"):
                self.ctx.delete_service_log(item.id)
                self.statusBar().showMessage("Service log deleted.")
            return
        if code != QDialog.DialogCode.Accepted or dlg.result_value is None:
            return

        result = self.ctx.update_service_log(item.id, dlg.result_value)
        if result.ok:
            self.statusBar().showMessage("Service log updated.")

    def delete_selected_log(self) -> None:
        log_id = self._log_id_at(self.table.currentRow())
        if not log_id:
            return
        if not _confirm(self, "Confirm", "Delete this service log?"):
            return
        self.ctx.delete_service_log(log_id)
        self.statusBar().showMessage("Service log deleted.")

    # ---------------- Close ----------------

    def closeEvent(self, event) -> None:
        self._unsubscribe()
        self.ctx.close()
        event.accept()


# -----------------------------
# Entry point
# -----------------------------

def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)
    app.setStyleSheet(DARK_QSS)
    ctx = AppContext.open(settings, QtScheduler(app))
    log.info("Using state file %s", settings.state_path)

    w = ServiceLogsWindow(ctx)
    w.show()
    try:
        app.exec()
    finally:
        ctx.close()


if __name__ == "__main__":
    main()
