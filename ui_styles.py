# -*- coding: utf-8 -*-

from models import ServiceType

# Chip colours per service type (default / warning / error)
TYPE_COLORS = {
    ServiceType.PLANNED: "#9e9e9e",
    ServiceType.UNPLANNED: "#ffa726",
    ServiceType.EMERGENCY: "#ef5350",
}

STATUS_SAVING_CSS = "color: #bdbdbd;"
STATUS_SAVED_CSS = "color: #66bb6a;"
ERROR_TEXT_CSS = "color: #ef5350;"
MUTED_TEXT_CSS = "color: #bdbdbd;"

# Dark theme for the logbook window and dialogs
DARK_QSS = r"""
QWidget {
    background: #1e1e1e;
    color: #e6e6e6;
    font-family: "Segoe UI";
    font-size: 10pt;
}

QGroupBox {
    border: 1px solid #3a3a3a;
    border-radius: 8px;
    margin-top: 12px;
    padding: 10px;
}

QGroupBox::title {
    subcontrol-origin: margin;
    left: 10px;
    padding: 0 6px 0 6px;
    color: #d7d7d7;
    font-weight: 600;
}

QLineEdit, QTextEdit, QComboBox, QDateEdit, QDoubleSpinBox {
    background: #252526;
    border: 1px solid #3a3a3a;
    border-radius: 6px;
    padding: 6px 8px;
    selection-background-color: #264f78;
    selection-color: #ffffff;
}

QLineEdit[invalid="true"], QDoubleSpinBox[invalid="true"], QDateEdit[invalid="true"] {
    border: 1px solid #ef5350;
}

QComboBox::drop-down {
    border: none;
    width: 26px;
}

QPushButton {
    background: #333333;
    border: 1px solid #444444;
    border-radius: 8px;
    padding: 8px 12px;
}

QPushButton:hover {
    background: #3a3a3a;
}

QPushButton:disabled {
    color: #6e6e6e;
}

QPushButton#primary {
    background: #0e639c;
    border: 1px solid #1177bb;
}

QPushButton#danger {
    border: 1px solid #a1260d;
}

QHeaderView::section {
    background: #2b2b2b;
    border: 1px solid #3a3a3a;
    padding: 6px 8px;
    font-weight: 600;
}

QTableWidget {
    background: #252526;
    border: 1px solid #3a3a3a;
    gridline-color: #333333;
}

QTableWidget::item:selected {
    background: #264f78;
    color: #ffffff;
}

QStatusBar {
    background: #1e1e1e;
    color: #bdbdbd;
}
"""
