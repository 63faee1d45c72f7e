"""Diagnostics panel: live table of per-language results, errors and warnings."""

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QAbstractItemView, QComboBox, QHBoxLayout, QHeaderView, QLabel,
    QPushButton, QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget,
)


# Level icons and colors
_LEVEL = {
    "running": ("\u2699", QColor("#89b4fa")),   # gear, blue
    "built":   ("\u2714", QColor("#a6e3a1")),   # check, green
    "failed":  ("\u2718", QColor("#f38ba8")),   # cross, red
    "error":   ("\u2718", QColor("#f38ba8")),
    "warning": ("\u26a0", QColor("#f9e2af")),   # warning sign, yellow
}

_COLUMNS = ["", "Language", "Category", "Location", "Key", "Message"]


class DiagnosticsPanel(QWidget):
    """Shows one row per language status change and per diagnostic."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._lang_rows = {}      # language -> status row index
        self._error_count = 0
        self._warning_count = 0
        self._built = 0
        self._failed = 0
        self._build_ui()

    def _build_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)

        header = QHBoxLayout()
        self._summary_label = QLabel("No conversion running")
        self._summary_label.setStyleSheet("font-weight: bold;")
        header.addWidget(self._summary_label)
        header.addStretch()

        self._filter_combo = QComboBox()
        self._filter_combo.addItems(["All", "Errors", "Warnings", "Languages"])
        self._filter_combo.currentTextChanged.connect(self._apply_filter)
        header.addWidget(QLabel("Show:"))
        header.addWidget(self._filter_combo)

        clear_btn = QPushButton("Clear")
        clear_btn.clicked.connect(self.clear)
        header.addWidget(clear_btn)
        layout.addLayout(header)

        self._table = QTableWidget()
        self._table.setColumnCount(len(_COLUMNS))
        self._table.setHorizontalHeaderLabels(_COLUMNS)
        hdr = self._table.horizontalHeader()
        hdr.setSectionResizeMode(0, QHeaderView.ResizeMode.Fixed)
        self._table.setColumnWidth(0, 30)
        self._table.setColumnWidth(1, 70)
        self._table.setColumnWidth(2, 110)
        self._table.setColumnWidth(3, 170)
        self._table.setColumnWidth(4, 140)
        hdr.setSectionResizeMode(5, QHeaderView.ResizeMode.Stretch)
        self._table.setSelectionBehavior(
            QAbstractItemView.SelectionBehavior.SelectRows)
        self._table.setEditTriggers(
            QAbstractItemView.EditTrigger.NoEditTriggers)
        self._table.verticalHeader().setDefaultSectionSize(24)
        self._table.verticalHeader().setVisible(False)
        self._table.setAlternatingRowColors(True)
        layout.addWidget(self._table)

        self._counts_label = QLabel("")
        layout.addWidget(self._counts_label)

    # ── Public API ──────────────────────────────────────────────────

    def start(self, title: str):
        self.clear()
        self._summary_label.setText(title)

    def mark_language_started(self, lang: str):
        row = self._append_row("running", lang, "", "", "", "Converting...", kind="language")
        self._lang_rows[lang] = row

    def add_result(self, result):
        """Show a finished LanguageResult and the diagnostics it carries."""
        for diag in result.diagnostics:
            self.add_diagnostic(diag)

        status = "built" if result.ok else "failed"
        if result.ok:
            self._built += 1
            message = f"{len(result.files_written)} file(s) written"
            if result.missing_keys:
                message += f", {len(result.missing_keys)} missing translation(s)"
        else:
            self._failed += 1
            message = "Not written"
        row = self._lang_rows.get(result.language)
        if row is None:
            self._append_row(status, result.language, "", "", "", message, kind="language")
        else:
            self._set_row(row, status, result.language, "", "", "", message)
        self._update_counts()

    def add_diagnostic(self, diag):
        loc = diag.file
        if diag.file and diag.line is not None:
            loc = f"{diag.file}:{diag.line}"
        self._append_row(diag.level, diag.language, diag.category, loc, diag.key,
                         diag.message, kind=diag.level)
        if diag.is_error:
            self._error_count += 1
        else:
            self._warning_count += 1
        self._update_counts()

    def mark_finished(self, summary):
        if summary.failed:
            text = "Finished with errors (strict mode)"
        else:
            text = f"Finished: {len(summary.built)} language(s) converted"
        self._summary_label.setText(text)

    def clear(self):
        self._table.setRowCount(0)
        self._lang_rows = {}
        self._error_count = 0
        self._warning_count = 0
        self._built = 0
        self._failed = 0
        self._summary_label.setText("No conversion running")
        self._counts_label.setText("")

    # ── Internal ────────────────────────────────────────────────────

    def _append_row(self, level, lang, category, location, key, message, kind):
        row = self._table.rowCount()
        self._table.insertRow(row)
        self._set_row(row, level, lang, category, location, key, message)
        self._table.item(row, 0).setData(Qt.ItemDataRole.UserRole, kind)
        self._apply_filter(self._filter_combo.currentText())
        return row

    def _set_row(self, row, level, lang, category, location, key, message):
        icon, color = _LEVEL[level]
        status_item = self._table.item(row, 0)
        if status_item is None:
            status_item = QTableWidgetItem()
            status_item.setTextAlignment(Qt.AlignmentFlag.AlignCenter)
            self._table.setItem(row, 0, status_item)
        status_item.setText(icon)
        status_item.setForeground(color)

        dim = QColor("#7f849c")
        for col, text in enumerate((lang, category, location, key), start=1):
            item = QTableWidgetItem(text or "")
            item.setForeground(dim)
            self._table.setItem(row, col, item)
        msg_item = QTableWidgetItem(message)
        msg_item.setToolTip(message)
        msg_item.setForeground(color)
        self._table.setItem(row, 5, msg_item)

    def _update_counts(self):
        self._counts_label.setText(
            f"Built: {self._built}  |  Failed: {self._failed}  |  "
            f"Errors: {self._error_count}  |  Warnings: {self._warning_count}"
        )

    def _apply_filter(self, filter_text: str):
        """Show/hide rows based on filter selection."""
        for row in range(self._table.rowCount()):
            status_item = self._table.item(row, 0)
            if not status_item:
                continue
            kind = status_item.data(Qt.ItemDataRole.UserRole)
            visible = True
            if filter_text == "Errors":
                visible = kind == "error"
            elif filter_text == "Warnings":
                visible = kind == "warning"
            elif filter_text == "Languages":
                visible = kind == "language"
            self._table.setRowHidden(row, not visible)
