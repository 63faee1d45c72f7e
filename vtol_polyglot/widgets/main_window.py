"""Main application window: ties together settings, engine and diagnostics."""

import logging
import os

from PyQt6.QtCore import QObject, Qt, pyqtSignal
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import (
    QCheckBox, QFileDialog, QFormLayout, QGroupBox, QHBoxLayout, QLabel,
    QLineEdit, QMainWindow, QMessageBox, QPlainTextEdit, QPushButton,
    QSpinBox, QSplitter, QStatusBar, QVBoxLayout, QWidget,
)

from ..build_engine import ConversionEngine
from ..diagnostics import PolyglotError
from ..json_to_csv import discover_languages
from ..settings import BuildSettings
from .diagnostics_panel import DiagnosticsPanel

log = logging.getLogger(__name__)

DARK_STYLESHEET = """
QMainWindow, QDialog, QWidget {
    background-color: #1e1e2e;
    color: #cdd6f4;
}
QMenuBar {
    background-color: #181825;
    color: #cdd6f4;
    border-bottom: 1px solid #313244;
}
QMenuBar::item:selected {
    background-color: #313244;
}
QMenu {
    background-color: #1e1e2e;
    color: #cdd6f4;
    border: 1px solid #313244;
}
QMenu::item:selected {
    background-color: #45475a;
}
QTableWidget, QPlainTextEdit, QLineEdit, QSpinBox {
    background-color: #181825;
    color: #cdd6f4;
    border: 1px solid #313244;
    selection-background-color: #45475a;
}
QHeaderView::section {
    background-color: #1e1e2e;
    color: #cdd6f4;
    border: 1px solid #313244;
    padding: 4px;
}
QPushButton {
    background-color: #313244;
    color: #cdd6f4;
    border: 1px solid #45475a;
    padding: 5px 15px;
    border-radius: 3px;
}
QPushButton:hover {
    background-color: #45475a;
}
QPushButton:disabled {
    color: #6c7086;
}
QStatusBar {
    background-color: #181825;
    color: #a6adc8;
}
QGroupBox {
    border: 1px solid #313244;
    border-radius: 4px;
    margin-top: 8px;
    padding-top: 16px;
    color: #cdd6f4;
}
QGroupBox::title {
    subcontrol-origin: margin;
    left: 10px;
}
QSplitter::handle {
    background-color: #313244;
}
"""


class _LogBridge(QObject):
    """Carries log lines from worker threads to the GUI thread."""
    message = pyqtSignal(str)


class QtLogHandler(logging.Handler):
    """logging.Handler that forwards formatted records through a Qt signal."""

    def __init__(self):
        super().__init__()
        self.bridge = _LogBridge()
        self.setFormatter(logging.Formatter("%(levelname)-7s %(message)s"))

    def emit(self, record):
        try:
            self.bridge.message.emit(self.format(record))
        except RuntimeError:
            pass  # Window already destroyed


class MainWindow(QMainWindow):
    """Localization builder window."""

    def __init__(self, settings_path: str = None):
        super().__init__()
        self.setWindowTitle("VTOL VR Localization Builder")
        self.setMinimumSize(1000, 650)

        self._settings_path = settings_path
        self.settings = (BuildSettings.load(settings_path) if settings_path
                         else BuildSettings.load())
        self.engine = ConversionEngine(self)

        self._log_handler = QtLogHandler()
        logging.getLogger("vtol_polyglot").addHandler(self._log_handler)

        self._build_menubar()
        self._build_ui()
        self._build_statusbar()
        self._connect_signals()
        self._load_settings_into_ui()
        self.setStyleSheet(DARK_STYLESHEET)

    # ── UI construction ───────────────────────────────────────────

    def _build_menubar(self):
        menubar = self.menuBar()
        file_menu = menubar.addMenu("File")

        self.build_action = QAction("Build CSVs", self)
        self.build_action.setShortcut("Ctrl+B")
        self.build_action.setToolTip("Convert language JSON files into localization CSVs")
        self.build_action.triggered.connect(self._start_build)
        file_menu.addAction(self.build_action)

        self.import_action = QAction("Import CSVs", self)
        self.import_action.setShortcut("Ctrl+I")
        self.import_action.setToolTip("Convert localization CSVs back into language JSON")
        self.import_action.triggered.connect(self._start_import)
        file_menu.addAction(self.import_action)

        file_menu.addSeparator()
        quit_action = QAction("Quit", self)
        quit_action.setShortcut("Ctrl+Q")
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

    def _build_ui(self):
        central = QWidget()
        layout = QVBoxLayout(central)

        # Paths
        paths_box = QGroupBox("Folders")
        form = QFormLayout(paths_box)
        self.languages_edit = self._path_row(form, "Language JSON:", "Select languages folder")
        self.dist_edit = self._path_row(form, "CSV output:", "Select CSV output folder")
        self.csv_edit = self._path_row(form, "CSV input:", "Select folder with CSVs to import")
        self.import_out_edit = self._path_row(form, "JSON output:", "Select JSON output folder")
        self.category_map_edit = self._path_row(
            form, "Category map:", "Select category map JSON", pick_file=True)
        self.category_map_edit.setPlaceholderText("(built-in table)")
        layout.addWidget(paths_box)

        # Options
        options = QHBoxLayout()
        options.addWidget(QLabel("Languages:"))
        self.languages_list_edit = QLineEdit()
        self.languages_list_edit.setPlaceholderText("fr, de, ja  (empty = all)")
        options.addWidget(self.languages_list_edit, 1)

        self.strict_check = QCheckBox("Strict")
        self.strict_check.setToolTip("Structural errors fail the language")
        options.addWidget(self.strict_check)

        self.fail_fast_check = QCheckBox("Stop on first failure")
        self.fail_fast_check.setToolTip(
            "In strict mode, abort the whole run instead of skipping the failed language")
        options.addWidget(self.fail_fast_check)

        options.addWidget(QLabel("Workers:"))
        self.workers_spin = QSpinBox()
        self.workers_spin.setRange(1, 16)
        options.addWidget(self.workers_spin)

        self.build_btn = QPushButton("Build CSVs")
        self.build_btn.clicked.connect(self._start_build)
        options.addWidget(self.build_btn)
        self.import_btn = QPushButton("Import CSVs")
        self.import_btn.clicked.connect(self._start_import)
        options.addWidget(self.import_btn)
        layout.addLayout(options)

        # Diagnostics + log
        splitter = QSplitter(Qt.Orientation.Vertical)
        self.diagnostics = DiagnosticsPanel()
        splitter.addWidget(self.diagnostics)
        self.log_view = QPlainTextEdit()
        self.log_view.setReadOnly(True)
        self.log_view.setMaximumBlockCount(5000)
        splitter.addWidget(self.log_view)
        splitter.setSizes([400, 160])
        layout.addWidget(splitter, 1)

        self.setCentralWidget(central)

    def _path_row(self, form, label, title, pick_file=False):
        row = QHBoxLayout()
        edit = QLineEdit()
        row.addWidget(edit, 1)
        browse = QPushButton("Browse...")
        browse.clicked.connect(lambda: self._browse(edit, title, pick_file))
        row.addWidget(browse)
        form.addRow(label, row)
        return edit

    def _build_statusbar(self):
        self.statusbar = QStatusBar()
        self.setStatusBar(self.statusbar)
        self.progress_label = QLabel("")
        self.statusbar.addWidget(self.progress_label)

    def _connect_signals(self):
        self._log_handler.bridge.message.connect(self.log_view.appendPlainText)
        self.engine.language_started.connect(self._on_language_started)
        self.engine.language_done.connect(self._on_language_done)
        self.engine.aborted.connect(self._on_aborted)
        self.engine.finished.connect(self._on_finished)

    # ── Settings ──────────────────────────────────────────────────

    def _load_settings_into_ui(self):
        s = self.settings
        self.languages_edit.setText(s.languages_dir)
        self.dist_edit.setText(s.dist_dir)
        self.csv_edit.setText(s.csv_dir)
        self.import_out_edit.setText(s.import_out_dir)
        self.category_map_edit.setText(s.category_map_path)
        self.languages_list_edit.setText(", ".join(s.languages))
        self.strict_check.setChecked(s.strict)
        self.fail_fast_check.setChecked(s.fail_fast)
        self.workers_spin.setValue(s.workers)

    def _read_settings_from_ui(self) -> BuildSettings:
        langs = [p.strip() for p in self.languages_list_edit.text().split(",") if p.strip()]
        return BuildSettings(
            languages_dir=self.languages_edit.text().strip(),
            dist_dir=self.dist_edit.text().strip(),
            csv_dir=self.csv_edit.text().strip(),
            import_out_dir=self.import_out_edit.text().strip(),
            languages=langs,
            strict=self.strict_check.isChecked(),
            fail_fast=self.fail_fast_check.isChecked(),
            workers=self.workers_spin.value(),
            category_map_path=self.category_map_edit.text().strip(),
        )

    def _save_settings(self):
        self.settings = self._read_settings_from_ui()
        if self._settings_path:
            self.settings.save(self._settings_path)
        else:
            self.settings.save()

    # ── Actions ───────────────────────────────────────────────────

    def _browse(self, edit, title, pick_file):
        start = edit.text() or os.getcwd()
        if pick_file:
            path, _ = QFileDialog.getOpenFileName(self, title, start, "JSON (*.json)")
        else:
            path = QFileDialog.getExistingDirectory(self, title, start)
        if path:
            edit.setText(path)

    def _start_build(self):
        if self.engine.is_running:
            return
        self._save_settings()
        s = self.settings
        languages = s.languages or discover_languages(self.engine.fs, s.languages_dir)
        self.diagnostics.start(f"Building CSVs for {len(languages)} language(s)...")
        self._run(lambda: self.engine.start_build(s, languages))

    def _start_import(self):
        if self.engine.is_running:
            return
        self._save_settings()
        self.diagnostics.start("Importing CSVs...")
        self._run(lambda: self.engine.start_import(self.settings))

    def _run(self, start):
        try:
            start()
        except PolyglotError as e:
            log.error("Cannot start conversion: %s", e)
            self.diagnostics.clear()
            QMessageBox.warning(self, "Cannot Start", str(e))
            return
        self._set_running(True)

    def _set_running(self, running: bool):
        for w in (self.build_btn, self.import_btn):
            w.setEnabled(not running)
        self.build_action.setEnabled(not running)
        self.import_action.setEnabled(not running)
        if running:
            self.progress_label.setText("Converting...")

    # ── Engine callbacks ──────────────────────────────────────────

    def _on_language_started(self, lang: str):
        self.diagnostics.mark_language_started(lang)
        self.progress_label.setText(f"Converting {lang}...")

    def _on_language_done(self, result):
        self.diagnostics.add_result(result)

    def _on_aborted(self, reason: str):
        self.statusbar.showMessage(f"Stopped: {reason}", 8000)

    def _on_finished(self, summary):
        self._set_running(False)
        self.diagnostics.mark_finished(summary)
        self.progress_label.setText(
            f"{len(summary.built)} built, {summary.error_count} error(s), "
            f"{summary.warning_count} warning(s)"
        )
        if summary.failed:
            QMessageBox.warning(
                self, "Conversion Failed",
                "\n".join(summary.report_lines()),
            )

    def closeEvent(self, event):
        self.engine.shutdown()
        self._save_settings()
        logging.getLogger("vtol_polyglot").removeHandler(self._log_handler)
        super().closeEvent(event)
