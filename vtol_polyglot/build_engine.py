"""Conversion engine: runs language conversions on Qt worker threads."""

import logging

from PyQt6.QtCore import QObject, QThread, pyqtSignal

from .csv_to_json import import_language, scan_csv_files
from .diagnostics import LanguageFileError, RunSummary
from .filesystem import LocalFileSystem
from .json_to_csv import build_language

log = logging.getLogger(__name__)

MODE_BUILD = "build"      # language JSON -> CSV
MODE_IMPORT = "import"    # CSV -> language JSON


class ConversionWorker(QObject):
    """Worker that converts a chunk of languages in a background thread."""

    language_started = pyqtSignal(str)      # language code
    language_done = pyqtSignal(object)      # LanguageResult
    finished = pyqtSignal()

    def __init__(self, mode: str, languages: list, settings, category_map,
                 csv_files: dict = None, fs=None):
        super().__init__()
        self.mode = mode
        self.languages = languages
        self.settings = settings
        self.category_map = category_map
        self.csv_files = csv_files or {}
        self.fs = fs or LocalFileSystem()
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    def run(self):
        """Convert every language in this worker's chunk."""
        s = self.settings
        for lang in self.languages:
            if self._cancelled:
                break
            self.language_started.emit(lang)
            if self.mode == MODE_BUILD:
                result = build_language(lang, s.languages_dir, s.dist_dir,
                                        self.category_map, strict=s.strict, fs=self.fs)
            else:
                result = import_language(lang, self.csv_files.get(lang, []),
                                         s.import_out_dir, self.category_map,
                                         strict=s.strict, fs=self.fs)
            self.language_done.emit(result)
            if not result.ok and s.strict and s.fail_fast:
                break  # engine cancels the other workers
        self.finished.emit()


class ConversionEngine(QObject):
    """Fans languages out over parallel workers and aggregates the summary."""

    language_started = pyqtSignal(str)
    language_done = pyqtSignal(object)      # LanguageResult
    aborted = pyqtSignal(str)               # reason (strict fail-fast)
    finished = pyqtSignal(object)           # RunSummary

    def __init__(self, parent=None, fs=None):
        super().__init__(parent)
        self.fs = fs or LocalFileSystem()
        self._threads = []
        self._workers = []
        self._finished_workers = 0
        self._summary = None
        self._strict = True
        self._fail_fast = True
        self._aborted = False

    @property
    def is_running(self) -> bool:
        return any(t.isRunning() for t in self._threads)

    def start_build(self, settings, languages: list):
        """Build CSVs for *languages* (JSON -> CSV)."""
        if self.is_running:
            return
        category_map = settings.category_map()
        if not languages:
            raise LanguageFileError("No languages specified")
        if self.fs.exists(settings.dist_dir):
            self.fs.remove_tree(settings.dist_dir)
        self._start(MODE_BUILD, sorted(languages), settings, category_map,
                    output_dir=settings.dist_dir)

    def start_import(self, settings):
        """Import every language found in ``settings.csv_dir`` (CSV -> JSON)."""
        if self.is_running:
            return
        category_map = settings.category_map()
        if not self.fs.is_dir(settings.csv_dir):
            raise LanguageFileError(f"Directory not found: {settings.csv_dir}")
        by_lang, scan_warnings = scan_csv_files(
            self.fs.list_dir(settings.csv_dir), settings.csv_dir, category_map)
        if settings.languages:
            by_lang = {k: v for k, v in by_lang.items() if k in settings.languages}
        if not by_lang:
            raise LanguageFileError("No valid CSV files found")
        for diag in scan_warnings:
            diag.log(log)
        self._start(MODE_IMPORT, sorted(by_lang), settings, category_map,
                    output_dir=settings.import_out_dir, csv_files=by_lang,
                    diagnostics=scan_warnings)

    def _start(self, mode, languages, settings, category_map, output_dir,
               csv_files=None, diagnostics=None):
        self._summary = RunSummary(output_dir=output_dir)
        self._summary.diagnostics.extend(diagnostics or [])
        self._strict = settings.strict
        self._fail_fast = settings.fail_fast
        self._aborted = False
        self._finished_workers = 0
        self._threads = []
        self._workers = []

        log.info("Starting %s of %d language(s)", mode, len(languages))
        n = max(1, min(settings.workers, len(languages)))
        for chunk in self._split_chunks(languages, n):
            thread = QThread()
            worker = ConversionWorker(mode, chunk, settings, category_map,
                                      csv_files=csv_files, fs=self.fs)
            worker.moveToThread(thread)

            thread.started.connect(worker.run)
            worker.language_started.connect(self.language_started.emit)
            worker.language_done.connect(self._on_language_done)
            worker.finished.connect(self._on_worker_finished)

            self._threads.append(thread)
            self._workers.append(worker)

        for thread in self._threads:
            thread.start()

    def cancel(self):
        """Cancel all running workers."""
        for worker in self._workers:
            worker.cancel()

    def shutdown(self):
        """Cancel the workers and block until their threads have stopped.

        A language already being converted is finished first, so its files
        are never left half written.  No ``finished`` signal follows.
        """
        self.cancel()
        for thread in self._threads:
            if thread.isRunning():
                thread.quit()
                thread.wait()
        self._threads = []
        self._workers = []

    def _on_language_done(self, result):
        self._summary.add(result)
        self.language_done.emit(result)
        if not result.ok and self._strict:
            self._summary.failed = True
            if self._fail_fast and not self._aborted:
                self._aborted = True
                reason = f"Language '{result.language}' failed in strict mode"
                log.error("%s, cancelling remaining languages", reason)
                self.cancel()
                self.aborted.emit(reason)

    def _on_worker_finished(self):
        """Track worker completion; emit finished when all done."""
        if not self._workers:
            return  # engine was shut down
        self._finished_workers += 1
        if self._finished_workers >= len(self._workers):
            for thread in self._threads:
                thread.quit()
                thread.wait()
            self._threads = []
            self._workers = []
            summary = self._summary
            if self._strict and summary.error_count:
                summary.failed = True
            for line in summary.report_lines():
                log.info(line)
            self.finished.emit(summary)

    @staticmethod
    def _split_chunks(items: list, n: int) -> list:
        """Split a list into n roughly equal sequential chunks."""
        if n <= 1:
            return [items]
        k, remainder = divmod(len(items), n)
        chunks = []
        start = 0
        for i in range(n):
            size = k + (1 if i < remainder else 0)
            chunks.append(items[start:start + size])
            start += size
        return chunks

