"""Errors, warnings and per-run result records shared by both converters."""

import logging
from dataclasses import dataclass, field
from typing import Optional

ERROR = "error"
WARNING = "warning"


class PolyglotError(Exception):
    """Base class for errors raised by the localization tools."""


class CategoryMapError(PolyglotError):
    """Category table is malformed (not bijective, empty ids, bad file)."""


class LanguageFileError(PolyglotError):
    """An input file or directory is missing or cannot be parsed."""


class BuildAborted(PolyglotError):
    """Strict fail-fast run stopped at the first failed language."""

    def __init__(self, message: str, summary: "RunSummary" = None):
        super().__init__(message)
        self.summary = summary


@dataclass
class Diagnostic:
    """One error or warning with enough context to find the source row."""
    level: str                       # "error" | "warning"
    message: str
    language: str = ""
    category: str = ""
    file: str = ""
    line: Optional[int] = None       # 1-based physical line in a CSV file
    key: str = ""

    @property
    def is_error(self) -> bool:
        return self.level == ERROR

    def location(self) -> str:
        parts = []
        if self.language:
            parts.append(f"[{self.language}]")
        if self.file:
            parts.append(self.file if self.line is None else f"{self.file}:{self.line}")
        elif self.category:
            parts.append(self.category)
        elif self.line is not None:
            parts.append(f"line {self.line}")
        return " ".join(parts)

    def __str__(self) -> str:
        loc = self.location()
        return f"{loc}: {self.message}" if loc else self.message

    def log(self, logger: logging.Logger):
        if self.is_error:
            logger.error("%s", self)
        else:
            logger.warning("%s", self)


def error(message: str, **context) -> Diagnostic:
    return Diagnostic(ERROR, message, **context)


def warning(message: str, **context) -> Diagnostic:
    return Diagnostic(WARNING, message, **context)


@dataclass
class LanguageResult:
    """Outcome of converting one language in either direction."""
    language: str
    ok: bool = True
    diagnostics: list = field(default_factory=list)
    files_written: list = field(default_factory=list)
    missing_keys: list = field(default_factory=list)
    missing_categories: list = field(default_factory=list)

    @property
    def errors(self) -> list:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> list:
        return [d for d in self.diagnostics if not d.is_error]


@dataclass
class RunSummary:
    """Aggregate counts for a whole multi-language run."""
    output_dir: str = ""
    built: list = field(default_factory=list)       # languages fully written
    skipped: list = field(default_factory=list)     # languages that failed
    diagnostics: list = field(default_factory=list)
    files_written: list = field(default_factory=list)
    missing_count: int = 0
    failed: bool = False

    @property
    def error_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if not d.is_error)

    def add(self, result: LanguageResult):
        """Fold one language's result into the summary."""
        self.diagnostics.extend(result.diagnostics)
        self.missing_count += len(result.missing_keys)
        if result.ok:
            self.built.append(result.language)
            self.files_written.extend(result.files_written)
        else:
            self.skipped.append(result.language)

    def report_lines(self) -> list:
        lines = [
            "=== Summary ===",
            f"Languages built: {', '.join(self.built) or '(none)'}",
        ]
        if self.skipped:
            lines.append(f"Languages skipped: {', '.join(self.skipped)}")
        lines += [
            f"Files written: {len(self.files_written)}",
            f"Output directory: {self.output_dir}",
            f"Warnings: {self.warning_count}",
            f"Errors: {self.error_count}",
        ]
        if self.missing_count:
            lines.append(f"Missing translations: {self.missing_count}")
        if self.failed:
            lines.append("Failed due to errors in strict mode")
        return lines
