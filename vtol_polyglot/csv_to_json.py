"""Localization CSV -> language JSON importer.

Scans a folder of ``<prefix>_<lang>.csv`` files (as exported from the
translation spreadsheet), groups them by language and writes one
``<lang>.json`` per language plus a ``<lang>.missing.txt`` listing absent
categories and untranslated keys.
"""

import logging
import os
import re
from collections import defaultdict
from dataclasses import dataclass, field

from .csv_codec import parse_document
from .diagnostics import (
    BuildAborted, LanguageFileError, LanguageResult, RunSummary, error, warning,
)
from .filesystem import LocalFileSystem
from .language_model import dump_language_data, order_language_data
from .validator import ValidationResult, validate_records

log = logging.getLogger(__name__)

CSV_NAME_RE = re.compile(r"^(.+)_([a-z]{2})\.csv$", re.IGNORECASE)

REQUIRED_COLUMNS = ("Key", "Description", "en")


@dataclass
class CsvFileInfo:
    path: str
    prefix: str
    lang: str
    category: str

    @property
    def name(self) -> str:
        return os.path.basename(self.path)


@dataclass
class FileImport:
    """Validated entries of one CSV file."""
    info: CsvFileInfo
    result: ValidationResult


@dataclass
class LanguageImport:
    language: str
    data: dict = field(default_factory=dict)           # category -> [LanguageEntry]
    missing_categories: list = field(default_factory=list)
    missing_keys: list = field(default_factory=list)
    diagnostics: list = field(default_factory=list)


def parse_csv_filename(name: str):
    """Return ``(prefix, lang)`` for ``<prefix>_<lang>.csv``, else None."""
    match = CSV_NAME_RE.match(name)
    if not match:
        return None
    return match.group(1), match.group(2)


def scan_csv_files(names, csv_dir: str, category_map):
    """Group CSV file names by language.

    Returns ``(files_by_lang, warnings)``.  Names that do not follow the
    naming pattern or use an unknown prefix are skipped with a warning.
    """
    by_lang = defaultdict(list)
    warnings = []
    for name in names:
        if not name.lower().endswith(".csv"):
            continue
        parsed = parse_csv_filename(name)
        if parsed is None:
            warnings.append(warning(
                f"Skipping file with unexpected format: {name}", file=name))
            continue
        prefix, lang = parsed
        category = category_map.category_for(prefix)
        if category is None:
            warnings.append(warning(
                f"Unknown CSV prefix '{prefix}' in file {name}", file=name))
            continue
        by_lang[lang].append(CsvFileInfo(
            path=os.path.join(csv_dir, name),
            prefix=prefix,
            lang=lang,
            category=category,
        ))
    return dict(by_lang), warnings


def convert_csv_text(info: CsvFileInfo, text: str) -> ValidationResult:
    """Parse and validate the contents of one CSV file."""
    ctx = dict(language=info.lang, category=info.category, file=info.name)
    doc = parse_document(text, source=info.name)
    result = ValidationResult()
    result.warnings.extend(doc.warnings)

    # A header-only file is never header-checked; it stays a warning.
    if not doc.rows and not doc.warnings:
        result.warnings.append(warning(f"Empty CSV file: {info.name}", **ctx))
        return result

    missing = [c for c in REQUIRED_COLUMNS if c not in doc.header]
    if missing:
        result.errors.append(error(
            f"Invalid CSV header in {info.name} (missing {', '.join(missing)})", **ctx))
        return result

    if info.lang not in doc.header:
        result.warnings.append(warning(
            f"No '{info.lang}' column in {info.name}, every key is untranslated", **ctx))

    result.merge(validate_records(
        doc.rows, info.lang, info.category, info.prefix, file=info.name))

    if not result.entries:
        result.errors.append(error(f"No valid entries in {info.name}", **ctx))
    return result


def convert_csv_file(info: CsvFileInfo, fs) -> ValidationResult:
    try:
        text = fs.read_text(info.path)
    except (OSError, UnicodeDecodeError) as e:
        result = ValidationResult()
        result.errors.append(error(
            f"Failed to process {info.name}: {e}",
            language=info.lang, category=info.category, file=info.name))
        return result
    return convert_csv_text(info, text)


def assemble_language(lang: str, imports, category_map,
                      strict: bool = True) -> LanguageImport:
    """Combine per-file results into one language's data.

    In strict mode a file with errors contributes no entries.  Categories
    left without entries are reported as missing.
    """
    out = LanguageImport(language=lang)
    collected = {}
    for item in imports:
        res = item.result
        out.diagnostics.extend(res.errors)
        out.diagnostics.extend(res.warnings)
        if res.errors and strict:
            continue
        out.missing_keys.extend(res.missing_keys)
        if res.entries:
            collected[item.info.category] = res.entries
            log.info("[%s] %s -> %s (%d entries)",
                     lang, item.info.name, item.info.category, len(res.entries))

    out.data = order_language_data(collected, category_map)
    out.missing_categories = [c for c in category_map.categories if c not in out.data]
    if out.missing_categories:
        out.diagnostics.append(warning(
            f"Missing categories: {', '.join(out.missing_categories)}", language=lang))
    return out


def format_missing_report(missing_categories, missing_keys, category_map) -> str:
    """Text of ``<lang>.missing.txt``; empty when nothing is missing."""
    lines = []
    if missing_categories:
        lines.append("=== Missing Categories (CSV Files) ===")
        lines.extend(category_map.prefix_for(c) for c in missing_categories)
        lines.append("")
    if missing_keys:
        if missing_categories:
            lines.append("=== Missing Translations ===")
        lines.extend(missing_keys)
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def import_language(lang: str, files, out_dir: str, category_map,
                    strict: bool = True, fs=None) -> LanguageResult:
    """Convert one language's CSV files and write its JSON and missing report."""
    fs = fs or LocalFileSystem()
    result = LanguageResult(language=lang)

    imports = [FileImport(info, convert_csv_file(info, fs)) for info in files]
    assembled = assemble_language(lang, imports, category_map, strict=strict)
    for diag in assembled.diagnostics:
        diag.log(log)
    result.diagnostics.extend(assembled.diagnostics)
    result.missing_keys.extend(assembled.missing_keys)
    result.missing_categories.extend(assembled.missing_categories)

    if not assembled.data:
        diag = error(f"No valid entries for language '{lang}'", language=lang)
        diag.log(log)
        result.diagnostics.append(diag)
        result.ok = False
        return result

    json_path = os.path.join(out_dir, f"{lang}.json")
    fs.write_text(json_path, dump_language_data(assembled.data, category_map))
    result.files_written.append(json_path)
    log.info("[%s] Output: %s", lang, json_path)

    report = format_missing_report(
        assembled.missing_categories, assembled.missing_keys, category_map)
    if report:
        missing_path = os.path.join(out_dir, f"{lang}.missing.txt")
        fs.write_text(missing_path, report)
        result.files_written.append(missing_path)
        log.info("[%s] Missing keys: %s (%d categories, %d translations)",
                 lang, missing_path, len(assembled.missing_categories),
                 len(assembled.missing_keys))
    return result


def run_import(csv_dir: str, out_dir: str, category_map, strict: bool = True,
               fail_fast: bool = True, fs=None, languages=None) -> RunSummary:
    """Convert every language found in *csv_dir* back into language JSON.

    *languages* optionally restricts the run to those codes.
    """
    fs = fs or LocalFileSystem()
    if not fs.is_dir(csv_dir):
        raise LanguageFileError(f"Directory not found: {csv_dir}")

    log.info("Scanning directory: %s", csv_dir)
    by_lang, scan_warnings = scan_csv_files(fs.list_dir(csv_dir), csv_dir, category_map)
    for diag in scan_warnings:
        diag.log(log)
    if languages:
        by_lang = {lang: files for lang, files in by_lang.items() if lang in languages}
    if not by_lang:
        raise LanguageFileError("No valid CSV files found")

    summary = RunSummary(output_dir=out_dir)
    summary.diagnostics.extend(scan_warnings)
    ordered = sorted(by_lang)
    log.info("Found %d CSV files for %d language(s): %s",
             sum(len(v) for v in by_lang.values()), len(ordered), ", ".join(ordered))

    for lang in ordered:
        log.info("Processing language: %s", lang)
        result = import_language(lang, by_lang[lang], out_dir, category_map,
                                 strict=strict, fs=fs)
        summary.add(result)
        if not result.ok and strict:
            summary.failed = True
            if fail_fast:
                raise BuildAborted(f"Import stopped: language '{lang}' failed", summary)

    if strict and summary.error_count:
        summary.failed = True
    for line in summary.report_lines():
        log.info(line)
    return summary
