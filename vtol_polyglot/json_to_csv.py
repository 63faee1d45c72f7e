"""Language JSON -> localization CSV builder.

Each ``languages/<lang>.json`` becomes one ``<prefix>_<lang>.csv`` per known
category under ``<out>/<lang>/``.  Every category file is always produced,
header-only when the language has nothing for it, so the game loader finds
the full set.
"""

import logging
import os
from collections import OrderedDict
from dataclasses import dataclass, field

from . import SOURCE_LANGUAGE
from .csv_codec import serialize_document
from .diagnostics import (
    BuildAborted, LanguageFileError, LanguageResult, RunSummary, error, warning,
)
from .filesystem import LocalFileSystem
from .language_model import parse_language_json
from .validator import validate_entries

log = logging.getLogger(__name__)


@dataclass
class CsvBuild:
    """CSV texts built for one language, before anything is written."""
    language: str
    files: OrderedDict = field(default_factory=OrderedDict)  # file name -> CSV text
    diagnostics: list = field(default_factory=list)
    missing_keys: list = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self.diagnostics)


def csv_header(lang: str) -> list:
    """Header row used by the game's localization CSVs."""
    return ["Key", "Description", "en", lang]


def build_language_csvs(lang: str, data: dict, category_map) -> CsvBuild:
    """Build every category CSV for *lang* from its parsed JSON *data*."""
    build = CsvBuild(language=lang)
    header = csv_header(lang)

    for category in data:
        if category not in category_map:
            build.diagnostics.append(warning(
                f"Unknown category '{category}' is not in the category map, ignored",
                language=lang, category=category))

    for category, _prefix in category_map:
        name = category_map.csv_name(category, lang)
        records = data.get(category)

        if not isinstance(records, list) or not records:
            build.diagnostics.append(warning(
                f"Category '{category}' is missing or empty",
                language=lang, category=category))
            build.files[name] = serialize_document(header, [])
            continue

        result = validate_entries(records, lang, category)
        build.diagnostics.extend(result.errors)
        build.diagnostics.extend(result.warnings)
        build.missing_keys.extend(result.missing_keys)

        rows = [(e.vtol_key, e.type, e.description, e.content) for e in result.entries]
        build.files[name] = serialize_document(header, rows)

    return build


def load_language_json(fs, path: str) -> dict:
    """Read and parse a language JSON file."""
    if not fs.exists(path):
        raise LanguageFileError(f"File not found: {path}")
    try:
        text = fs.read_text(path)
    except (OSError, UnicodeDecodeError) as e:
        raise LanguageFileError(f"Failed to read {path}: {e}") from e
    return parse_language_json(text, source=path)


def discover_languages(fs, lang_dir: str) -> list:
    """Language codes of every ``<lang>.json`` in *lang_dir* except the source."""
    if not fs.is_dir(lang_dir):
        return []
    langs = []
    for name in fs.list_dir(lang_dir):
        base, ext = os.path.splitext(name)
        if ext == ".json" and base != SOURCE_LANGUAGE:
            langs.append(base)
    return sorted(langs)


def build_language(lang: str, lang_dir: str, out_dir: str, category_map,
                   strict: bool = True, fs=None) -> LanguageResult:
    """Convert ``<lang_dir>/<lang>.json`` into CSVs under ``<out_dir>/<lang>/``.

    In strict mode any error fails the language and nothing is written.
    """
    fs = fs or LocalFileSystem()
    result = LanguageResult(language=lang)
    json_path = os.path.join(lang_dir, f"{lang}.json")

    try:
        data = load_language_json(fs, json_path)
    except LanguageFileError as e:
        diag = error(str(e), language=lang, file=json_path)
        diag.log(log)
        result.diagnostics.append(diag)
        result.ok = False
        return result

    build = build_language_csvs(lang, data, category_map)
    for diag in build.diagnostics:
        diag.log(log)
    result.diagnostics.extend(build.diagnostics)
    result.missing_keys.extend(build.missing_keys)

    if build.has_errors and strict:
        log.error("[%s] %d error(s) in strict mode, language not built",
                  lang, len(result.errors))
        result.ok = False
        return result

    lang_out = os.path.join(out_dir, lang)
    for name, text in build.files.items():
        path = os.path.join(lang_out, name)
        fs.write_text(path, text)
        result.files_written.append(path)

    log.info("[%s] Created %d CSVs", lang, len(result.files_written))
    return result


def run_build(languages, lang_dir: str, out_dir: str, category_map,
              strict: bool = True, fail_fast: bool = True, clean: bool = True,
              fs=None) -> RunSummary:
    """Build CSVs for every language in *languages*.

    With *strict*, a language with any error is not written; *fail_fast*
    then decides between raising ``BuildAborted`` and skipping it.
    """
    fs = fs or LocalFileSystem()
    summary = RunSummary(output_dir=out_dir)
    languages = list(languages)
    if not languages:
        raise LanguageFileError("No languages specified")

    if clean and fs.exists(out_dir):
        fs.remove_tree(out_dir)

    log.info("Building %d language(s)...", len(languages))
    for lang in languages:
        log.info("Processing: %s", lang)
        result = build_language(lang, lang_dir, out_dir, category_map,
                                strict=strict, fs=fs)
        summary.add(result)
        if not result.ok and strict:
            summary.failed = True
            if fail_fast:
                raise BuildAborted(f"Build stopped: language '{lang}' failed", summary)

    for line in summary.report_lines():
        log.info(line)
    return summary
