"""Entry validation shared by both conversion directions.

Validators never raise on bad data and never modify their input.  They
return the surviving entries together with the errors, warnings and
missing-translation keys found along the way, all in input order.
"""

from dataclasses import dataclass, field

from . import PLACEHOLDER_FORMAT
from .diagnostics import error, warning
from .language_model import LanguageEntry


@dataclass
class ValidationResult:
    entries: list = field(default_factory=list)       # list[LanguageEntry]
    errors: list = field(default_factory=list)        # list[Diagnostic]
    warnings: list = field(default_factory=list)      # list[Diagnostic]
    missing_keys: list = field(default_factory=list)  # keys given a placeholder

    def merge(self, other: "ValidationResult"):
        self.entries.extend(other.entries)
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.missing_keys.extend(other.missing_keys)


def placeholder_for(key: str) -> str:
    """Text used in place of a translation that does not exist yet."""
    return PLACEHOLDER_FORMAT.format(key=key)


def validate_entries(entries, language: str, category: str) -> ValidationResult:
    """Validate JSON entries of one category before writing them as CSV rows.

    Entries without a ``vtol_key`` and repeated keys are errors (the first
    occurrence is kept).  Empty content becomes a placeholder.
    """
    result = ValidationResult()
    seen = set()
    for i, entry in enumerate(entries):
        if isinstance(entry, dict):
            entry = LanguageEntry.from_dict(entry)
        elif not isinstance(entry, LanguageEntry):
            result.errors.append(error(
                f"{category}[{i}]: entry is not an object",
                language=language, category=category))
            continue

        key = entry.vtol_key.strip()
        if not key:
            result.errors.append(error(
                f"{category}[{i}]: missing or empty vtol_key",
                language=language, category=category))
            continue
        if key in seen:
            result.errors.append(error(
                f'{category}: duplicate vtol_key "{key}"',
                language=language, category=category, key=key))
            continue
        seen.add(key)

        content = entry.content.strip()
        if not content:
            result.missing_keys.append(key)
            content = placeholder_for(key)

        result.entries.append(LanguageEntry(
            description=entry.description.strip(),
            type=entry.type.strip(),
            vtol_key=key,
            additional_context=entry.additional_context,
            content=content,
        ))
    return result


def validate_records(rows, language: str, category: str, prefix: str,
                     file: str = "") -> ValidationResult:
    """Validate parsed CSV rows of one ``<prefix>_<lang>.csv`` file.

    *rows* are ``CsvRow`` objects (or plain dicts, numbered from line 2).
    Rows missing a key or repeating one are errors; rows missing the type
    ('Description') or English text ('en') are skipped with a warning.
    """
    result = ValidationResult()
    seen = set()
    ctx = dict(language=language, category=category, file=file)

    for i, row in enumerate(rows):
        if isinstance(row, dict):
            values, line = row, i + 2
        else:
            values, line = row.values, row.line

        key = (values.get("Key") or "").strip()
        type_ = (values.get("Description") or "").strip()
        description = (values.get("en") or "").strip()
        content = (values.get(language) or "").strip()

        if not key:
            result.errors.append(error("Missing vtol_key, row skipped", line=line, **ctx))
            continue
        if not type_:
            result.warnings.append(warning(
                f"Missing type for key '{key}', skipping", line=line, key=key, **ctx))
            continue
        if not description:
            result.warnings.append(warning(
                f"Missing description for key '{key}', skipping", line=line, key=key, **ctx))
            continue
        if key in seen:
            result.errors.append(error(
                f"Duplicate vtol_key '{key}'", line=line, key=key, **ctx))
            continue
        seen.add(key)

        if not content:
            result.missing_keys.append(f"{key} - {prefix}")
            content = placeholder_for(key)

        result.entries.append(LanguageEntry(
            description=description,
            type=type_,
            vtol_key=key,
            additional_context="",
            content=content,
        ))
    return result
