"""CSV reader/writer for localization tables.

Fields may be quoted; inside quotes ``""`` is a literal quote and commas or
newlines are part of the value.  A row whose quotes do not balance on its
own line continues on the following physical lines.
"""

import logging
from dataclasses import dataclass, field

from .diagnostics import warning

log = logging.getLogger(__name__)

_NEEDS_QUOTES = (",", '"', "\n", "\r")


@dataclass
class CsvRow:
    """One parsed data row: header name -> value, plus its first line number."""
    line: int
    values: dict

    def get(self, name: str, default: str = "") -> str:
        return self.values.get(name, default)


@dataclass
class CsvDocument:
    header: list = field(default_factory=list)
    rows: list = field(default_factory=list)       # list[CsvRow]
    warnings: list = field(default_factory=list)   # rows dropped while parsing

    @property
    def records(self) -> list:
        """Rows as plain ``{header: value}`` dicts."""
        return [row.values for row in self.rows]


def parse_line(text: str) -> list:
    """Split one logical CSV line into its fields."""
    fields = []
    current = []
    in_quotes = False
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == '"':
            if in_quotes and i + 1 < n and text[i + 1] == '"':
                current.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    fields.append("".join(current))
    return fields


def parse_row(lines: list, start: int, expected: int, source: str = ""):
    """Parse the row starting at ``lines[start]``.

    Returns ``(fields, next_index, diagnostic)``.  *fields* is None for a
    blank line or for a row whose field count differs from *expected*; the
    latter also returns a warning naming the row's first line.
    """
    if start >= len(lines) or not lines[start].strip():
        return None, start + 1, None

    combined = lines[start]
    current = start
    quotes = combined.count('"')
    while quotes % 2 != 0 and current + 1 < len(lines):
        current += 1
        combined += "\n" + lines[current]
        quotes = combined.count('"')

    fields = parse_line(combined)
    if len(fields) != expected:
        diag = warning(
            f"Dropped row with {len(fields)} field(s), expected {expected}",
            file=source, line=start + 1)
        return None, current + 1, diag
    return fields, current + 1, None


def parse_document(text: str, source: str = "") -> CsvDocument:
    """Parse a whole CSV file; the first line is the header."""
    text = text.lstrip("\ufeff").replace("\r\n", "\n")
    if not text.strip():
        return CsvDocument()

    lines = text.split("\n")
    doc = CsvDocument(header=parse_line(lines[0]))
    expected = len(doc.header)

    i = 1
    while i < len(lines):
        fields, next_index, diag = parse_row(lines, i, expected, source)
        if diag is not None:
            diag.log(log)
            doc.warnings.append(diag)
        if fields is not None:
            values = {
                name: fields[j] if j < len(fields) else ""
                for j, name in enumerate(doc.header)
            }
            doc.rows.append(CsvRow(line=i + 1, values=values))
        i = next_index
    return doc


def escape_field(value: str) -> str:
    """Quote a field if it contains a comma, quote or line break."""
    if any(c in value for c in _NEEDS_QUOTES):
        return '"' + value.replace('"', '""') + '"'
    return value


def serialize_row(fields) -> str:
    return ",".join(escape_field(f) for f in fields)


def serialize_document(header, rows) -> str:
    """Header plus rows, newline separated, with a trailing newline."""
    lines = [serialize_row(header)]
    lines.extend(serialize_row(r) for r in rows)
    return "\n".join(lines) + "\n"
