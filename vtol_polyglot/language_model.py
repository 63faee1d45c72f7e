"""Data model for language files: entries grouped by category."""

import json
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional

from .diagnostics import LanguageFileError


@dataclass
class LanguageEntry:
    """A single localized string of one category."""
    description: str           # English source text (CSV 'en' column)
    type: str                  # Kind of key, e.g. "label" (CSV 'Description' column)
    vtol_key: str              # Game localization key (CSV 'Key' column), unique per category
    additional_context: Optional[str] = None  # Translator notes, JSON only
    content: str = ""          # Translated text, or a <localization.KEY> placeholder

    @classmethod
    def from_dict(cls, data: dict) -> "LanguageEntry":
        """Build an entry from a JSON object; missing or null fields become ''."""
        def text(name):
            value = data.get(name)
            if value is None:
                return ""
            return value if isinstance(value, str) else str(value)

        context = data.get("additional_context")
        return cls(
            description=text("description"),
            type=text("type"),
            vtol_key=text("vtol_key"),
            additional_context=context if context is None else str(context),
            content=text("content"),
        )

    def to_dict(self) -> dict:
        data = OrderedDict()
        data["description"] = self.description
        data["type"] = self.type
        data["vtol_key"] = self.vtol_key
        if self.additional_context is not None:
            data["additional_context"] = self.additional_context
        data["content"] = self.content
        return data


def order_language_data(data: dict, category_map) -> OrderedDict:
    """Return *data* in canonical category order, dropping empty categories."""
    ordered = OrderedDict()
    for category in category_map.categories:
        entries = data.get(category)
        if entries:
            ordered[category] = entries
    return ordered


def dump_language_data(data: dict, category_map) -> str:
    """Serialize LanguageData as the JSON text written to <lang>.json."""
    ordered = order_language_data(data, category_map)
    raw = OrderedDict(
        (category, [e.to_dict() for e in entries])
        for category, entries in ordered.items()
    )
    return json.dumps(raw, ensure_ascii=False, indent=2) + "\n"


def parse_language_json(text: str, source: str = "") -> dict:
    """Parse language JSON text into ``{category: raw value}``.

    Values are left as loaded so the validator can report malformed
    categories instead of this function rejecting the whole file.
    """
    try:
        data = json.loads(text, object_pairs_hook=OrderedDict)
    except json.JSONDecodeError as e:
        raise LanguageFileError(f"Failed to parse {source or 'language JSON'}: {e}") from e
    if not isinstance(data, dict):
        raise LanguageFileError(
            f"{source or 'Language JSON'} must contain an object keyed by category, "
            f"got {type(data).__name__}")
    return data
