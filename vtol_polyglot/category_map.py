"""Category table: maps JSON category ids to localization CSV prefixes.

The table is bijective: every category id has exactly one CSV prefix and
every prefix belongs to exactly one category.  Converters receive it as an
argument so a project can ship its own table as JSON.
"""

import json
from collections import OrderedDict

from .diagnostics import CategoryMapError


# Built-in table, in canonical category order.
# category id (language JSON key) -> CSV file prefix
DEFAULT_CATEGORIES = (
    ("ui", "interface"),
    ("menus", "menus"),
    ("vehicles", "vehicles"),
    ("weapons", "weapons"),
    ("equipment", "equipment"),
    ("campaigns", "campaigns"),
    ("tutorials", "tutorials"),
    ("editor", "scenario_editor"),
    ("multiplayer", "multiplayer"),
    ("misc", "misc"),
)


class CategoryMap:
    """Immutable bidirectional category id <-> CSV prefix table."""

    def __init__(self, pairs):
        if hasattr(pairs, "items"):
            pairs = pairs.items()
        forward = OrderedDict()
        reverse = {}
        for category, prefix in pairs:
            if not isinstance(category, str) or not category.strip():
                raise CategoryMapError(f"Empty category id in category map: {category!r}")
            if not isinstance(prefix, str) or not prefix.strip():
                raise CategoryMapError(f"Empty CSV prefix for category '{category}'")
            if category in forward:
                raise CategoryMapError(f"Duplicate category id '{category}'")
            if prefix in reverse:
                raise CategoryMapError(
                    f"CSV prefix '{prefix}' used by both '{reverse[prefix]}' and '{category}'")
            forward[category] = prefix
            reverse[prefix] = category
        self._forward = forward
        self._reverse = reverse

    @property
    def categories(self) -> list:
        """Category ids in canonical order."""
        return list(self._forward)

    def prefix_for(self, category: str) -> str:
        try:
            return self._forward[category]
        except KeyError:
            raise CategoryMapError(f"Unknown category '{category}'") from None

    def category_for(self, prefix: str):
        """Return the category id for a CSV prefix, or None if unknown."""
        return self._reverse.get(prefix)

    def csv_name(self, category: str, lang: str) -> str:
        """File name of the CSV holding *category* for *lang*."""
        return f"{self.prefix_for(category)}_{lang}.csv"

    def __contains__(self, category) -> bool:
        return category in self._forward

    def __iter__(self):
        return iter(self._forward.items())

    @classmethod
    def from_dict(cls, data) -> "CategoryMap":
        """Build a map from a JSON object ``{category: prefix}``."""
        if not isinstance(data, dict):
            raise CategoryMapError(
                f"Category map must be a JSON object, got {type(data).__name__}")
        return cls(data.items())

    @classmethod
    def from_json_file(cls, path: str) -> "CategoryMap":
        """Load a category table from a JSON file (key order is kept)."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f, object_pairs_hook=OrderedDict)
        except (OSError, json.JSONDecodeError) as e:
            raise CategoryMapError(f"Failed to load category map {path}: {e}") from e
        return cls.from_dict(data)


DEFAULT_CATEGORY_MAP = CategoryMap(DEFAULT_CATEGORIES)
