"""Persistent tool settings stored in ``_settings.json``."""

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields

from .category_map import DEFAULT_CATEGORY_MAP, CategoryMap

log = logging.getLogger(__name__)

SETTINGS_FILE = os.path.join(os.path.dirname(os.path.dirname(__file__)), "_settings.json")


@dataclass
class BuildSettings:
    languages_dir: str = "languages"      # <lang>.json sources
    dist_dir: str = "dist"                # CSV build output
    csv_dir: str = ""                     # CSVs to import
    import_out_dir: str = "languages"     # JSON written by the importer
    languages: list = field(default_factory=list)  # empty -> every language file
    strict: bool = True
    fail_fast: bool = True
    workers: int = 2
    category_map_path: str = ""           # optional JSON table, "" -> built-in

    def category_map(self) -> CategoryMap:
        """The configured category table (raises CategoryMapError if broken)."""
        if self.category_map_path:
            return CategoryMap.from_json_file(self.category_map_path)
        return DEFAULT_CATEGORY_MAP

    @classmethod
    def load(cls, path: str = SETTINGS_FILE) -> "BuildSettings":
        """Load settings, falling back to defaults for anything missing."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                cfg = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError, OSError):
            return cls()  # No saved settings, use defaults
        if not isinstance(cfg, dict):
            return cls()

        settings = cls()
        defaults = asdict(settings)
        for fld in fields(cls):
            if fld.name not in cfg:
                continue
            value = cfg[fld.name]
            if isinstance(defaults[fld.name], bool):
                if isinstance(value, bool):
                    setattr(settings, fld.name, value)
            elif isinstance(defaults[fld.name], int):
                if isinstance(value, int) and not isinstance(value, bool) and value > 0:
                    setattr(settings, fld.name, value)
            elif isinstance(defaults[fld.name], list):
                if isinstance(value, list):
                    setattr(settings, fld.name, [str(v) for v in value])
            elif isinstance(value, str):
                setattr(settings, fld.name, value)
        return settings

    def save(self, path: str = SETTINGS_FILE):
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(asdict(self), f, ensure_ascii=False, indent=2)
        except OSError as e:
            log.warning("Could not save settings to %s: %s", path, e)
