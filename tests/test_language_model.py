import json

import pytest

from vtol_polyglot.diagnostics import Diagnostic, LanguageFileError, LanguageResult, RunSummary
from vtol_polyglot.language_model import (
    LanguageEntry, dump_language_data, parse_language_json,
)


def test_from_dict_tolerates_missing_and_null_fields():
    entry = LanguageEntry.from_dict({"vtol_key": "W1", "content": None, "type": 3})
    assert entry.vtol_key == "W1"
    assert entry.content == ""
    assert entry.type == "3"
    assert entry.additional_context is None


def test_to_dict_key_order_and_optional_context():
    entry = LanguageEntry(description="d", type="t", vtol_key="k", content="c")
    assert list(entry.to_dict()) == ["description", "type", "vtol_key", "content"]
    entry.additional_context = "note"
    assert list(entry.to_dict()) == ["description", "type", "vtol_key", "additional_context", "content"]


def test_dump_orders_by_category_map_and_drops_empty(category_map):
    data = {
        "weapons": [LanguageEntry("Missile", "label", "W1", "", "Missile FR")],
        "ui": [LanguageEntry("Ok", "button", "U1", "", "D'accord")],
        "vehicles": [],
    }
    text = dump_language_data(data, category_map)
    assert text.endswith("\n")
    assert list(json.loads(text)) == ["ui", "weapons"]
    assert '  "ui": [' in text


def test_dump_keeps_non_ascii(category_map):
    text = dump_language_data({"ui": [LanguageEntry("Fighter", "name", "V1", "", "戦闘機")]}, category_map)
    assert "戦闘機" in text


def test_parse_language_json_errors():
    with pytest.raises(LanguageFileError):
        parse_language_json("{oops", source="fr.json")
    with pytest.raises(LanguageFileError):
        parse_language_json("[]", source="fr.json")
    assert parse_language_json('{"ui": []}') == {"ui": []}


def test_diagnostic_rendering():
    diag = Diagnostic("error", "Duplicate vtol_key 'W1'", language="fr",
                      file="weapons_fr.csv", line=4, key="W1")
    assert str(diag) == "[fr] weapons_fr.csv:4: Duplicate vtol_key 'W1'"
    assert str(Diagnostic("warning", "Category 'ui' is missing or empty",
                          language="fr", category="ui")) == \
        "[fr] ui: Category 'ui' is missing or empty"


def test_run_summary_counts():
    summary = RunSummary(output_dir="dist")
    ok = LanguageResult("fr", files_written=["dist/fr/a.csv"], missing_keys=["W1"],
                        diagnostics=[Diagnostic("warning", "w")])
    bad = LanguageResult("de", ok=False, diagnostics=[Diagnostic("error", "e")])
    summary.add(ok)
    summary.add(bad)
    assert summary.built == ["fr"]
    assert summary.skipped == ["de"]
    assert summary.error_count == 1
    assert summary.warning_count == 1
    assert summary.missing_count == 1
    assert "Languages built: fr" in summary.report_lines()
