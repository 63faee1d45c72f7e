import json

import pytest

from vtol_polyglot.diagnostics import BuildAborted, LanguageFileError
from vtol_polyglot.json_to_csv import (
    build_language, build_language_csvs, discover_languages, run_build,
)

HEADER_FR = "Key,Description,en,fr\n"


def _lang_json(data):
    return json.dumps(data, ensure_ascii=False)


def test_weapons_scenario(category_map):
    data = {"weapons": [{"vtol_key": "W1", "type": "label",
                         "description": "Missile", "content": "Missile FR"}]}
    build = build_language_csvs("fr", data, category_map)
    assert build.files["weapons_fr.csv"] == HEADER_FR + "W1,label,Missile,Missile FR\n"


def test_missing_categories_get_header_only_files(category_map):
    build = build_language_csvs("fr", {"weapons": []}, category_map)
    assert list(build.files) == ["interface_fr.csv", "weapons_fr.csv", "vehicles_fr.csv"]
    assert all(text == HEADER_FR for text in build.files.values())
    assert len(build.diagnostics) == 3
    assert not build.has_errors


def test_unknown_category_warns(category_map):
    build = build_language_csvs("fr", {"spaceships": [{"vtol_key": "S1"}]}, category_map)
    assert any("spaceships" in d.message for d in build.diagnostics)
    assert not build.has_errors


def test_rows_are_escaped_and_placeholders_filled(category_map):
    data = {"ui": [
        {"vtol_key": "U1", "type": "button", "description": "Yes, go", "content": 'Oui, "go"'},
        {"vtol_key": "U2", "type": "button", "description": "No", "content": ""},
    ]}
    build = build_language_csvs("fr", data, category_map)
    assert build.files["interface_fr.csv"] == (
        HEADER_FR
        + 'U1,button,"Yes, go","Oui, ""go"""\n'
        + "U2,button,No,<localization.U2>\n"
    )
    assert build.missing_keys == ["U2"]


def test_strict_language_with_errors_writes_nothing(memfs, category_map):
    memfs.write_text("languages/fr.json", _lang_json({"weapons": [
        {"vtol_key": "W1", "type": "t", "description": "d", "content": "c"},
        {"vtol_key": "W1", "type": "t", "description": "d", "content": "c"},
    ]}))
    result = build_language("fr", "languages", "dist", category_map, strict=True, fs=memfs)
    assert not result.ok
    assert len(result.errors) == 1
    assert not any(p.startswith("dist/") for p in memfs.files)


def test_non_strict_language_with_errors_is_written(memfs, category_map):
    memfs.write_text("languages/fr.json", _lang_json({"weapons": [
        {"vtol_key": "W1", "type": "t", "description": "d", "content": "c"},
        {"vtol_key": "", "type": "t", "description": "d", "content": "c"},
    ]}))
    result = build_language("fr", "languages", "dist", category_map, strict=False, fs=memfs)
    assert result.ok
    assert memfs.files["dist/fr/weapons_fr.csv"] == HEADER_FR + "W1,t,d,c\n"
    assert len(result.files_written) == 3


def test_unreadable_json_fails_language(memfs, category_map):
    memfs.write_text("languages/fr.json", "{not json")
    result = build_language("fr", "languages", "dist", category_map, fs=memfs)
    assert not result.ok
    assert "Failed to parse" in result.errors[0].message


def test_run_build_fail_fast_raises(memfs, category_map):
    memfs.write_text("languages/de.json", _lang_json({"ui": [{"vtol_key": "U1", "type": "t",
                                                              "description": "d", "content": "c"}]}))
    with pytest.raises(BuildAborted) as info:
        run_build(["de", "fr"], "languages", "dist", category_map, fs=memfs)
    summary = info.value.summary
    assert summary.built == ["de"]
    assert summary.skipped == ["fr"]
    assert summary.failed


def test_run_build_skip_failed_language(memfs, category_map):
    memfs.write_text("languages/de.json", _lang_json({}))
    summary = run_build(["fr", "de"], "languages", "dist", category_map,
                        strict=True, fail_fast=False, fs=memfs)
    assert summary.built == ["de"]
    assert summary.skipped == ["fr"]
    assert summary.failed
    assert "dist/de/interface_de.csv" in memfs.files


def test_run_build_cleans_output_dir(memfs, category_map):
    memfs.write_text("dist/stale.csv", "old")
    memfs.write_text("languages/fr.json", _lang_json({}))
    run_build(["fr"], "languages", "dist", category_map, fs=memfs)
    assert "dist/stale.csv" not in memfs.files


def test_run_build_requires_languages(memfs, category_map):
    with pytest.raises(LanguageFileError):
        run_build([], "languages", "dist", category_map, fs=memfs)


def test_discover_languages_skips_source(memfs):
    for name in ("en.json", "fr.json", "de.json", "notes.txt"):
        memfs.write_text(f"languages/{name}", "{}")
    assert discover_languages(memfs, "languages") == ["de", "fr"]
    assert discover_languages(memfs, "missing") == []


def test_build_language_on_disk(tmp_path, category_map):
    lang_dir = tmp_path / "languages"
    lang_dir.mkdir()
    (lang_dir / "ja.json").write_text(_lang_json({"vehicles": [
        {"vtol_key": "V1", "type": "name", "description": "Fighter", "content": "戦闘機"},
    ]}), encoding="utf-8")
    result = build_language("ja", str(lang_dir), str(tmp_path / "dist"), category_map)
    assert result.ok
    text = (tmp_path / "dist" / "ja" / "vehicles_ja.csv").read_text(encoding="utf-8")
    assert text == "Key,Description,en,ja\nV1,name,Fighter,戦闘機\n"
