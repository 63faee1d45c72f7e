import json

import pytest
from PyQt6.QtCore import QCoreApplication, QEventLoop, QTimer

from vtol_polyglot.build_engine import ConversionEngine
from vtol_polyglot.diagnostics import LanguageFileError
from vtol_polyglot.settings import BuildSettings


@pytest.fixture(scope="module")
def qapp():
    return QCoreApplication.instance() or QCoreApplication([])


def _run(engine, start):
    """Start the engine and spin an event loop until it reports finished."""
    summaries = []
    loop = QEventLoop()
    engine.finished.connect(summaries.append)
    engine.finished.connect(lambda _summary: loop.quit())
    start()
    QTimer.singleShot(10000, loop.quit)
    loop.exec()
    assert summaries, "engine did not finish"
    return summaries[0]


def _entry(key, content):
    return {"vtol_key": key, "type": "label", "description": key, "content": content}


def test_build_runs_languages_on_workers(qapp, memfs):
    for lang in ("de", "fr", "ja"):
        memfs.write_text(f"languages/{lang}.json",
                         json.dumps({"weapons": [_entry("W1", lang.upper())]}))
    settings = BuildSettings(workers=2)
    engine = ConversionEngine(fs=memfs)

    summary = _run(engine, lambda: engine.start_build(settings, ["fr", "de", "ja"]))
    assert sorted(summary.built) == ["de", "fr", "ja"]
    assert not summary.failed
    assert "W1,label,W1,JA" in memfs.files["dist/ja/weapons_ja.csv"]


def test_import_strict_failure_marks_summary(qapp, memfs):
    memfs.write_text("csv/weapons_fr.csv", "Key,Description,en,fr\nW1,label,Missile,Missile FR\n")
    memfs.write_text("csv/weapons_de.csv", "Key,Description,en,de\n")
    settings = BuildSettings(csv_dir="csv", import_out_dir="out", workers=1, fail_fast=False)
    engine = ConversionEngine(fs=memfs)

    summary = _run(engine, lambda: engine.start_import(settings))
    assert summary.built == ["fr"]
    assert summary.skipped == ["de"]
    assert summary.failed
    assert "out/fr.json" in memfs.files


def test_start_errors_are_raised_before_threads_start(qapp, memfs):
    engine = ConversionEngine(fs=memfs)
    with pytest.raises(LanguageFileError):
        engine.start_build(BuildSettings(), [])
    with pytest.raises(LanguageFileError):
        engine.start_import(BuildSettings(csv_dir="nowhere"))
    assert not engine.is_running


def test_split_chunks_is_sequential():
    assert ConversionEngine._split_chunks([1, 2, 3, 4, 5], 2) == [[1, 2, 3], [4, 5]]
    assert ConversionEngine._split_chunks([1], 1) == [[1]]


def test_strict_fail_fast_aborts_remaining_languages(qapp, memfs):
    memfs.write_text("languages/fr.json", json.dumps({"weapons": [_entry("W1", "FR")]}))
    settings = BuildSettings(workers=1, strict=True, fail_fast=True)
    engine = ConversionEngine(fs=memfs)
    reasons = []
    engine.aborted.connect(reasons.append)

    summary = _run(engine, lambda: engine.start_build(settings, ["de", "fr"]))
    assert reasons == ["Language 'de' failed in strict mode"]
    assert summary.built == []
    assert summary.skipped == ["de"]
    assert summary.failed
    assert not any(p.startswith("dist/fr/") for p in memfs.files)


def test_shutdown_waits_for_threads(qapp, memfs):
    langs = ["de", "es", "fr", "it", "ja", "ko"]
    for lang in langs:
        memfs.write_text(f"languages/{lang}.json",
                         json.dumps({"weapons": [_entry("W1", lang.upper())]}))
    settings = BuildSettings(workers=3)
    engine = ConversionEngine(fs=memfs)
    finished = []
    engine.finished.connect(finished.append)

    engine.start_build(settings, langs)
    engine.shutdown()
    assert not engine.is_running

    QCoreApplication.processEvents()
    assert finished == []
    per_lang = {}
    for path in memfs.files:
        if path.startswith("dist/"):
            lang = path.split("/")[1]
            per_lang[lang] = per_lang.get(lang, 0) + 1
    expected = len(settings.category_map().categories)
    assert all(count == expected for count in per_lang.values())
