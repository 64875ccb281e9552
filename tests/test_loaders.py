# tests/test_loaders.py
import json
from concurrent.futures import ThreadPoolExecutor

from hifz_tutor.loaders import Extras, ExtrasLoader, read_extras
from hifz_tutor.models import VerseRange


def write_extras(base, slug, translation, transliteration=None):
    (base / "translations").mkdir(parents=True, exist_ok=True)
    (base / "translations" / f"{slug}.json").write_text(json.dumps(translation))
    if transliteration is not None:
        (base / "transliterations").mkdir(parents=True, exist_ok=True)
        (base / "transliterations" / f"{slug}.json").write_text(json.dumps(transliteration))


def test_read_extras_slices_range(tmp_path):
    write_extras(tmp_path, "an-nas", {"1": "one", "2": "two", "3": "three"}, ["a", "b", "c"])
    extras = read_extras(str(tmp_path), "an-nas", VerseRange(2, 3))
    assert extras.translation == ["two", "three"]
    assert extras.transliteration == ["b", "c"]


def test_missing_or_malformed_files_give_empty(tmp_path):
    assert read_extras(str(tmp_path), "nothing") == Extras()
    (tmp_path / "translations").mkdir()
    (tmp_path / "translations" / "bad.json").write_text("{oops")
    assert read_extras(str(tmp_path), "bad").translation == []


def test_load_commits(tmp_path):
    write_extras(tmp_path, "an-nas", ["one", "two"])
    loader = ExtrasLoader(str(tmp_path))
    extras = loader.load("an-nas", VerseRange(1, 2))
    assert extras.translation == ["one", "two"]
    assert loader.extras == extras
    assert loader.key == ("an-nas", 1, 2)


def test_superseded_load_does_not_commit(tmp_path):
    write_extras(tmp_path, "an-nas", ["one", "two"])
    write_extras(tmp_path, "al-falaq", ["f1", "f2"])
    loader = ExtrasLoader(str(tmp_path))
    old = loader.issue("an-nas", VerseRange(1, 2))
    new = loader.issue("al-falaq", VerseRange(1, 2))
    assert old.cancelled
    assert loader.commit(old, Extras(["stale"])) is False
    assert loader.commit(new, Extras(["fresh"])) is True
    assert loader.extras.translation == ["fresh"]


def test_cancel_stops_pending_load(tmp_path):
    loader = ExtrasLoader(str(tmp_path))
    token = loader.issue("an-nas", VerseRange(1, 1))
    loader.cancel()
    assert token.cancelled
    assert loader.commit(token, Extras(["late"])) is False
    assert loader.extras == Extras()


def test_submit_runs_in_background(tmp_path):
    write_extras(tmp_path, "an-nas", ["one"])
    with ThreadPoolExecutor(max_workers=1) as pool:
        loader = ExtrasLoader(str(tmp_path), executor=pool)
        future = loader.submit("an-nas", VerseRange(1, 1))
        assert future.result(timeout=5).translation == ["one"]
