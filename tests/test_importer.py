# tests/test_importer.py
import json

import pytest

from hifz_tutor.db import init_db
from hifz_tutor.errors import RangeEmpty
from hifz_tutor.importer import import_document, read_verses, slugify
from hifz_tutor.seed import get_document, seed_all


def test_read_verses_txt(tmp_path):
    f = tmp_path / "ayat.txt"
    f.write_text("first line\n\n second line \n")
    assert read_verses(str(f)) == ["first line", "second line"]


def test_read_verses_json_numeric_map(tmp_path):
    f = tmp_path / "ayat.json"
    f.write_text(json.dumps({"2": "b", "1": "a"}))
    assert read_verses(str(f)) == ["a", "b"]


def test_read_verses_yaml(tmp_path):
    f = tmp_path / "ayat.yaml"
    f.write_text("verses:\n  - one\n  - two\n")
    assert read_verses(str(f)) == ["one", "two"]


def test_read_verses_html(tmp_path):
    f = tmp_path / "ayat.html"
    f.write_text("<html><body><p>one</p><p>two</p></body></html>")
    assert read_verses(str(f)) == ["one", "two"]


def test_slugify():
    assert slugify("Al Kawthar!") == "al-kawthar"


def test_import_document_from_json_metadata(tmp_db, tmp_path):
    init_db(tmp_db)
    f = tmp_path / "kawthar.json"
    f.write_text(json.dumps({"slug": "al-kawthar", "name": "Al-Kawthar", "number": 108,
                             "verses": ["v1", "v2", "v3"]}))
    result = import_document(tmp_db, str(f))
    assert result == {"slug": "al-kawthar", "name": "Al-Kawthar", "number": 108, "verses": 3}
    assert get_document(tmp_db, "al-kawthar").verses == ("v1", "v2", "v3")


def test_import_document_from_text_uses_filename(tmp_db, tmp_path):
    init_db(tmp_db)
    seed_all(tmp_db)
    f = tmp_path / "my_passage.txt"
    f.write_text("a b\nc d\n")
    result = import_document(tmp_db, str(f))
    assert result["slug"] == "my-passage"
    assert result["name"] == "My Passage"
    assert result["number"] == 115


def test_import_empty_file_rejected(tmp_db, tmp_path):
    init_db(tmp_db)
    f = tmp_path / "empty.txt"
    f.write_text("\n\n")
    with pytest.raises(RangeEmpty):
        import_document(tmp_db, str(f))
