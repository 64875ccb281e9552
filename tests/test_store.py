# tests/test_store.py
import json
from datetime import datetime

import pytest

from hifz_tutor.db import get_connection, init_db
from hifz_tutor.errors import StoreReadFailed, StoreWriteFailed
from hifz_tutor.store import (
    AccountSessionStore, LocalSessionStore, SessionStore, load_history, select_store,
)


def test_account_store_round_trip(tmp_db, make_session):
    init_db(tmp_db)
    store = AccountSessionStore(tmp_db, "user-1")
    later = make_session(datetime(2024, 5, 2, 9), percent=75, focus_mode="transliteration")
    earlier = make_session(datetime(2024, 5, 1, 9), total=0)
    store.save(later)
    store.save(earlier)
    loaded = store.load_all()
    assert loaded == [earlier, later]
    assert loaded[1].focus_mode == "transliteration"
    assert loaded[0].hide_policy is None


def test_account_store_is_scoped(tmp_db, make_session):
    init_db(tmp_db)
    AccountSessionStore(tmp_db, "a").save(make_session(datetime(2024, 5, 1)))
    assert AccountSessionStore(tmp_db, "b").load_all() == []


def test_account_store_write_failure(tmp_db, make_session):
    init_db(tmp_db)
    store = AccountSessionStore(tmp_db, "a")
    s = make_session(datetime(2024, 5, 1))
    store.save(s)
    with pytest.raises(StoreWriteFailed):
        store.save(s)  # duplicate primary key


def test_account_store_read_failure_without_schema(tmp_db):
    with pytest.raises(StoreReadFailed):
        AccountSessionStore(tmp_db, "a").load_all()


def test_local_store_round_trip_sorted(tmp_path, make_session):
    store = LocalSessionStore(str(tmp_path / "nested" / "sessions.json"))
    b = make_session(datetime(2024, 5, 2))
    a = make_session(datetime(2024, 5, 1), focus_mode="primary-script")
    store.save(b)
    store.save(a)
    assert store.load_all() == [a, b]


def test_local_store_missing_or_corrupt_reads_empty(tmp_path):
    path = tmp_path / "sessions.json"
    store = LocalSessionStore(str(path))
    assert store.load_all() == []
    path.write_text("{not json")
    assert store.load_all() == []
    path.write_text(json.dumps({"not": "a list"}))
    assert store.load_all() == []


def test_local_store_reads_old_records_without_optionals(tmp_path):
    path = tmp_path / "sessions.json"
    path.write_text(json.dumps([{
        "id": "legacy", "completed_at": 5, "document_slug": "an-nas", "document_name": "An-Nas",
        "document_number": 114, "range": {"start": 1, "end": 6}, "repetitions": 1, "mode": "recall",
        "correct_count": 3, "total_count": 6, "percent": 50, "attempts": [True] * 3 + [False] * 3,
    }]))
    [s] = LocalSessionStore(str(path)).load_all()
    assert s.focus_mode is None
    assert s.hide_policy is None
    assert s.percent == 50


def test_select_store_prefers_account(tmp_db, tmp_path):
    local = str(tmp_path / "s.json")
    assert isinstance(select_store(tmp_db, "user-1", local), AccountSessionStore)
    assert isinstance(select_store(tmp_db, None, local), LocalSessionStore)
    assert isinstance(select_store(tmp_db, "", local), LocalSessionStore)


def test_load_history_treats_read_failure_as_empty():
    class Broken(SessionStore):
        def load_all(self):
            raise StoreReadFailed("offline")

    assert load_history(Broken()) == []


def test_local_store_skips_record_with_malformed_range(tmp_path, make_session):
    path = tmp_path / "sessions.json"
    good = make_session(datetime(2024, 5, 1))
    bad = good.to_dict()
    bad["id"] = "bad"
    bad["range"] = [1, 2]
    path.write_text(json.dumps([good.to_dict(), bad, {"id": "worse", "completed_at": "soon"}]))
    history = load_history(LocalSessionStore(str(path)))
    assert [s.id for s in history] == [good.id, "bad"]
    assert history[1].range.start == 1


def test_local_store_save_leaves_unreadable_file_alone(tmp_path, make_session):
    path = tmp_path / "sessions.json"
    original = '[{"id": "old", "completed_at": 1},'
    path.write_text(original)
    store = LocalSessionStore(str(path))
    with pytest.raises(StoreWriteFailed):
        store.save(make_session(datetime(2024, 5, 1)))
    assert path.read_text() == original


def test_recorder_keeps_result_when_local_file_unreadable(tmp_path, make_session):
    from hifz_tutor.recorder import SessionRecorder

    path = tmp_path / "sessions.json"
    path.write_text("{broken")
    recorder = SessionRecorder(LocalSessionStore(str(path)))
    result = make_session(datetime(2024, 5, 1))
    assert recorder.record(result) is False
    assert recorder.pending == result
    assert path.read_text() == "{broken"
