import pytest
from unittest.mock import patch

from hifz_tutor import guided
from hifz_tutor.app import (
    SessionExitRequested, cmd_stats, focus_line, run_guided_session, run_recall_session,
    session_int_prompt, session_prompt,
)
from hifz_tutor.db import init_db
from hifz_tutor.loaders import Extras
from hifz_tutor.models import VerseRange
from hifz_tutor.recorder import RecallRun, SessionRecorder
from hifz_tutor.store import LocalSessionStore


def test_session_prompt_raises_on_q():
    with patch("hifz_tutor.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_raises_on_menu():
    with patch("hifz_tutor.app.Prompt.ask", return_value="menu"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_returns_normal_input():
    with patch("hifz_tutor.app.Prompt.ask", return_value="hello"):
        assert session_prompt("test prompt") == "hello"


def test_session_int_prompt_returns_normal_input():
    with patch("hifz_tutor.app.Prompt.ask", return_value="3"):
        assert session_int_prompt("size", choices=["1", "2", "3"]) == 3


def test_focus_line_prefers_transliteration_file():
    extras = Extras(transliteration=["qul a'udhu"])
    assert focus_line("قُلْ", 0, extras, "transliteration") == "qul a'udhu"
    assert focus_line("قُلْ", 0, Extras(), "transliteration") == "ql"
    assert focus_line("قُلْ", 0, extras, "primary-script") == "قُلْ"


def test_run_recall_session_records_once(tmp_path, document):
    store = LocalSessionStore(str(tmp_path / "s.json"))
    recorder = SessionRecorder(store)
    run = RecallRun(document, VerseRange(1, 2), mode="recall", hide_policy="half")
    # reveal, answer; reveal, answer
    with patch("hifz_tutor.app.Prompt.ask", side_effect=["", "y", "", "n"]):
        run_recall_session(run, recorder, Extras(), "primary-script")
    [saved] = store.load_all()
    assert saved.correct_count == 1
    assert saved.total_count == 2
    assert saved.percent == 50
    assert saved.hide_policy == "half"
    run_recall_session(run, recorder, Extras(), "primary-script")
    assert len(store.load_all()) == 1


def test_run_recall_session_exit_saves_nothing(tmp_path, document):
    store = LocalSessionStore(str(tmp_path / "s.json"))
    run = RecallRun(document, VerseRange(1, 2), mode="recall")
    with patch("hifz_tutor.app.Prompt.ask", side_effect=["", "y", "q"]):
        with pytest.raises(SessionExitRequested):
            run_recall_session(run, SessionRecorder(store), Extras(), "primary-script")
    assert run.index == 1
    assert store.load_all() == []


def test_run_guided_session_to_completion(tmp_path, document):
    store = LocalSessionStore(str(tmp_path / "s.json"))
    session = guided.GuidedSession(document, VerseRange(1, 3))
    # one Enter per step, plus one reveal per masked step
    answers = [""] * (guided.total_steps(session.config) + 2)
    with patch("hifz_tutor.app.Prompt.ask", side_effect=answers):
        run_guided_session(session, SessionRecorder(store), Extras(), "primary-script")
    assert session.complete
    [saved] = store.load_all()
    assert saved.mode == "practice"
    assert saved.total_count == 0
    assert saved.range == VerseRange(1, 3)


def test_cmd_stats_with_no_history(tmp_db, tmp_path):
    init_db(tmp_db)
    with patch("hifz_tutor.app.current_store", return_value=LocalSessionStore(str(tmp_path / "s.json"))):
        cmd_stats(tmp_db)
