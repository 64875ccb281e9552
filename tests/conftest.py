from datetime import datetime

import pytest

from hifz_tutor.models import MODE_PRACTICE, MODE_RECALL, Document, SessionResult, VerseRange


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tutor.db")
    return db_path


@pytest.fixture
def document():
    return Document(
        slug="an-nas",
        name="An-Nas",
        number=114,
        verses=tuple(f"verse {i} word word" for i in range(1, 7)),
    )


def ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


@pytest.fixture
def make_session():
    """Factory for SessionResult objects with sensible defaults."""
    counter = {"n": 0}

    def _make(at: datetime, percent=100, total=4, slug="an-nas", name="An-Nas", number=114,
              mode=None, attempts=None, focus_mode=None):
        counter["n"] += 1
        correct = round(percent * total / 100) if total else 0
        if mode is None:
            mode = MODE_RECALL if total else MODE_PRACTICE
        if attempts is None:
            attempts = tuple([True] * correct + [False] * (total - correct))
        return SessionResult(
            id=f"s{counter['n']}",
            completed_at=ms(at),
            document_slug=slug,
            document_name=name,
            document_number=number,
            range=VerseRange(1, 3),
            repetitions=1,
            mode=mode,
            correct_count=correct,
            total_count=total,
            percent=percent if total else 0,
            attempts=attempts,
            focus_mode=focus_mode,
        )

    return _make
