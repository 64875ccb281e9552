"""Session result persistence.

Two interchangeable backends: an account-scoped store in the SQLite
database and a local JSON file for learners without an account. One of them
is picked when a session starts and used for both reads and writes.
"""
import json
import logging
import sqlite3
from pathlib import Path

from hifz_tutor.db import get_connection
from hifz_tutor.errors import StoreReadFailed, StoreWriteFailed
from hifz_tutor.models import SessionResult, VerseRange

logger = logging.getLogger(__name__)


class SessionStore:
    """Minimal contract every persistence backend satisfies."""

    def save(self, result: SessionResult) -> None:
        raise NotImplementedError

    def load_all(self) -> list[SessionResult]:
        """All results, ascending by completion time."""
        raise NotImplementedError


class AccountSessionStore(SessionStore):
    def __init__(self, db_path: str, account_id: str):
        self.db_path = db_path
        self.account_id = account_id

    def save(self, result: SessionResult) -> None:
        try:
            conn = get_connection(self.db_path)
            try:
                conn.execute(
                    """INSERT INTO sessions (id, account_id, completed_at, document_slug, document_name,
                        document_number, range_start, range_end, repetitions, mode, correct_count,
                        total_count, percent, attempts, focus_mode, hide_policy)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                    (
                        result.id, self.account_id, result.completed_at, result.document_slug,
                        result.document_name, result.document_number, result.range.start,
                        result.range.end, result.repetitions, result.mode, result.correct_count,
                        result.total_count, result.percent, json.dumps(list(result.attempts)),
                        result.focus_mode, result.hide_policy,
                    ),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StoreWriteFailed(str(e)) from e

    def load_all(self) -> list[SessionResult]:
        try:
            conn = get_connection(self.db_path)
            try:
                rows = conn.execute(
                    "SELECT * FROM sessions WHERE account_id = ? ORDER BY completed_at ASC",
                    (self.account_id,),
                ).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StoreReadFailed(str(e)) from e
        return [_row_to_result(r) for r in rows]


def _row_to_result(row: sqlite3.Row) -> SessionResult:
    percent = row["percent"]
    return SessionResult(
        id=row["id"],
        completed_at=row["completed_at"],
        document_slug=row["document_slug"],
        document_name=row["document_name"] or "",
        document_number=row["document_number"] or 0,
        range=VerseRange(row["range_start"], row["range_end"]),
        repetitions=row["repetitions"],
        mode=row["mode"],
        correct_count=row["correct_count"],
        total_count=row["total_count"],
        percent=int(percent) if float(percent).is_integer() else percent,
        attempts=tuple(bool(a) for a in json.loads(row["attempts"] or "[]")),
        focus_mode=row["focus_mode"],
        hide_policy=row["hide_policy"],
    )


class LocalSessionStore(SessionStore):
    """On-device store: one JSON array of results in a file."""

    def __init__(self, path: str):
        self.path = Path(path)

    def _load(self) -> list:
        """Stored records; raises ValueError when the file is not a JSON list."""
        if not self.path.exists():
            return []
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError("session file does not hold a list")
        return data

    def _read(self) -> list:
        try:
            return self._load()
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable local session file %s: %s", self.path, e)
            return []

    def save(self, result: SessionResult) -> None:
        """Append ``result``. An unreadable file is left untouched and the save fails."""
        try:
            items = self._load()
        except (OSError, ValueError) as e:
            raise StoreWriteFailed(f"existing session file {self.path} is unreadable: {e}") from e
        items.append(result.to_dict())
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(items, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise StoreWriteFailed(str(e)) from e

    def load_all(self) -> list[SessionResult]:
        results = []
        for item in self._read():
            if not isinstance(item, dict):
                continue
            try:
                results.append(SessionResult.from_dict(item))
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed session record: %s", e)
        return sorted(results, key=lambda s: s.completed_at)


def select_store(db_path: str, account_id: str | None, local_path: str) -> SessionStore:
    """Account store when signed in, otherwise the local store. Never both."""
    if account_id:
        return AccountSessionStore(db_path, account_id)
    return LocalSessionStore(local_path)


def load_history(store: SessionStore) -> list[SessionResult]:
    """History for display purposes. A failed read counts as no history."""
    try:
        return store.load_all()
    except StoreReadFailed as e:
        logger.warning("Session history unavailable: %s", e.reason)
        return []
