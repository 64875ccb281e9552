"""Recording the outcome of practice, drill and recall runs."""
import logging
import random
import string
import threading
import time

from hifz_tutor.errors import RangeEmpty, StoreWriteFailed
from hifz_tutor.models import (
    HIDE_NONE, MODE_PRACTICE, MODE_RECALL, Document, SessionResult, VerseRange,
)

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def _base36(number: int) -> str:
    out = ""
    while True:
        number, rem = divmod(number, 36)
        out = _ID_ALPHABET[rem] + out
        if not number:
            return out


def uid() -> str:
    """Opaque unique id: random base-36 text followed by the current time."""
    rand = "".join(random.choices(_ID_ALPHABET, k=10))
    return rand + _base36(time.time_ns() // 1_000_000)


def now_ms() -> int:
    return int(time.time() * 1000)


def score_percent(correct: int, total: int) -> int:
    return round(100 * correct / total) if total > 0 else 0


def build_session_result(
    document: Document,
    verse_range: VerseRange,
    mode: str,
    correct: int,
    total: int,
    attempts=(),
    repetitions: int = 1,
    focus_mode: str | None = None,
    hide_policy: str | None = None,
    completed_at: int | None = None,
) -> SessionResult:
    if not 0 <= correct <= total:
        raise ValueError(f"correct count {correct} outside 0..{total}")
    return SessionResult(
        id=uid(),
        completed_at=now_ms() if completed_at is None else completed_at,
        document_slug=document.slug,
        document_name=document.name,
        document_number=document.number,
        range=verse_range,
        repetitions=max(1, repetitions),
        mode=mode,
        correct_count=correct,
        total_count=total,
        percent=score_percent(correct, total),
        attempts=tuple(attempts),
        focus_mode=focus_mode,
        hide_policy=hide_policy,
    )


class RecallRun:
    """A non-guided pass over a verse range, ``reps`` times per verse.

    In practice mode the learner only confirms each verse; nothing is graded.
    """

    def __init__(self, document: Document, verse_range: VerseRange, mode: str = MODE_RECALL,
                 reps: int = 1, hide_policy: str = HIDE_NONE, focus_mode: str | None = None):
        verses = document.slice(verse_range)
        if not verses or verse_range.start < 1 or verse_range.end > document.total_verses:
            raise RangeEmpty(document.slug, verse_range.start, verse_range.end)
        self.document = document
        self.range = verse_range
        self.verses = verses
        self.mode = mode
        self.reps = max(1, reps)
        self.hide_policy = hide_policy
        self.focus_mode = focus_mode
        self.total = max(1, len(verses) * self.reps)
        self.restart()

    @property
    def graded(self) -> bool:
        return self.mode != MODE_PRACTICE

    @property
    def finished(self) -> bool:
        return self.index >= self.total

    def restart(self, recorder: "SessionRecorder | None" = None) -> None:
        """Start the run over. Passing its recorder lets the new attempt be saved too."""
        if recorder is not None:
            recorder.reset()
        self.index = 0
        self.correct = 0
        self.attempts: list[bool] = []

    def current(self) -> tuple[int, str]:
        """(verse number, text) for the current item."""
        offset = self.index % len(self.verses)
        return self.range.start + offset, self.verses[offset]

    def mark(self, correct: bool = True) -> None:
        if self.finished:
            return
        if self.graded:
            self.attempts.append(bool(correct))
            if correct:
                self.correct += 1
        self.index += 1

    def result(self, completed_at: int | None = None) -> SessionResult:
        graded_total = self.total if self.graded else 0
        return build_session_result(
            self.document,
            self.range,
            self.mode,
            correct=self.correct if self.graded else 0,
            total=graded_total,
            attempts=self.attempts if self.graded else (),
            repetitions=self.reps,
            focus_mode=self.focus_mode,
            hide_policy=self.hide_policy,
            completed_at=completed_at,
        )


class SessionRecorder:
    """Saves a finished session at most once.

    The guard is set before the save is attempted, so a failed save is not
    retried; the result is kept in ``pending`` for the caller to handle.
    """

    def __init__(self, store):
        self.store = store
        self._lock = threading.Lock()
        self._recorded = False
        self.pending: SessionResult | None = None
        self.last_error: StoreWriteFailed | None = None

    @property
    def recorded(self) -> bool:
        return self._recorded

    def reset(self) -> None:
        with self._lock:
            self._recorded = False
            self.pending = None
            self.last_error = None

    def record(self, result: SessionResult) -> bool:
        """Save ``result`` unless this session was already recorded. Returns True on a save."""
        with self._lock:
            if self._recorded:
                logger.debug("Session %s already recorded, skipping save", result.id)
                return False
            self._recorded = True
        try:
            self.store.save(result)
        except StoreWriteFailed as e:
            logger.warning("Failed to save session result %s: %s", result.id, e.reason)
            self.pending = result
            self.last_error = e
            return False
        return True
