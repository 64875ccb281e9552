"""Loading translation and transliteration extras for a verse range.

Loads can run in the background. Each load carries a cancellation token;
starting a new load supersedes the previous one, and a superseded or
cancelled load never commits its result.
"""
import json
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from hifz_tutor.models import VerseRange
from hifz_tutor.normalize import normalize_to_ordered_strings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Extras:
    translation: list = field(default_factory=list)
    transliteration: list = field(default_factory=list)


class CancelToken:
    def __init__(self, key: tuple):
        self.key = key
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def read_json(path: Path):
    """Parsed JSON from ``path``; None when missing or malformed."""
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring malformed extras file %s: %s", path, e)
        return None


def read_extras(extras_dir: str, slug: str, verse_range: VerseRange | None = None) -> Extras:
    base = Path(extras_dir)
    translation = normalize_to_ordered_strings(read_json(base / "translations" / f"{slug}.json"))
    transliteration = normalize_to_ordered_strings(read_json(base / "transliterations" / f"{slug}.json"))
    if verse_range is not None:
        translation = translation[verse_range.start - 1:verse_range.end]
        transliteration = transliteration[verse_range.start - 1:verse_range.end]
    return Extras(translation, transliteration)


class ExtrasLoader:
    """Owns the extras for the current session selection."""

    def __init__(self, extras_dir: str, executor: ThreadPoolExecutor | None = None):
        self.extras_dir = extras_dir
        self._executor = executor
        self._lock = threading.Lock()
        self._current: CancelToken | None = None
        self.extras = Extras()
        self.key: tuple | None = None

    def issue(self, slug: str, verse_range: VerseRange) -> CancelToken:
        """Start a new load, superseding any load still in flight."""
        token = CancelToken((slug, verse_range.start, verse_range.end))
        with self._lock:
            if self._current is not None:
                self._current.cancel()
            self._current = token
        return token

    def commit(self, token: CancelToken, extras: Extras) -> bool:
        with self._lock:
            if token.cancelled or token is not self._current:
                logger.debug("Discarding stale extras load for %s", token.key)
                return False
            self.extras = extras
            self.key = token.key
            return True

    def _run(self, token: CancelToken, slug: str, verse_range: VerseRange) -> Extras | None:
        extras = read_extras(self.extras_dir, slug, verse_range)
        return extras if self.commit(token, extras) else None

    def load(self, slug: str, verse_range: VerseRange) -> Extras | None:
        """Load synchronously. Returns None if the load was superseded."""
        return self._run(self.issue(slug, verse_range), slug, verse_range)

    def submit(self, slug: str, verse_range: VerseRange) -> Future:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=2)
        token = self.issue(slug, verse_range)
        return self._executor.submit(self._run, token, slug, verse_range)

    def cancel(self) -> None:
        """Drop the in-flight load and forget committed extras (session reset)."""
        with self._lock:
            if self._current is not None:
                self._current.cancel()
            self._current = None
            self.extras = Extras()
            self.key = None

    def close(self) -> None:
        self.cancel()
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
