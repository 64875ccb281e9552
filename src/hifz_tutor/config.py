"""Session configuration parsing and learner preferences."""
import math
from dataclasses import dataclass
from typing import Optional

from hifz_tutor.db import APP_HOME, get_setting, set_setting
from hifz_tutor.errors import ConfigError, RangeEmpty
from hifz_tutor.guided import CHUNK_SIZE
from hifz_tutor.models import (
    FOCUS_MODES, FOCUS_PRIMARY, HIDE_NONE, HIDE_POLICIES, MODE_PRACTICE, MODES,
    VerseRange,
)

DEFAULT_LOCAL_STORE_PATH = str(APP_HOME / "sessions.json")
DEFAULT_EXTRAS_DIR = str(APP_HOME / "extras")


@dataclass(frozen=True)
class SessionConfig:
    slug: str
    range: VerseRange
    hide: str = HIDE_NONE
    reps: int = 1
    mode: str = MODE_PRACTICE


def _to_int(value) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def parse_reps(value) -> int:
    reps = _to_int(value)
    return reps if reps is not None and reps > 0 else 1


def parse_hide(value) -> str:
    return value if value in HIDE_POLICIES else HIDE_NONE


def parse_mode(value) -> str:
    return value if value in MODES else MODE_PRACTICE


def clamp_range(start, end, total_verses: int) -> VerseRange:
    """Clamp ``start``/``end`` into ``[1, total_verses]`` and swap if reversed.

    Raises RangeEmpty when the document has no verses.
    """
    if total_verses < 1:
        raise RangeEmpty(start=_to_int(start), end=_to_int(end))
    lo = _to_int(start)
    hi = _to_int(end)
    if lo is None:
        lo = 1
    if hi is None:
        hi = total_verses
    lo = min(max(lo, 1), total_verses)
    hi = min(max(hi, 1), total_verses)
    if lo > hi:
        lo, hi = hi, lo
    return VerseRange(lo, hi)


def parse_session_config(params: dict, total_verses: int) -> SessionConfig:
    """Build a SessionConfig from raw caller input (query params, prompts)."""
    slug = str(params.get("slug") or "")
    try:
        verse_range = clamp_range(params.get("start"), params.get("end"), total_verses)
    except RangeEmpty:
        raise RangeEmpty(slug, _to_int(params.get("start")), _to_int(params.get("end")))
    return SessionConfig(
        slug=slug,
        range=verse_range,
        hide=parse_hide(params.get("hide")),
        reps=parse_reps(params.get("reps")),
        mode=parse_mode(params.get("mode")),
    )


def get_focus_mode(db_path: str) -> str:
    value = get_setting(db_path, "focus_mode", FOCUS_PRIMARY)
    return value if value in FOCUS_MODES else FOCUS_PRIMARY


def set_focus_mode(db_path: str, focus_mode: str) -> None:
    if focus_mode not in FOCUS_MODES:
        raise ConfigError(f"Unknown focus mode: {focus_mode!r}")
    set_setting(db_path, "focus_mode", focus_mode)


def get_chunk_size(db_path: str) -> int:
    size = _to_int(get_setting(db_path, "chunk_size"))
    return size if size is not None and size > 0 else CHUNK_SIZE


def set_chunk_size(db_path: str, size: int) -> None:
    if isinstance(size, bool) or not isinstance(size, int) or size < 1:
        raise ConfigError(f"chunk_size must be a positive integer, got {size!r}")
    set_setting(db_path, "chunk_size", str(size))


def get_account_id(db_path: str) -> str | None:
    return get_setting(db_path, "account_id") or None


def set_account_id(db_path: str, account_id: str | None) -> None:
    set_setting(db_path, "account_id", account_id or "")
