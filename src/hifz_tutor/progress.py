"""Progress statistics computed from the full session history.

Nothing here is stored; every value is recomputed from the list of
session results each time progress is shown.
"""
import math
from datetime import date, datetime, timedelta

from hifz_tutor.models import FOCUS_PRIMARY, FOCUS_TRANSLIT, SessionResult


def _local_date(ms: int) -> date:
    return datetime.fromtimestamp(ms / 1000).date()


def _day_start_ms(day: date) -> int:
    return int(datetime(day.year, day.month, day.day).timestamp() * 1000)


def is_recall_eligible(s: SessionResult) -> bool:
    """True when the session actually graded something and has a finite score."""
    has_questions = s.total_count > 0
    has_attempts = len(s.attempts) > 0
    try:
        has_score = math.isfinite(s.percent)
    except TypeError:
        has_score = False
    return has_questions and (has_attempts or has_questions) and has_score


def streak_days(history: list[SessionResult], now: datetime | None = None) -> int:
    """Consecutive days with activity, counting back from today."""
    if not history:
        return 0
    now = now or datetime.now()
    days = {_local_date(s.completed_at) for s in history}
    today = now.date()
    streak = 0
    while today - timedelta(days=streak) in days:
        streak += 1
    return streak


def week_start(now: datetime) -> date:
    """Monday of the week containing ``now``."""
    return now.date() - timedelta(days=now.weekday())


def sessions_this_week(history: list[SessionResult], now: datetime | None = None) -> int:
    now = now or datetime.now()
    monday = week_start(now)
    start = _day_start_ms(monday)
    end = _day_start_ms(monday + timedelta(days=7))
    return sum(1 for s in history if start <= s.completed_at < end)


def average_of_last_n(history: list[SessionResult], n: int = 10) -> int | None:
    """Rounded mean percent of the last ``n`` recall sessions, or None if there are none."""
    scored = [s for s in history if is_recall_eligible(s)]
    if not scored or n < 1:
        return None
    last = scored[-n:]
    return round(sum(s.percent for s in last) / len(last))


def group_by_document(history: list[SessionResult]) -> dict[str, dict]:
    """Latest recall score and time per document slug."""
    groups = {}
    for s in history:
        g = groups.setdefault(s.document_slug, {
            "slug": s.document_slug,
            "name": s.document_name,
            "number": s.document_number,
            "last_score": None,
            "last_practiced_at": None,
        })
        if not is_recall_eligible(s):
            g["name"] = s.document_name or g["name"]
            g["number"] = s.document_number or g["number"]
            continue
        if g["last_practiced_at"] is None or s.completed_at > g["last_practiced_at"]:
            g["last_practiced_at"] = s.completed_at
            g["last_score"] = s.percent
    return groups


def per_document(history: list[SessionResult]) -> list[dict]:
    return sorted(group_by_document(history).values(), key=lambda g: g["number"])


def daily_recall_timeline(history: list[SessionResult], max_days: int = 20) -> list[dict]:
    """Average recall percent per calendar day, oldest first, last ``max_days`` days with data."""
    by_day: dict[date, list] = {}
    for s in history:
        if is_recall_eligible(s):
            by_day.setdefault(_local_date(s.completed_at), []).append(s.percent)
    points = [
        {"day": day, "average_percent": sum(vals) / len(vals)}
        for day, vals in sorted(by_day.items())
    ]
    if max_days < 1:
        return []
    return points[-max_days:]


def week_summary(history: list[SessionResult], now: datetime | None = None) -> list[int]:
    """Session counts for the last 7 days, oldest first and today last."""
    today = (now or datetime.now()).date()
    counts = [0] * 7
    for s in history:
        diff = (today - _local_date(s.completed_at)).days
        if 0 <= diff < 7:
            counts[6 - diff] += 1
    return counts


def focus_breakdown(history: list[SessionResult]) -> dict:
    counts = {FOCUS_PRIMARY: 0, FOCUS_TRANSLIT: 0, "unknown": 0}
    for s in history:
        key = s.focus_mode if s.focus_mode in (FOCUS_PRIMARY, FOCUS_TRANSLIT) else "unknown"
        counts[key] += 1
    total = sum(counts.values()) or 1
    return {
        "counts": counts,
        "percents": {k: round(v / total * 100) for k, v in counts.items()},
    }


def recent_sessions(history: list[SessionResult], n: int = 5) -> list[SessionResult]:
    """Last ``n`` sessions, newest first."""
    return list(reversed(history[-n:])) if n > 0 else []


def build_progress(history: list[SessionResult], now: datetime | None = None, last_n: int = 10,
                   timeline_days: int = 20) -> dict:
    """Everything the progress screen shows, computed from ``history``."""
    now = now or datetime.now()
    return {
        "streak_days": streak_days(history, now),
        "sessions_this_week": sessions_this_week(history, now),
        "average_last_n": average_of_last_n(history, last_n),
        "per_document": per_document(history),
        "timeline": daily_recall_timeline(history, timeline_days),
        "week_summary": week_summary(history, now),
        "focus": focus_breakdown(history),
        "recent": recent_sessions(history),
        "total_sessions": len(history),
    }


def fmt_percent(p: int | None) -> str:
    return "—%" if p is None else f"{p}%"


def fmt_date(ts: int | None) -> str:
    if not ts:
        return "—"
    return datetime.fromtimestamp(ts / 1000).strftime("%b %d, %Y")
