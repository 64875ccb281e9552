"""Data classes for the memorisation domain model."""
from dataclasses import dataclass, field
from typing import Optional

HIDE_NONE = "none"
HIDE_FULL = "full"
HIDE_WORD = "word"
HIDE_FIRST_WORD = "first-word"
HIDE_HALF = "half"
HIDE_POLICIES = (HIDE_NONE, HIDE_FULL, HIDE_WORD, HIDE_FIRST_WORD, HIDE_HALF)

MODE_PRACTICE = "practice"
MODE_DRILL = "drill"
MODE_RECALL = "recall"
MODES = (MODE_PRACTICE, MODE_DRILL, MODE_RECALL)

FOCUS_PRIMARY = "primary-script"
FOCUS_TRANSLIT = "transliteration"
FOCUS_MODES = (FOCUS_PRIMARY, FOCUS_TRANSLIT)

STAGE_FULL_READ = "full-read"
STAGE_CHUNK_READ = "chunk-read"
STAGE_SINGLE_AYAH = "single-ayah"
STAGE_CHUNK_HALF = "chunk-half"
STAGE_CHUNK_FIRST_WORD = "chunk-first-word"
STAGE_COMPLETE = "complete"
STAGES = (
    STAGE_FULL_READ,
    STAGE_CHUNK_READ,
    STAGE_SINGLE_AYAH,
    STAGE_CHUNK_HALF,
    STAGE_CHUNK_FIRST_WORD,
    STAGE_COMPLETE,
)


@dataclass(frozen=True)
class Document:
    slug: str
    name: str
    number: int
    verses: tuple = ()

    @property
    def total_verses(self) -> int:
        return len(self.verses)

    def verse(self, number: int) -> str:
        """Return verse ``number`` (1-based)."""
        return self.verses[number - 1]

    def slice(self, verse_range: "VerseRange") -> list[str]:
        return list(self.verses[verse_range.start - 1:verse_range.end])


@dataclass(frozen=True)
class VerseRange:
    start: int
    end: int

    def __len__(self) -> int:
        return max(0, self.end - self.start + 1)

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class MaskedWord:
    word: str
    hidden: bool


@dataclass
class StageState:
    stage: str = STAGE_FULL_READ
    full_reads: int = 0
    chunk_start_index: int = 0
    chunk_reads: int = 0
    single_ayah_offset: int = 0
    single_reads: int = 0
    half_reads: int = 0
    first_word_reads: int = 0


@dataclass(frozen=True)
class SessionResult:
    id: str
    completed_at: int  # ms since epoch
    document_slug: str
    document_name: str
    document_number: int
    range: VerseRange
    repetitions: int
    mode: str
    correct_count: int
    total_count: int
    percent: int
    attempts: tuple = field(default_factory=tuple)
    focus_mode: Optional[str] = None
    hide_policy: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "completed_at": self.completed_at,
            "document_slug": self.document_slug,
            "document_name": self.document_name,
            "document_number": self.document_number,
            "range": self.range.to_dict(),
            "repetitions": self.repetitions,
            "mode": self.mode,
            "correct_count": self.correct_count,
            "total_count": self.total_count,
            "percent": self.percent,
            "attempts": list(self.attempts),
            "focus_mode": self.focus_mode,
            "hide_policy": self.hide_policy,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "SessionResult":
        """Rebuild a result from a stored row. Missing optional fields stay None."""
        rng = d.get("range")
        if not isinstance(rng, dict):
            rng = {}
        focus = d.get("focus_mode")
        hide = d.get("hide_policy")
        return cls(
            id=str(d.get("id", "")),
            completed_at=int(d.get("completed_at") or 0),
            document_slug=str(d.get("document_slug") or ""),
            document_name=str(d.get("document_name") or ""),
            document_number=int(d.get("document_number") or 0),
            range=VerseRange(int(rng.get("start", 1)), int(rng.get("end", 1))),
            repetitions=int(d.get("repetitions") or 1),
            mode=d.get("mode") if d.get("mode") in MODES else MODE_PRACTICE,
            correct_count=int(d.get("correct_count") or 0),
            total_count=int(d.get("total_count") or 0),
            percent=d.get("percent") if d.get("percent") is not None else 0,
            attempts=tuple(bool(a) for a in d.get("attempts") or []),
            focus_mode=focus if focus in FOCUS_MODES else None,
            hide_policy=hide if hide in HIDE_POLICIES else None,
        )
