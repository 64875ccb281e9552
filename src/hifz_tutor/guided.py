"""Guided memorisation routine.

The learner reads the whole range, then works through it chunk by chunk:
read the chunk, read each verse on its own, recite with half the words
hidden, then recite from first-word cues only. Every learner confirmation
is one call to :func:`advance`. There is no skipping and no going back, so a
given range always takes the same number of steps.
"""
from dataclasses import dataclass, replace

from hifz_tutor.errors import ConfigError, RangeEmpty
from hifz_tutor.models import (
    HIDE_FIRST_WORD, HIDE_HALF, HIDE_NONE, MODE_RECALL,
    STAGE_CHUNK_FIRST_WORD, STAGE_CHUNK_HALF, STAGE_CHUNK_READ, STAGE_COMPLETE,
    STAGE_FULL_READ, STAGE_SINGLE_AYAH,
    Document, StageState, VerseRange,
)

CHUNK_SIZE = 3
FULL_REPEATS = 3
CHUNK_REPEATS = 3
SINGLE_REPEATS = 3
HALF_REPEATS = 1
FIRST_WORD_REPEATS = 1
RECALL_LINK_REPS = 3

STAGE_LABELS = {
    STAGE_FULL_READ: "Step 1 · Full read",
    STAGE_CHUNK_READ: "Step 2 · Chunk reading",
    STAGE_SINGLE_AYAH: "Step 3 · Ayah focus",
    STAGE_CHUNK_HALF: "Step 4 · 50% hidden (practice)",
    STAGE_CHUNK_FIRST_WORD: "Step 5 · First-word cues (practice)",
    STAGE_COMPLETE: "Finished",
}

STAGE_HIDE_POLICY = {
    STAGE_CHUNK_HALF: HIDE_HALF,
    STAGE_CHUNK_FIRST_WORD: HIDE_FIRST_WORD,
}


@dataclass(frozen=True)
class GuidedConfig:
    total_verses: int
    chunk_size: int = CHUNK_SIZE
    full_repeats: int = FULL_REPEATS
    chunk_repeats: int = CHUNK_REPEATS
    single_repeats: int = SINGLE_REPEATS
    half_repeats: int = HALF_REPEATS
    first_word_repeats: int = FIRST_WORD_REPEATS

    def __post_init__(self):
        for name in ("chunk_size", "full_repeats", "chunk_repeats", "single_repeats",
                     "half_repeats", "first_word_repeats"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if not isinstance(self.total_verses, int) or self.total_verses < 0:
            raise ConfigError(f"total_verses must be a non-negative integer, got {self.total_verses!r}")


def initial_state(config: GuidedConfig) -> StageState:
    """Start state for a new session. An empty range is complete immediately."""
    if config.total_verses == 0:
        return StageState(stage=STAGE_COMPLETE)
    return StageState()


def chunk_bounds(state: StageState, config: GuidedConfig) -> tuple[int, int]:
    """0-based half-open bounds of the current chunk within the range."""
    start = state.chunk_start_index
    return start, min(start + config.chunk_size, config.total_verses)


def chunk_length(state: StageState, config: GuidedConfig) -> int:
    start, end = chunk_bounds(state, config)
    return end - start


def chunk_number(state: StageState, config: GuidedConfig) -> int:
    return state.chunk_start_index // config.chunk_size + 1


def chunk_count(config: GuidedConfig) -> int:
    return -(-config.total_verses // config.chunk_size)


def active_verse_index(state: StageState) -> int | None:
    """0-based index of the focused verse while in the single-ayah stage."""
    if state.stage != STAGE_SINGLE_AYAH:
        return None
    return state.chunk_start_index + state.single_ayah_offset


def active_hide_policy(state: StageState) -> str:
    return STAGE_HIDE_POLICY.get(state.stage, HIDE_NONE)


def is_complete(state: StageState) -> bool:
    return state.stage == STAGE_COMPLETE


def advance(state: StageState, config: GuidedConfig) -> StageState:
    """Apply one learner confirmation and return the next state.

    ``state`` is not modified. Advancing a complete session is a no-op.
    """
    if state.stage == STAGE_FULL_READ:
        reads = state.full_reads + 1
        if reads >= config.full_repeats:
            return replace(state, full_reads=reads, stage=STAGE_CHUNK_READ,
                           chunk_start_index=0, chunk_reads=0)
        return replace(state, full_reads=reads)

    if state.stage == STAGE_CHUNK_READ:
        reads = state.chunk_reads + 1
        if reads >= config.chunk_repeats:
            return replace(state, chunk_reads=reads, stage=STAGE_SINGLE_AYAH,
                           single_ayah_offset=0, single_reads=0)
        return replace(state, chunk_reads=reads)

    if state.stage == STAGE_SINGLE_AYAH:
        reads = state.single_reads + 1
        if reads < config.single_repeats:
            return replace(state, single_reads=reads)
        if state.single_ayah_offset + 1 < chunk_length(state, config):
            return replace(state, single_ayah_offset=state.single_ayah_offset + 1, single_reads=0)
        return replace(state, single_reads=reads, stage=STAGE_CHUNK_HALF, half_reads=0)

    if state.stage == STAGE_CHUNK_HALF:
        reads = state.half_reads + 1
        if reads >= config.half_repeats:
            return replace(state, half_reads=reads, stage=STAGE_CHUNK_FIRST_WORD, first_word_reads=0)
        return replace(state, half_reads=reads)

    if state.stage == STAGE_CHUNK_FIRST_WORD:
        reads = state.first_word_reads + 1
        if reads < config.first_word_repeats:
            return replace(state, first_word_reads=reads)
        next_start = state.chunk_start_index + config.chunk_size
        if next_start >= config.total_verses:
            return replace(state, first_word_reads=reads, stage=STAGE_COMPLETE)
        return replace(
            state,
            stage=STAGE_CHUNK_READ,
            chunk_start_index=next_start,
            chunk_reads=0,
            single_ayah_offset=0,
            single_reads=0,
            half_reads=0,
            first_word_reads=0,
        )

    return state


def total_steps(config: GuidedConfig) -> int:
    """Number of advance() calls needed to go from the initial state to complete."""
    if config.total_verses == 0:
        return 0
    per_chunk = config.chunk_repeats + config.half_repeats + config.first_word_repeats
    steps = config.full_repeats
    for start in range(0, config.total_verses, config.chunk_size):
        length = min(config.chunk_size, config.total_verses - start)
        steps += per_chunk + config.single_repeats * length
    return steps


def stage_label(state: StageState) -> str:
    return STAGE_LABELS[state.stage]


def instruction(state: StageState, config: GuidedConfig) -> tuple[str, str]:
    """Headline and sub-line shown to the learner for the current step."""
    if state.stage == STAGE_FULL_READ:
        return ("Read the full passage",
                f"Read through from start to end. Read {state.full_reads + 1} of {config.full_repeats}")
    if state.stage == STAGE_CHUNK_READ:
        return ("Read this group of verses",
                f"Chunk {chunk_number(state, config)} · Read {state.chunk_reads + 1} of {config.chunk_repeats}")
    if state.stage == STAGE_SINGLE_AYAH:
        return ("Focus on this verse with context visible",
                f"Within this chunk · Read {state.single_reads + 1} of {config.single_repeats}")
    if state.stage == STAGE_CHUNK_HALF:
        return ("Strengthen recall with 50% of the words hidden",
                "Recite these verses with every second word hidden. Continue when you can recite them confidently.")
    if state.stage == STAGE_CHUNK_FIRST_WORD:
        return ("Test yourself with only the first words visible",
                "Recite from first-word cues only. Continue once you can recite smoothly.")
    return ("Guided session complete",
            "You have gone through the entire range with the recommended routine.")


def button_label(state: StageState, config: GuidedConfig) -> str:
    if state.stage == STAGE_FULL_READ:
        n = state.full_reads + 1
        return f"Mark as read ({n}/{config.full_repeats})" if n < config.full_repeats else \
            f"Mark {n}/{config.full_repeats} and continue"
    if state.stage == STAGE_CHUNK_READ:
        n = state.chunk_reads + 1
        return f"Mark chunk as read ({n}/{config.chunk_repeats})" if n < config.chunk_repeats else \
            f"Chunk read {n}/{config.chunk_repeats} · continue"
    if state.stage == STAGE_SINGLE_AYAH:
        n = state.single_reads + 1
        return f"Mark verse as read ({n}/{config.single_repeats})" if n < config.single_repeats else \
            f"Verse read {n}/{config.single_repeats} · next"
    if state.stage == STAGE_CHUNK_HALF:
        return "I've practised 50% hidden · continue"
    if state.stage == STAGE_CHUNK_FIRST_WORD:
        return "I've practised first-word cues · continue"
    return "Done"


class GuidedSession:
    """A guided run over one verse range of a document."""

    def __init__(self, document: Document, verse_range: VerseRange, chunk_size: int = CHUNK_SIZE, **repeats):
        if len(verse_range) == 0 or verse_range.start < 1 or verse_range.end > document.total_verses:
            raise RangeEmpty(document.slug, verse_range.start, verse_range.end)
        self.document = document
        self.range = verse_range
        self.verses = document.slice(verse_range)
        self.config = GuidedConfig(total_verses=len(self.verses), chunk_size=chunk_size, **repeats)
        self.state = initial_state(self.config)
        self.steps_taken = 0

    @property
    def complete(self) -> bool:
        return is_complete(self.state)

    @property
    def hide_policy(self) -> str:
        return active_hide_policy(self.state)

    def advance(self) -> StageState:
        if not self.complete:
            self.steps_taken += 1
        self.state = advance(self.state, self.config)
        return self.state

    def visible_verses(self) -> list[tuple[int, str]]:
        """(verse number, text) pairs the learner should see for this step."""
        if self.state.stage == STAGE_FULL_READ:
            indices = range(len(self.verses))
        elif self.complete:
            indices = range(0)
        else:
            start, end = chunk_bounds(self.state, self.config)
            indices = range(start, end)
        return [(self.range.start + i, self.verses[i]) for i in indices]

    def active_verse_number(self) -> int | None:
        index = active_verse_index(self.state)
        return None if index is None else self.range.start + index

    def recall_link(self) -> dict | None:
        """Suggested recall-session settings for the masked stages."""
        policy = self.hide_policy
        if policy == HIDE_NONE:
            return None
        start, end = chunk_bounds(self.state, self.config)
        return {
            "slug": self.document.slug,
            "mode": MODE_RECALL,
            "start": self.range.start + start,
            "end": self.range.start + end - 1,
            "hide": policy,
            "reps": RECALL_LINK_REPS,
        }
