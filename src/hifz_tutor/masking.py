"""Word masking for recall practice.

A policy decides which words of a verse are obscured before the learner
reveals it. Hidden words are rendered as placeholders of the same length so
the learner still sees how many words there are and roughly how long each is.
"""
from hifz_tutor.models import (
    HIDE_FIRST_WORD, HIDE_FULL, HIDE_HALF, HIDE_NONE, HIDE_POLICIES, HIDE_WORD,
    MaskedWord,
)

PLACEHOLDER_CHAR = "•"


def split_words(verse: str) -> list[str]:
    """Split verse text on whitespace, dropping empty tokens."""
    if not isinstance(verse, str):
        return []
    return verse.split()


def is_hidden(index: int, policy: str) -> bool:
    if policy in (HIDE_FULL, HIDE_WORD):
        return True
    if policy == HIDE_FIRST_WORD:
        return index > 0
    if policy == HIDE_HALF:
        return index % 2 == 1
    return False


def mask(verse: str, policy: str) -> list[MaskedWord]:
    """Classify each word of ``verse`` as hidden or visible under ``policy``.

    Unknown policies behave like ``none``. An empty verse gives an empty list.
    """
    if policy not in HIDE_POLICIES:
        policy = HIDE_NONE
    return [MaskedWord(word, is_hidden(i, policy)) for i, word in enumerate(split_words(verse))]


def placeholder(word: str) -> str:
    return PLACEHOLDER_CHAR * max(1, len(word))


def render(verse: str, policy: str, revealed: bool = False) -> str:
    """Render a verse for display. ``revealed`` shows every word regardless of policy."""
    words = mask(verse, policy)
    if revealed:
        return " ".join(w.word for w in words)
    return " ".join(placeholder(w.word) if w.hidden else w.word for w in words)


def reveal(masked: list[MaskedWord]) -> list[str]:
    return [w.word for w in masked]


def visible_count(masked: list[MaskedWord]) -> int:
    return sum(1 for w in masked if not w.hidden)
