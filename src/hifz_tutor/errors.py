"""Exceptions raised by the tutor engine."""


class TutorError(Exception):
    """Base class for all tutor errors."""


class ConfigError(TutorError):
    """Invalid engine configuration (chunk size, repeat counts)."""


class RangeEmpty(TutorError):
    """A verse range resolved to zero verses."""

    def __init__(self, slug: str = "", start: int | None = None, end: int | None = None):
        self.slug = slug
        self.start = start
        self.end = end
        super().__init__(f"No verses to practise in {slug or 'document'} ({start}-{end})")


class DocumentNotFound(TutorError):
    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Unknown document: {slug!r}")


class StoreWriteFailed(TutorError):
    """Saving a session result failed. Recoverable, never retried automatically."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Could not save session: {reason}")


class StoreReadFailed(TutorError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Could not load sessions: {reason}")
