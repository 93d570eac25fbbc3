"""Exception hierarchy for the prior-art ranker."""


class PriorArtError(Exception):
    """Base class for all prior-art ranker errors."""


class ConfigurationError(PriorArtError, ValueError):
    """A required setting (API key, URL) is missing or invalid."""


class SourceError(PriorArtError):
    """An external patent database returned an unusable response."""

    def __init__(self, source: str, message: str):
        super().__init__(f"[{source}] {message}")
        self.source = source


class PersistenceError(PriorArtError):
    """Ranked results could not be written to or read from storage."""
