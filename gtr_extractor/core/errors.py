"""Exception hierarchy for the extractor."""

from typing import Optional


class ExtractorError(Exception):
    """Base class for all extractor errors."""


class ConfigError(ExtractorError):
    """Configuration file is missing or invalid."""


class PayloadError(ExtractorError):
    """A JSON payload lacks the envelope needed to parse it."""


class SearchAbortedError(ExtractorError):
    """
    First search request failed.

    Without the first result envelope the page count is unknown, so the
    whole run stops.
    """

    def __init__(self, url: str, cause: Optional[BaseException] = None):
        self.url = url
        self.cause = cause
        reason = f"{type(cause).__name__}: {cause}" if cause else "unknown error"
        super().__init__(f"Search failed for {url} ({reason})")
