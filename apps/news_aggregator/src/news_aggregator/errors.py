"""Aggregation error taxonomy."""

from __future__ import annotations


class AggregatorError(Exception):
    """Base class for pipeline errors."""


class FetchError(AggregatorError):
    """A provider call failed: transport error, bad status or malformed envelope."""

    def __init__(self, provider: str, message: str, *, status_code: int | None = None) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status_code = status_code


class PersistenceError(AggregatorError):
    """Writing an article failed for a reason other than a known duplicate."""


class DuplicateArticleError(PersistenceError):
    """The article URL is already stored; expected outcome, counted as skipped."""

    def __init__(self, url: str) -> None:
        super().__init__(f"article already stored: {url}")
        self.url = url


class SlugCollisionError(PersistenceError):
    """Generated slug clashed with an existing article."""


class ConfigurationGapError(AggregatorError):
    """A provider is enabled but no Source row carries its identifier."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"no source configured for provider {identifier!r}")
        self.identifier = identifier


class StorageUnavailableError(AggregatorError):
    """The storage layer could not be reached for any attempt of a run."""
