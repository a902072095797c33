"""
Exception hierarchy for the retrieval toolkit.

The core pipeline has no fatal error class: every exception defined here is
caught somewhere inside the toolkit and turned into a degraded result (fewer
sources, no citations). They exist so that leaf clients can report *why* they
failed, and so callers using a client directly can catch a single base type.
"""


class RetrievalToolkitError(Exception):
    """Base class for all errors raised by the toolkit."""


class SearchError(RetrievalToolkitError):
    """
    A web search provider could not produce results.

    Raised for transport failures, authentication errors, provider-level
    rejections and malformed payloads. 'SourceMerger' treats it as recoverable.
    """

    def __init__(self, message: str, provider: str = "", use_backup_provider: bool = False) -> None:
        super().__init__(message)
        self.provider = provider
        self.use_backup_provider = use_backup_provider


class ConfigurationError(RetrievalToolkitError, ValueError):
    """A required setting or secret is missing or invalid."""
