"""Adapter-specific exceptions."""


class AdapterError(Exception):
    """Base exception for adapter errors."""


class IndexUnavailable(AdapterError):
    """Raised when the search index cannot execute a query."""


class UpstreamUnavailable(AdapterError):
    """Raised when a remote search endpoint cannot be reached or answers with an error."""
