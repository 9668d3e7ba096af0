"""Base adapter interface — Abstract classes for index and upstream connectors."""

from pypisift.adapters.base.adapter import AdapterHealth, SearchIndex
from pypisift.adapters.base.exceptions import AdapterError, IndexUnavailable, UpstreamUnavailable

__all__ = ["AdapterError", "AdapterHealth", "IndexUnavailable", "SearchIndex", "UpstreamUnavailable"]
