"""PyPISift — Legacy PyPI XML-RPC search served from a modern search index."""

__version__ = "0.1.0"
