from pypisift.adapters.opensearch.adapter import OpenSearchIndex

__all__ = ["OpenSearchIndex"]
