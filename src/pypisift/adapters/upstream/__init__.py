from pypisift.adapters.upstream.client import UpstreamClient

__all__ = ["UpstreamClient"]
