"""Adapter layer — Connectors for the search index and remote search servers.

Built-in adapters:
  - opensearch: OpenSearch v2+ index executor for hosted repositories
  - upstream: remote PyPI-compatible XML-RPC servers for proxy repositories

Implement ``SearchIndex`` to run searches against another index backend.
"""
