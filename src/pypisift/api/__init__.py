"""HTTP API — XML-RPC search endpoint and health checks."""
