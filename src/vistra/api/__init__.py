"""HTTP API: root router, health endpoints and shared dependencies."""
