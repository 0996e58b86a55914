"""Core infrastructure: config-driven database, auth, errors, logging, permissions."""
