"""HTTP API and scheduler."""
