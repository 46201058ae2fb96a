"""Deterministic outfit logic and input validation."""
