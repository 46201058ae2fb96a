"""Stores, providers and dispatchers for external systems."""
