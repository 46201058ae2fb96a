"""Application wiring, configuration, errors and logging."""
