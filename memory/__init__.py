"""User profile persistence."""
