"""Outfit orchestration, recommenders and garment analysis."""
