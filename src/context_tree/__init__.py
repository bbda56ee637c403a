"""Ignore-aware, token-annotated summaries of codebase directory trees."""

__version__ = "0.1.0"
