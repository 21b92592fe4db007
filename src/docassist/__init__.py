"""Keyword retrieval and chat backend for documentation sites."""

__version__ = "0.1.0"
