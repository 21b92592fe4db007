"""Corpus loading, scoring and snapshot generation."""
