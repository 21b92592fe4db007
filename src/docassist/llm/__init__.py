"""Hosted language model access."""
