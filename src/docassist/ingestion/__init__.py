"""Source document loaders."""
