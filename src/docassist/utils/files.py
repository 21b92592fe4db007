"""Utility helpers for working with files."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator

DOC_SUFFIX = ".mdx"


def iter_mdx_paths(inputs: Iterable[Path]) -> Iterator[Path]:
    """Yield MDX paths from input paths, descending into directories."""
    for item in inputs:
        if item.is_dir():
            yield from iter_mdx_paths(sorted(child for child in item.rglob(f"*{DOC_SUFFIX}")))
        elif item.is_file() and item.suffix.lower() == DOC_SUFFIX:
            yield item


def ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
