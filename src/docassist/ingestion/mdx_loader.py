"""MDX loading utilities for the snapshot generator."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List

from docassist.models import DocumentRecord
from docassist.utils.text import split_frontmatter, strip_mdx_markup, title_from_filename

LOGGER = logging.getLogger(__name__)

DEFAULT_SECTION = "documentation"


def read_mdx(path: Path) -> str | None:
    """Return the file text, or ``None`` if it cannot be read."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        LOGGER.error("Failed to read %s: %s", path, exc)
        return None


def build_keywords(title: str, description: str, tags: str, filename: str) -> List[str]:
    """Lowercase keyword tags derived from page metadata."""
    candidates: Iterable[str] = [
        title,
        *title.split(" "),
        description,
        *(tag.strip() for tag in tags.split(",")),
        filename.replace(".mdx", "").replace("_", " "),
    ]
    keywords = {candidate.lower() for candidate in candidates if candidate}
    return sorted(keywords)


def build_record(path: Path, *, root: Path | None = None, section: str = DEFAULT_SECTION) -> DocumentRecord | None:
    """Produce a corpus record for one MDX file."""
    source = read_mdx(path)
    if not source:
        return None

    frontmatter, body = split_frontmatter(source)
    title = frontmatter.get("title") or title_from_filename(path.name)
    description = frontmatter.get("description", "")
    relative = path.relative_to(root).as_posix() if root else path.name
    mtime = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)

    return DocumentRecord(
        id=path.stem,
        title=title,
        description=description,
        path=f"{section}/{relative}" if section else relative,
        content=strip_mdx_markup(body),
        keywords=frozenset(
            build_keywords(title, description, frontmatter.get("keywords", ""), path.name)
        ),
        frontmatter=dict(frontmatter),
        last_modified=mtime.isoformat(),
    )
