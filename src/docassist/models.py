"""Core docassist data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Dict, FrozenSet, List, Mapping

_DOC_SUFFIXES = (".mdx", ".md")
_TEXT_FIELDS = ("title", "description", "path", "content")


@dataclass(frozen=True, slots=True)
class DocumentRecord:
    """A single documentation page as stored in the corpus snapshot."""

    id: str
    title: str
    description: str
    path: str
    content: str
    keywords: FrozenSet[str] = frozenset()
    frontmatter: Dict[str, Any] = field(default_factory=dict, compare=False)
    last_modified: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DocumentRecord":
        """Build a record from one snapshot entry.

        Raises ``ValueError`` when the entry lacks an id or carries
        non-string text fields.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Snapshot entry must be an object, got {type(data).__name__}")

        record_id = data.get("id")
        if not isinstance(record_id, str) or not record_id:
            raise ValueError("Snapshot entry is missing a string 'id'")

        values: Dict[str, str] = {}
        for name in _TEXT_FIELDS:
            value = data.get(name)
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise ValueError(f"Field '{name}' of entry '{record_id}' must be a string")
            values[name] = value

        keywords = data.get("keywords") or []
        if not isinstance(keywords, (list, tuple)):
            raise ValueError(f"Field 'keywords' of entry '{record_id}' must be a list")

        frontmatter = data.get("frontmatter") or {}
        if not isinstance(frontmatter, Mapping):
            raise ValueError(f"Field 'frontmatter' of entry '{record_id}' must be an object")

        return cls(
            id=record_id,
            keywords=frozenset(str(keyword) for keyword in keywords),
            frontmatter=dict(frontmatter),
            last_modified=str(data.get("lastModified") or ""),
            **values,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the snapshot representation of the record."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "path": self.path,
            "content": self.content,
            "frontmatter": dict(self.frontmatter),
            "keywords": sorted(self.keywords),
            "lastModified": self.last_modified,
        }


def build_link(path: str) -> str | None:
    """Turn a record path into a reference link for the rendered context.

    Empty paths and the ``#`` placeholder have no usable link.
    """
    path = (path or "").strip()
    if not path or path == "#":
        return None
    if path.startswith(("http://", "https://", "/")):
        return path

    pure = PurePosixPath(path)
    if pure.suffix in _DOC_SUFFIXES:
        pure = pure.with_suffix("")
    return f"/docs/{pure.as_posix()}"


@dataclass(slots=True)
class ScoredMatch:
    """Corpus record paired with its relevance score for one query."""

    record: DocumentRecord
    score: int
    section: str | None = None

    @property
    def title(self) -> str:
        return self.record.title

    @property
    def link(self) -> str | None:
        return build_link(self.record.path)


@dataclass(slots=True)
class SubQueryResult:
    """Ranked matches retrieved for one decomposed sub-query."""

    query: str
    results: List[ScoredMatch] = field(default_factory=list)

    @property
    def result_count(self) -> int:
        return len(self.results)
