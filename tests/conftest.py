"""Shared fixtures for docassist tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest

from docassist.models import DocumentRecord


def make_record(**overrides: Any) -> DocumentRecord:
    fields: Dict[str, Any] = {
        "id": "page",
        "title": "Page",
        "description": "",
        "path": "documentation/page.mdx",
        "content": "",
        "keywords": frozenset(),
    }
    fields.update(overrides)
    return DocumentRecord(**fields)


SNAPSHOT_ENTRIES: List[Dict[str, Any]] = [
    {
        "id": "installation",
        "title": "Installation Guide",
        "description": "How to install the app",
        "path": "documentation/installation.mdx",
        "content": "Run the installer. To install offline, download the package.",
        "keywords": ["installation guide", "installation", "guide", "install"],
        "frontmatter": {"title": "Installation Guide"},
        "lastModified": "2024-01-01T00:00:00Z",
    },
    {
        "id": "uninstall",
        "title": "卸载说明",
        "description": "如何卸载应用",
        "path": "documentation/uninstall.mdx",
        "content": "打开设置，选择卸载。卸载后数据会被清除。",
        "keywords": ["卸载说明", "uninstall"],
        "frontmatter": {},
        "lastModified": "2024-01-02T00:00:00Z",
    },
    {
        "id": "pricing",
        "title": "Pricing",
        "description": "",
        "path": "documentation/pricing.mdx",
        "content": "Plans start at 10 dollars per month.",
        "keywords": ["pricing"],
        "frontmatter": {},
        "lastModified": "2024-01-03T00:00:00Z",
    },
]


@pytest.fixture
def snapshot_path(tmp_path: Path) -> Path:
    path = tmp_path / "content-db.json"
    path.write_text(json.dumps(SNAPSHOT_ENTRIES, ensure_ascii=False), encoding="utf-8")
    return path
