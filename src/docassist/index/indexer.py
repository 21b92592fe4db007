"""Offline generation of the corpus snapshot."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from docassist.index.storage import StorageError
from docassist.ingestion.mdx_loader import DEFAULT_SECTION, build_record
from docassist.models import DocumentRecord
from docassist.utils.files import ensure_parent, iter_mdx_paths

LOGGER = logging.getLogger(__name__)


def find_mdx(paths: Sequence[Path]) -> list[Path]:
    """Find all MDX files under the given paths."""
    return list(iter_mdx_paths(paths))


@dataclass(slots=True)
class BuildStats:
    built: int = 0
    skipped: int = 0
    failed: int = 0
    processed_files: list[Path] = field(default_factory=list)


class SnapshotBuilder:
    """Turns a directory of MDX pages into the JSON snapshot."""

    def __init__(self, docs_dir: Path, *, section: str = DEFAULT_SECTION) -> None:
        self.docs_dir = Path(docs_dir)
        self.section = section

    def collect(self) -> tuple[List[DocumentRecord], BuildStats]:
        stats = BuildStats()
        records: List[DocumentRecord] = []
        seen: set[str] = set()

        for path in find_mdx([self.docs_dir]):
            stats.processed_files.append(path)
            try:
                record = build_record(path, root=self.docs_dir, section=self.section)
            except Exception as e:
                LOGGER.error(f"Failed to process {path}: {e}")
                stats.failed += 1
                continue

            if record is None:
                stats.failed += 1
                continue
            if record.id in seen:
                LOGGER.warning("Skipping %s: duplicate id %s", path, record.id)
                stats.skipped += 1
                continue

            seen.add(record.id)
            records.append(record)
            stats.built += 1

        if not records:
            LOGGER.warning("No MDX files found in %s", self.docs_dir)
        return records, stats

    def build(self, output: Path) -> BuildStats:
        records, stats = self.collect()
        write_snapshot(records, output)
        return stats


def write_snapshot(records: Sequence[DocumentRecord], output: Path) -> None:
    """Write records as pretty-printed UTF-8 JSON and verify by re-reading."""
    output = Path(output)
    ensure_parent(output)
    payload = [record.to_dict() for record in records]
    output.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

    try:
        written = json.loads(output.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise StorageError(f"Snapshot verification failed for {output}: {exc}") from exc
    if len(written) != len(payload):
        raise StorageError(f"Snapshot verification failed for {output}: record count mismatch")
    LOGGER.info("Wrote %d documents to %s", len(payload), output)
