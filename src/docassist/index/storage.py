"""JSON snapshot backed content store."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from pathlib import Path
from typing import Tuple

from docassist.models import DocumentRecord

LOGGER = logging.getLogger(__name__)

Corpus = Tuple[DocumentRecord, ...]


class StorageError(RuntimeError):
    """Raised when the corpus snapshot is missing or malformed."""


class ContentStore:
    """Loads the corpus snapshot once and keeps it for the process lifetime.

    The first ``load()`` reads and parses the snapshot; concurrent first
    callers block on a lock and receive the same result, so the file is read
    at most once. A failed load is remembered and re-raised without touching
    the file again.
    """

    def __init__(self, snapshot_path: Path) -> None:
        self.snapshot_path = Path(snapshot_path)
        self.read_count = 0
        self._lock = threading.Lock()
        self._corpus: Corpus | None = None
        self._error: StorageError | None = None

    @property
    def loaded(self) -> bool:
        return self._corpus is not None

    def load(self) -> Corpus:
        corpus = self._corpus
        if corpus is not None:
            return corpus

        with self._lock:
            if self._corpus is None and self._error is None:
                try:
                    self._corpus = self._read_snapshot()
                except StorageError as exc:
                    self._error = exc
            if self._error is not None:
                raise self._error
            return self._corpus  # type: ignore[return-value]

    async def aload(self) -> Corpus:
        """Async wrapper running ``load()`` off the event loop."""
        if self._corpus is not None:
            return self._corpus
        return await asyncio.to_thread(self.load)

    def _read_snapshot(self) -> Corpus:
        self.read_count += 1
        LOGGER.info("Loading content snapshot from %s", self.snapshot_path)
        try:
            raw = self.snapshot_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise StorageError(f"Snapshot not found: {self.snapshot_path}") from exc
        except OSError as exc:
            raise StorageError(f"Unable to read snapshot {self.snapshot_path}: {exc}") from exc

        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Snapshot {self.snapshot_path} is not valid JSON: {exc}") from exc

        if not isinstance(entries, list):
            raise StorageError(f"Snapshot {self.snapshot_path} must contain a list of records")

        records = []
        seen = set()
        for position, entry in enumerate(entries):
            try:
                record = DocumentRecord.from_dict(entry)
            except ValueError as exc:
                raise StorageError(f"Invalid record at position {position}: {exc}") from exc
            if record.id in seen:
                raise StorageError(f"Duplicate record id: {record.id}")
            seen.add(record.id)
            records.append(record)

        LOGGER.info("Loaded %d documents", len(records))
        return tuple(records)
