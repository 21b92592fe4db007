"""Keyword search over the in-memory corpus."""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from docassist.index.storage import ContentStore, Corpus, StorageError
from docassist.models import DocumentRecord, ScoredMatch
from docassist.utils.text import count_occurrences, extract_keywords

LOGGER = logging.getLogger(__name__)

KEYWORD_WEIGHT = 12
TITLE_WEIGHT = 15
DESCRIPTION_WEIGHT = 6
CONTENT_WEIGHT = 3
# Long pages should not win on repetition alone.
MAX_CONTENT_HITS = 5


def score_record(record: DocumentRecord, tokens: Iterable[str]) -> int:
    """Weighted field-match score of one record against a token set."""
    title = record.title.lower()
    description = record.description.lower()
    content = record.content.lower()

    score = 0
    for token in tokens:
        if token in record.keywords:
            score += KEYWORD_WEIGHT
        if token in title:
            score += TITLE_WEIGHT
        if token in description:
            score += DESCRIPTION_WEIGHT
        hits = count_occurrences(token, content)
        score += min(hits, MAX_CONTENT_HITS) * CONTENT_WEIGHT
    return score


def score(corpus: Sequence[DocumentRecord], tokens: Iterable[str], *, limit: int) -> List[ScoredMatch]:
    """Rank corpus records by score, dropping zero scores.

    Ties keep corpus order since ``sorted`` is stable.
    """
    tokens = [token for token in tokens if token]
    if not tokens or limit <= 0:
        return []

    matches = []
    for record in corpus:
        value = score_record(record, tokens)
        if value > 0:
            matches.append(ScoredMatch(record=record, score=value))

    matches = sorted(matches, key=lambda match: match.score, reverse=True)
    return matches[:limit]


class KeywordSearcher:
    """High-level API to query the content store."""

    def __init__(self, store: ContentStore) -> None:
        self.store = store
        self._failure_reported = False

    def corpus(self) -> Corpus:
        try:
            return self.store.load()
        except StorageError as exc:
            self._report_failure(exc)
            return ()

    async def acorpus(self) -> Corpus:
        try:
            return await self.store.aload()
        except StorageError as exc:
            self._report_failure(exc)
            return ()

    def search(self, query: str, *, top_k: int = 5) -> List[ScoredMatch]:
        return score(self.corpus(), extract_keywords(query), limit=top_k)

    async def asearch(self, query: str, *, top_k: int = 5) -> List[ScoredMatch]:
        corpus = await self.acorpus()
        return score(corpus, extract_keywords(query), limit=top_k)

    def _report_failure(self, exc: StorageError) -> None:
        if self._failure_reported:
            LOGGER.debug("Content store unavailable: %s", exc)
            return
        self._failure_reported = True
        LOGGER.error("Content store unavailable, searching an empty corpus: %s", exc)
