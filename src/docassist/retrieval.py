"""Question -> context pipeline used by the chat endpoint."""

from __future__ import annotations

import asyncio
import logging
import math
from pathlib import Path
from typing import List, Protocol

from docassist.config import AppConfig
from docassist.formatting import (
    DEFAULT_MAX_CHARS,
    NO_RESULTS,
    SEARCH_FAILED,
    format_multi_results,
    format_search_results,
)
from docassist.index.hosted import HostedSearchClient
from docassist.index.search import KeywordSearcher
from docassist.index.storage import ContentStore
from docassist.models import ScoredMatch, SubQueryResult
from docassist.query import split_complex_query

LOGGER = logging.getLogger(__name__)


class SearchBackend(Protocol):
    async def asearch(self, query: str, *, top_k: int = 5) -> List[ScoredMatch]:
        ...


class Retriever:
    """Decomposes a question, searches each part and formats the context."""

    def __init__(
        self,
        backend: SearchBackend,
        *,
        max_queries: int = 3,
        max_chars: int = DEFAULT_MAX_CHARS,
    ) -> None:
        self.backend = backend
        self.max_queries = max_queries
        self.max_chars = max_chars

    async def multi_question_search(self, query: str, limit_per_query: int) -> List[SubQueryResult]:
        """Search every sub-query concurrently.

        A failing sub-query is logged and contributes nothing; sub-queries
        without results are dropped.
        """
        sub_queries = split_complex_query(query)[: self.max_queries]
        outcomes = await asyncio.gather(
            *(self.backend.asearch(sub_query, top_k=limit_per_query) for sub_query in sub_queries),
            return_exceptions=True,
        )

        results: List[SubQueryResult] = []
        for sub_query, outcome in zip(sub_queries, outcomes):
            if isinstance(outcome, BaseException):
                LOGGER.warning("Search failed for sub-query %r: %s", sub_query, outcome)
                continue
            if outcome:
                results.append(SubQueryResult(query=sub_query, results=list(outcome)))
        return results

    async def search_and_format(self, query: str, limit: int = 5, *, multi: bool = True) -> str:
        """Return the context string for ``query``. Never raises."""
        query = (query or "").strip()
        if not query:
            return NO_RESULTS

        try:
            if multi:
                sub_results = await self.multi_question_search(query, math.ceil(limit / 2))
                if len(sub_results) > 1:
                    LOGGER.debug("Multi-question search: %d sub-queries", len(sub_results))
                    return format_multi_results(sub_results, max_chars=self.max_chars)

            matches = await self.backend.asearch(query, top_k=limit)
            return format_search_results(matches, max_chars=self.max_chars)
        except Exception:
            LOGGER.exception("Retrieval failed for %r", query)
            return SEARCH_FAILED


def build_backend(config: AppConfig, base_dir: Path | None = None) -> SearchBackend:
    if config.search_backend == "hosted":
        return HostedSearchClient(config.hosted_search_url, timeout=config.hosted_search_timeout)
    return KeywordSearcher(ContentStore(config.resolve_snapshot_path(base_dir)))


def build_retriever(config: AppConfig, base_dir: Path | None = None) -> Retriever:
    return Retriever(
        build_backend(config, base_dir),
        max_queries=config.max_queries,
        max_chars=config.max_content_chars,
    )
