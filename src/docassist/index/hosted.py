"""Client for a hosted full-text search endpoint."""

from __future__ import annotations

import logging
from typing import Any, List

import httpx

from docassist.models import DocumentRecord, ScoredMatch

LOGGER = logging.getLogger(__name__)

UNTITLED = "无标题"


def adapt_hosted_results(payload: Any, limit: int) -> List[ScoredMatch]:
    """Map a hosted search response onto scored matches.

    The service answers with ``{"results": [...]}`` or a bare list of
    ``{id, type, content, url, section}`` items. It has no title field, so the
    first content line is used. Scores are derived from rank.
    """
    if isinstance(payload, dict):
        items = payload.get("results") or []
    elif isinstance(payload, list):
        items = payload
    else:
        items = []
    if not isinstance(items, list):
        items = []

    matches: List[ScoredMatch] = []
    for index, item in enumerate(items[: max(limit, 0)]):
        if not isinstance(item, dict):
            continue
        content = item.get("content") or ""
        if not isinstance(content, str):
            content = str(content)
        title = content.split("\n")[0].strip() or UNTITLED
        section = item.get("section")
        url = item.get("url")

        record = DocumentRecord(
            id=str(item.get("id") or f"result-{index}"),
            title=title,
            description="",
            path=url if isinstance(url, str) and url.strip() else "#",
            content=content,
            frontmatter={"type": item.get("type") or "document"},
        )
        matches.append(
            ScoredMatch(
                record=record,
                score=max(limit - index, 1),
                section=section if isinstance(section, str) and section else None,
            )
        )
    return matches


class HostedSearchClient:
    """Searches a hosted ``/api/search`` endpoint with a bounded timeout.

    Failures are logged and reported as zero results.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def asearch(self, query: str, *, top_k: int = 5) -> List[ScoredMatch]:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            ) as client:
                response = await client.get("/api/search", params={"query": query})
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            LOGGER.warning("Hosted search failed for %r: %s", query, exc)
            return []
        return adapt_hosted_results(payload, top_k)
