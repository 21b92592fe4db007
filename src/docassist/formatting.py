"""Render ranked matches into the context block injected into the prompt."""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from docassist.models import ScoredMatch, SubQueryResult
from docassist.utils.text import truncate

LOGGER = logging.getLogger(__name__)

NO_RESULTS = "暂无相关文档内容。"
SEARCH_FAILED = "搜索过程中出现错误，将基于一般知识回答您的问题。"
CONTEXT_HEADER = "以下是相关的文档内容："
ANALYSIS_HEADING = "## 查询分析"
CLOSING_LINE = "请基于以上文档内容回答用户的问题。如果文档中没有直接相关的信息，请说明并提供一般性的建议。"

DEFAULT_MAX_CHARS = 1500


def _valid(matches: Iterable[object] | None) -> List[ScoredMatch]:
    if not matches:
        return []
    valid = []
    for match in matches:
        if isinstance(match, ScoredMatch):
            valid.append(match)
        else:
            LOGGER.debug("Skipping malformed match: %r", match)
    return valid


def render_match(index: int, match: ScoredMatch, *, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """Render one match as a numbered block ending with a horizontal rule."""
    section = f" ({match.section})" if match.section else ""
    body = truncate(match.record.content, max_chars).strip()
    link = match.link
    link_line = f"\n链接: {link}" if link else ""
    return f"## 文档 {index}: {match.title}{section}\n\n{body}{link_line}\n\n---"


def format_sections(
    matches: Sequence[ScoredMatch] | None, *, max_chars: int = DEFAULT_MAX_CHARS
) -> str:
    matches = _valid(matches)
    if not matches:
        return NO_RESULTS
    return "\n\n".join(
        render_match(index, match, max_chars=max_chars)
        for index, match in enumerate(matches, start=1)
    )


def format_search_results(
    matches: Sequence[ScoredMatch] | None, *, max_chars: int = DEFAULT_MAX_CHARS
) -> str:
    """Context string for a single query."""
    matches = _valid(matches)
    if not matches:
        return NO_RESULTS
    sections = format_sections(matches, max_chars=max_chars)
    return f"{CONTEXT_HEADER}\n\n{sections}\n\n{CLOSING_LINE}"


def deduplicate_matches(matches: Iterable[ScoredMatch]) -> List[ScoredMatch]:
    """Drop later matches sharing the (link, title) pair of an earlier one."""
    seen = set()
    unique = []
    for match in matches:
        key = (match.link, match.title)
        if key in seen:
            continue
        seen.add(key)
        unique.append(match)
    return unique


def format_multi_results(
    sub_results: Sequence[SubQueryResult] | None, *, max_chars: int = DEFAULT_MAX_CHARS
) -> str:
    """Context string for a decomposed query.

    Matches from all sub-queries are merged and deduplicated; when more than
    one sub-query ran, a short analysis lists each with its raw result count.
    """
    sub_results = [item for item in sub_results or [] if isinstance(item, SubQueryResult)]
    unique = deduplicate_matches(
        match for item in sub_results for match in _valid(item.results)
    )
    if not unique:
        return NO_RESULTS

    parts = [CONTEXT_HEADER]
    if len(sub_results) > 1:
        analysis = "\n".join(
            f'{index}. "{item.query}" (找到 {item.result_count} 个结果)'
            for index, item in enumerate(sub_results, start=1)
        )
        parts.append(f"{ANALYSIS_HEADING}\n{analysis}")
    parts.append(format_sections(unique, max_chars=max_chars))
    parts.append(CLOSING_LINE)
    return "\n\n".join(parts)
