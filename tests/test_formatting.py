"""Tests for context formatting."""

from __future__ import annotations

from docassist.formatting import (
    ANALYSIS_HEADING,
    CLOSING_LINE,
    CONTEXT_HEADER,
    NO_RESULTS,
    deduplicate_matches,
    format_multi_results,
    format_search_results,
    format_sections,
    render_match,
)
from docassist.models import ScoredMatch, SubQueryResult
from tests.conftest import make_record


def _match(id: str, title: str, path: str = "", content: str = "body", score: int = 10, section=None) -> ScoredMatch:
    return ScoredMatch(
        record=make_record(id=id, title=title, path=path, content=content),
        score=score,
        section=section,
    )


class TestRenderMatch:
    """Test single block rendering."""

    def test_block_layout(self) -> None:
        match = _match("a", "Install", path="documentation/install.mdx", content="  Step one  ")

        block = render_match(1, match)

        assert block == "## 文档 1: Install\n\nStep one\n链接: /docs/documentation/install\n\n---"

    def test_section_annotation(self) -> None:
        block = render_match(2, _match("a", "Install", section="FAQ"))

        assert block.startswith("## 文档 2: Install (FAQ)")

    def test_link_omitted_without_path(self) -> None:
        assert "链接" not in render_match(1, _match("a", "Install", path=""))
        assert "链接" not in render_match(1, _match("a", "Install", path="#"))

    def test_content_capped(self) -> None:
        block = render_match(1, _match("a", "Long", content="字" * 3000), max_chars=1500)

        assert block.count("字") == 1500


class TestFormatSections:
    """Test single-query formatting."""

    def test_empty(self) -> None:
        assert format_sections([]) == NO_RESULTS
        assert format_sections(None) == NO_RESULTS

    def test_malformed_entries_skipped(self) -> None:
        assert format_sections(["nope", 3]) == NO_RESULTS  # type: ignore[list-item]

    def test_numbering_and_separator(self) -> None:
        text = format_sections([_match("a", "First"), _match("b", "Second")])

        assert "## 文档 1: First" in text
        assert "## 文档 2: Second" in text
        assert text.count("---") == 2

    def test_search_results_wrapper(self) -> None:
        text = format_search_results([_match("a", "First")])

        assert text.startswith(CONTEXT_HEADER)
        assert text.endswith(CLOSING_LINE)
        assert format_search_results([]) == NO_RESULTS


class TestDeduplicate:
    """Test (link, title) deduplication."""

    def test_first_occurrence_kept(self) -> None:
        first = _match("a", "Install", path="/docs/install", score=30)
        duplicate = _match("a2", "Install", path="/docs/install", score=99)
        other = _match("b", "Remove", path="/docs/remove")

        unique = deduplicate_matches([first, other, duplicate])

        assert unique == [first, other]
        assert unique[0].score == 30

    def test_same_title_different_link_kept(self) -> None:
        a = _match("a", "Overview", path="/docs/a")
        b = _match("b", "Overview", path="/docs/b")

        assert deduplicate_matches([a, b]) == [a, b]

    def test_idempotent(self) -> None:
        matches = [_match("a", "A", "/a"), _match("b", "B", "/b"), _match("c", "A", "/a")]

        once = deduplicate_matches(matches)

        assert deduplicate_matches(once) == once


class TestFormatMultiResults:
    """Test aggregated multi-query formatting."""

    def test_empty(self) -> None:
        assert format_multi_results([]) == NO_RESULTS
        assert format_multi_results(None) == NO_RESULTS
        assert format_multi_results([SubQueryResult(query="q")]) == NO_RESULTS

    def test_analysis_and_dedup(self) -> None:
        shared = _match("a", "Install", path="/docs/install")
        sub_results = [
            SubQueryResult(query="如何安装", results=[shared]),
            SubQueryResult(query="怎么卸载", results=[shared, _match("b", "Remove", path="/docs/remove")]),
        ]

        text = format_multi_results(sub_results)

        assert text.startswith(CONTEXT_HEADER)
        assert ANALYSIS_HEADING in text
        assert '1. "如何安装" (找到 1 个结果)' in text
        assert '2. "怎么卸载" (找到 2 个结果)' in text
        assert text.count("## 文档 ") == 2
        assert "## 文档 2: Remove" in text
        assert text.endswith(CLOSING_LINE)

    def test_single_sub_query_has_no_analysis(self) -> None:
        text = format_multi_results([SubQueryResult(query="q", results=[_match("a", "A")])])

        assert ANALYSIS_HEADING not in text
        assert "## 文档 1: A" in text
