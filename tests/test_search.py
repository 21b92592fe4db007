"""Tests for keyword scoring and the searcher."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from docassist.index.search import KeywordSearcher, score, score_record
from docassist.index.storage import ContentStore, StorageError
from tests.conftest import make_record


class TestScoreRecord:
    """Test the weighted field-match heuristic."""

    def test_keyword_and_title(self) -> None:
        """Keyword membership and title substring add 12 + 15."""
        record = make_record(title="Installation Guide", keywords=frozenset({"install"}))

        assert score_record(record, {"install"}) == 27

    def test_description_weight(self) -> None:
        record = make_record(title="x", description="Deploy with Docker")

        assert score_record(record, {"docker"}) == 6

    def test_content_occurrences(self) -> None:
        record = make_record(title="x", content="cache cache cache")

        assert score_record(record, {"cache"}) == 9

    def test_content_cap(self) -> None:
        """Occurrences beyond five add nothing."""
        five = make_record(title="x", content="api " * 5)
        six = make_record(title="x", content="api " * 6)

        assert score_record(five, {"api"}) == 15
        assert score_record(six, {"api"}) == 15

    def test_monotonic_up_to_cap(self) -> None:
        scores = [
            score_record(make_record(title="x", content="token " * count), {"token"})
            for count in range(0, 8)
        ]
        assert scores == sorted(scores)
        assert scores[5] == scores[6] == scores[7]

    def test_keyword_match_is_exact(self) -> None:
        """Keyword set membership, not substring."""
        record = make_record(title="x", keywords=frozenset({"installation"}))

        assert score_record(record, {"install"}) == 0

    def test_tokens_sum(self) -> None:
        record = make_record(title="Docker 部署", keywords=frozenset({"docker"}))

        assert score_record(record, {"docker", "部署"}) == 12 + 15 + 15

    def test_regex_metacharacters(self) -> None:
        record = make_record(title="x", content="a.b a.b axb")

        assert score_record(record, {"a.b"}) == 6


class TestScore:
    """Test ranking over a corpus."""

    def test_end_to_end_two_records(self) -> None:
        install = make_record(id="a", title="Installation Guide", keywords=frozenset({"install"}))
        other = make_record(id="b", title="Billing", content="invoices and payments")

        matches = score([install, other], {"install"}, limit=5)

        assert [match.record.id for match in matches] == ["a"]
        assert matches[0].score >= 27

    def test_sorted_descending(self) -> None:
        low = make_record(id="low", title="x", content="api")
        high = make_record(id="high", title="API reference")

        matches = score([low, high], {"api"}, limit=5)

        assert [match.record.id for match in matches] == ["high", "low"]

    def test_ties_keep_corpus_order(self) -> None:
        records = [make_record(id=str(i), title="x", content="sync") for i in range(4)]

        matches = score(records, {"sync"}, limit=10)

        assert [match.record.id for match in matches] == ["0", "1", "2", "3"]

    def test_limit(self) -> None:
        records = [make_record(id=str(i), title="x", content="sync") for i in range(4)]

        assert len(score(records, {"sync"}, limit=2)) == 2

    def test_zero_scores_excluded(self) -> None:
        records = [make_record(title="Unrelated")]

        assert score(records, {"nothing"}, limit=5) == []

    def test_empty_tokens(self) -> None:
        assert score([make_record(title="x")], set(), limit=5) == []


class TestKeywordSearcher:
    """Test KeywordSearcher against the content store."""

    def test_search(self, snapshot_path: Path) -> None:
        searcher = KeywordSearcher(ContentStore(snapshot_path))

        matches = searcher.search("How do I install?", top_k=3)

        assert matches
        assert matches[0].record.id == "installation"

    def test_search_cjk(self, snapshot_path: Path) -> None:
        searcher = KeywordSearcher(ContentStore(snapshot_path))

        matches = searcher.search("卸载", top_k=3)

        assert [match.record.id for match in matches] == ["uninstall"]

    def test_asearch(self, snapshot_path: Path) -> None:
        searcher = KeywordSearcher(ContentStore(snapshot_path))

        matches = asyncio.run(searcher.asearch("pricing", top_k=3))

        assert matches[0].record.id == "pricing"

    def test_storage_failure_behaves_as_empty(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A broken snapshot is reported once and yields no results."""
        searcher = KeywordSearcher(ContentStore(tmp_path / "missing.json"))

        with caplog.at_level(logging.DEBUG, logger="docassist.index.search"):
            assert searcher.search("install") == []
            assert searcher.search("install") == []

        errors = [record for record in caplog.records if record.levelno == logging.ERROR]
        assert len(errors) == 1

    def test_async_storage_failure(self) -> None:
        store = MagicMock()
        store.aload.side_effect = StorageError("boom")
        searcher = KeywordSearcher(store)

        assert asyncio.run(searcher.asearch("install")) == []
