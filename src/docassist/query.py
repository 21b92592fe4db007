"""Split a user question that bundles several questions into sub-queries."""

from __future__ import annotations

import re
from typing import Callable, List, Sequence

QUESTION_MARKS = re.compile(r"[？?]")
DELIMITERS = re.compile(r"[，,；;]")

CHINESE_CONNECTIVES = (
    "还有",
    "另外",
    "以及",
    "和",
    "与",
    "或者",
    "或",
    "同时",
    "还想知道",
    "还想了解",
    "还有就是",
)
ENGLISH_CONNECTIVES = ("and", "also", "plus", "additionally", "furthermore")

# Queries this short are treated as one topic even when they contain commas.
MIN_DELIMITED_QUERY_CHARS = 20
MIN_DELIMITED_PART_CHARS = 5

Strategy = Callable[[str], List[str]]


def _connective_pattern(connective: str) -> re.Pattern[str]:
    if connective.isascii():
        return re.compile(rf"\b{re.escape(connective)}\b", re.IGNORECASE)
    return re.compile(re.escape(connective))


_CONNECTIVE_PATTERNS = [
    _connective_pattern(connective)
    for connective in CHINESE_CONNECTIVES + ENGLISH_CONNECTIVES
]

# Single-character connectives also start ordinary words (和弦, 或许), so only
# multi-character ones are stripped. Longest first so "还有就是" beats "还有".
_LEADING_CONNECTIVE = re.compile(
    r"^(?:{})\s*".format(
        "|".join(
            re.escape(word)
            for word in sorted(CHINESE_CONNECTIVES, key=len, reverse=True)
            if len(word) > 1
        )
        + "|"
        + "|".join(rf"{word}\b" for word in ENGLISH_CONNECTIVES)
    ),
    re.IGNORECASE,
)


def _clean(parts: Sequence[str]) -> List[str]:
    return [part.strip() for part in parts if part.strip()]


def _strip_leading_connective(part: str) -> str:
    stripped = _LEADING_CONNECTIVE.sub("", part, count=1).strip()
    return stripped or part


def split_on_question_marks(query: str) -> List[str]:
    if not QUESTION_MARKS.search(query):
        return []
    return [_strip_leading_connective(part) for part in _clean(QUESTION_MARKS.split(query))]


def split_on_connectives(query: str) -> List[str]:
    for pattern in _CONNECTIVE_PATTERNS:
        if pattern.search(query):
            parts = _clean(pattern.split(query))
            if len(parts) > 1:
                return parts
    return []


def split_on_delimiters(query: str) -> List[str]:
    if len(query) <= MIN_DELIMITED_QUERY_CHARS:
        return []
    parts = DELIMITERS.split(query)
    return [part.strip() for part in parts if len(part.strip()) > MIN_DELIMITED_PART_CHARS]


STRATEGIES: Sequence[Strategy] = (
    split_on_question_marks,
    split_on_connectives,
    split_on_delimiters,
)


def split_complex_query(query: str) -> List[str]:
    """Return the sub-queries of ``query``; never empty.

    Strategies run in order and the first that yields at least two parts
    wins. Otherwise the trimmed query is returned on its own.
    """
    normalized = (query or "").strip()
    for strategy in STRATEGIES:
        parts = strategy(normalized)
        if len(parts) > 1:
            return parts
    return [normalized]
