"""Text helpers: keyword extraction and MDX clean-up."""

from __future__ import annotations

import re
from typing import Dict, Set, Tuple

_LATIN_RUN = re.compile(r"[a-z0-9]+")
_ALPHA_RUN = re.compile(r"[a-z]+")
_DIGIT_RUN = re.compile(r"[0-9]+")
_CJK_RUN = re.compile(r"[一-龥]+")

_FRONTMATTER = re.compile(r"^---\n([\s\S]*?)\n---\n?([\s\S]*)$")
_IMPORT_LINE = re.compile(r"^import.*?;\n", re.MULTILINE)
_OPEN_TAG = re.compile(r"<([A-Za-z][A-Za-z0-9.]*)(\s+[^>]*)?/?>")
_CLOSE_TAG = re.compile(r"</[^>]+>")
_BLANK_LINES = re.compile(r"\n{3,}")
_QUOTES = re.compile(r"^[\"']|[\"']$")


def extract_keywords(text: str) -> Set[str]:
    """Split text into searchable tokens for mixed Latin/CJK input.

    Latin tokens longer than one character are kept whole and are also split
    into their letter and digit runs, so ``iphone16`` yields ``iphone16``,
    ``iphone`` and ``16``. CJK ideograph runs are kept as whole tokens.
    """
    if not text:
        return set()

    lower = text.lower()
    keywords: Set[str] = set()
    for token in _LATIN_RUN.findall(lower):
        if len(token) < 2:
            continue
        keywords.add(token)
        keywords.update(_ALPHA_RUN.findall(token))
        keywords.update(_DIGIT_RUN.findall(token))
    keywords.update(_CJK_RUN.findall(lower))
    return keywords


def count_occurrences(token: str, text: str) -> int:
    """Count non-overlapping literal occurrences of ``token`` in ``text``."""
    if not token:
        return 0
    return len(re.findall(re.escape(token), text))


def truncate(text: str, max_chars: int) -> str:
    """Cap text to ``max_chars`` characters; non-positive caps disable truncation."""
    if max_chars <= 0:
        return text
    return text[:max_chars]


def parse_frontmatter(block: str) -> Dict[str, str]:
    """Parse ``key: value`` lines of a frontmatter block, stripping quotes."""
    frontmatter: Dict[str, str] = {}
    for line in block.split("\n"):
        key, _, value = (part.strip() for part in line.partition(":"))
        if key and value:
            frontmatter[key] = _QUOTES.sub("", value)
    return frontmatter


def split_frontmatter(source: str) -> Tuple[Dict[str, str], str]:
    """Separate the leading ``---`` frontmatter block from the body."""
    match = _FRONTMATTER.match(source)
    if not match:
        return {}, source
    return parse_frontmatter(match.group(1)), match.group(2).strip()


def strip_mdx_markup(body: str) -> str:
    """Remove import statements and JSX tags, leaving readable text."""
    text = _IMPORT_LINE.sub("", body)
    text = _OPEN_TAG.sub("", text)
    text = _CLOSE_TAG.sub("", text)
    text = _BLANK_LINES.sub("\n\n", text)
    return text.strip()


def title_from_filename(filename: str) -> str:
    """Derive a display title, e.g. ``quick_start.mdx`` -> ``Quick Start``."""
    stem = filename.replace(".mdx", "").replace("_", " ")
    return " ".join(word[:1].upper() + word[1:] for word in stem.split(" "))
