"""Keyword-coverage heuristic deciding whether a provider title fits a citation."""

from __future__ import annotations

import re

CJK_RANGE = "一-龥"
COVERAGE_THRESHOLD = 0.6

_STRIP_PATTERN = re.compile(rf"[^A-Za-z0-9_\s{CJK_RANGE}]")
_ASCII_WORD = re.compile(r"^[a-zA-Z0-9]+$")
_CJK_CHAR = re.compile(rf"[{CJK_RANGE}]")


def _normalize(value: str) -> str:
    return _STRIP_PATTERN.sub(" ", value.lower())


def _keywords(normalized_title: str) -> list[str]:
    return [
        word
        for word in normalized_title.split()
        if (len(word) > 2 and _ASCII_WORD.match(word)) or _CJK_CHAR.search(word)
    ]


def keyword_coverage(query: str, title: str | None) -> float:
    """Fraction of the title's keywords found inside the citation text."""
    if not query or not title:
        return 0.0
    norm_query = _normalize(query)
    keywords = _keywords(_normalize(title))
    if not keywords:
        return 0.0
    hits = sum(1 for word in keywords if word in norm_query)
    return hits / len(keywords)


def is_match(query: str, title: str | None) -> bool:
    """Return True when ``title`` plausibly names the work cited by ``query``.

    The check is asymmetric: only the title's keywords are looked up in the
    query, so author names, venues and years around the title do not count
    against it. Short titles that yield too few keywords still match when the
    whole normalized title appears verbatim in the query.
    """
    if not query or not title:
        return False
    norm_title = _normalize(title)
    if not _keywords(norm_title):
        return False
    if keyword_coverage(query, title) > COVERAGE_THRESHOLD:
        return True
    return norm_title in _normalize(query)
