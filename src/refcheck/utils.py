"""Utility helpers for turning raw citation text into search queries."""

from __future__ import annotations

import re

ENUMERATION_PATTERNS = (
    re.compile(r"^\[\d+\]\s*"),
    re.compile(r"^\d+\.\s*"),
    re.compile(r"^\(\d+\)\s*"),
)


def normalize_citation(line: str) -> str:
    """Strip a single leading enumeration marker and surrounding whitespace.

    Recognised markers are ``[12]``, ``12.`` and ``(12)``. Only the first
    marker is removed, so ``"[1] 2. Foo"`` becomes ``"2. Foo"``.
    """
    for pattern in ENUMERATION_PATTERNS:
        stripped, count = pattern.subn("", line, count=1)
        if count:
            return stripped.strip()
    return line.strip()


def split_citations(text: str) -> list[str]:
    """Split a pasted reference list into its non-blank lines."""
    return [line for line in text.splitlines() if line.strip()]
