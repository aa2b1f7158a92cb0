"""Keyword-priority classification of free text into topical buckets."""

from __future__ import annotations

from simcase.models import Category
from simcase.structuring.patterns import CATEGORY_PATTERNS


def classify(text: str) -> Category:
    """Return the bucket ``text`` belongs to.

    Total and deterministic: patterns are tried in the fixed priority order
    of ``CATEGORY_PATTERNS`` and the first hit wins.  Text matching nothing
    falls back to ``Category.OVERVIEW``.
    """
    if not text:
        return Category.OVERVIEW
    for category, patterns in CATEGORY_PATTERNS.items():
        for pattern in patterns:
            if pattern.search(text):
                return category
    return Category.OVERVIEW
