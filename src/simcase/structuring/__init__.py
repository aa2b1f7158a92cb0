"""Deterministic structuring of generated case text.

Usage::

    from simcase.structuring import route

    doc = route(raw_text, title="")
    doc.findings.vital_signs

- Router: ``route``, ``extract_title``, ``summarize``
- Classification: ``classify``
- Splitting: ``split``
- Heuristic: ``is_likely_abnormal``
"""

from __future__ import annotations

from simcase.structuring.abnormality import is_likely_abnormal
from simcase.structuring.classifier import classify
from simcase.structuring.router import extract_title, route, summarize
from simcase.structuring.splitter import split

__all__ = [
    "classify",
    "extract_title",
    "is_likely_abnormal",
    "route",
    "split",
    "summarize",
]
