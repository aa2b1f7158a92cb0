"""Split loosely formatted text into titled ``DynamicSection`` records.

Used for every block no specialized extractor claims, so nothing the
generator wrote is discarded.
"""

from __future__ import annotations

import re

from simcase.models import ContentKind, DynamicSection
from simcase.structuring.text_utils import (
    BULLET_RE,
    NUMBERED_RE,
    clean_inline,
    is_all_caps_title,
    strip_marker,
)

_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")
_MD_HEADING_RE = re.compile(r"^\s*#{1,6}\s+(.+?)\s*#*\s*$")
_EMPHASIS_RE = re.compile(r"^\s*(\*\*|__|\*|_)(\S(?:.*?\S)?)\1\s*:?\s*$")

SYNTHETIC_TITLE_WORDS = 3


def title_of(line: str) -> str | None:
    """Return the title when ``line`` reads as one, else None.

    A title is a markdown heading, an emphasis-wrapped line, a line ending
    with a colon, or an all-caps line.
    """
    stripped = line.strip()
    match = _MD_HEADING_RE.match(stripped) or _EMPHASIS_RE.match(stripped)
    if match is not None:
        return clean_inline(match.group(match.lastindex or 1)).rstrip(":").strip()
    if len(stripped) > 1 and stripped.endswith(":"):
        return clean_inline(strip_marker(stripped[:-1]))
    if is_all_caps_title(stripped):
        return stripped.rstrip(":").strip()
    return None


def _synthetic_title(line: str) -> str:
    words = clean_inline(strip_marker(line)).split()
    return " ".join(words[:SYNTHETIC_TITLE_WORDS]) + "..."


def _collect_items(lines: list[str], marker: re.Pattern[str]) -> list[str]:
    items: list[str] = []
    for line in lines:
        if marker.match(line) or not items:
            items.append(marker.sub("", line, count=1).strip())
        else:
            items[-1] = f"{items[-1]} {line.strip()}"
    return items


def _build_section(title: str, lines: list[str]) -> DynamicSection:
    majority = len(lines) / 2
    bullets = sum(1 for line in lines if BULLET_RE.match(line))
    numbered = sum(1 for line in lines if NUMBERED_RE.match(line))
    if bullets > majority:
        return DynamicSection(
            title=title,
            content=_collect_items(lines, BULLET_RE),
            content_kind=ContentKind.BULLET_LIST,
        )
    if numbered > majority:
        return DynamicSection(
            title=title,
            content=_collect_items(lines, NUMBERED_RE),
            content_kind=ContentKind.ORDERED_STEPS,
        )
    return DynamicSection(title=title, content="\n".join(line.strip() for line in lines))


def split(block: str, *, title: str | None = None) -> list[DynamicSection]:
    """Split ``block`` on blank lines into dynamic sections.

    ``title`` names the first untitled paragraph.  A paragraph holding only a
    title carries it to the next untitled paragraph; a title left pending
    becomes an empty text section.
    """
    sections: list[DynamicSection] = []
    pending = title.strip() if title and title.strip() else None
    if not block or not block.strip():
        return [DynamicSection(title=pending, content="")] if pending else []

    for paragraph in _PARAGRAPH_BREAK_RE.split(block.strip()):
        lines = [line for line in paragraph.splitlines() if line.strip()]
        if not lines:
            continue
        heading = title_of(lines[0])
        if heading is not None:
            if pending is not None:
                sections.append(DynamicSection(title=pending, content=""))
            if len(lines) == 1:
                pending = heading
                continue
            pending = None
            sections.append(_build_section(heading, lines[1:]))
            continue
        if pending is not None:
            heading, pending = pending, None
        else:
            heading = _synthetic_title(lines[0])
        sections.append(_build_section(heading, lines))

    if pending is not None:
        sections.append(DynamicSection(title=pending, content=""))
    return sections
