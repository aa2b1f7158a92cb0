"""Line-level helpers shared by the extractors and the router.

Generated cases are loose markdown: ``- Label: value`` bullets with
indented children, ``###`` sub-headings, bold or all-caps lead-in lines.
These helpers normalize that shape without interpreting it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

MARKER_RE = re.compile(r"^\s*(?:[•\-*+]|\d+[.)]|\(\d+\))\s+")
BULLET_RE = re.compile(r"^\s*[•\-*]\s+")
NUMBERED_RE = re.compile(r"^\s*(?:\d+[.)]|\(\d+\))\s+")
SUBHEADING_RE = re.compile(r"^\s*#{3,6}\s+(.+?)\s*#*\s*$")
BOLD_LINE_RE = re.compile(r"^\s*(?:\*\*|__)(\S(?:.*?\S)?)(?:\*\*|__)\s*:?\s*$")
ALL_CAPS_RE = re.compile(r"^[A-Z][A-Z\s&/\-]{2,}:?$")
LABEL_RE = re.compile(r"^([A-Za-z][A-Za-z0-9 /&()'.\-]{0,60}?)\s*:\s*(.*)$")

_INLINE_MARKUP_RE = re.compile(r"(\*\*|__|`)")
_LIST_SPLIT_RE = re.compile(r"[,;](?![^()]*\))")
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+(?=[A-Z0-9\"'])")
_CONJUNCTION_RE = re.compile(r"^(?:and|or)\s+", re.IGNORECASE)


@dataclass
class Entry:
    """One top-level line of a block plus its indented continuation lines."""

    label: str
    value: str
    children: list[str] = field(default_factory=list)
    raw: list[str] = field(default_factory=list)


def clean_inline(text: str) -> str:
    """Drop bold/code markup and surrounding whitespace."""
    return _INLINE_MARKUP_RE.sub("", text).strip()


def strip_marker(line: str) -> str:
    return MARKER_RE.sub("", line, count=1).strip()


def indent_of(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


def strip_quotes(text: str) -> str:
    return text.strip().strip("\"'“”").strip()


def split_label(line: str) -> tuple[str, str] | None:
    """Split ``Label: value``; returns None when the line has no short label."""
    match = LABEL_RE.match(clean_inline(strip_marker(line)))
    if match is None:
        return None
    label = match.group(1).strip()
    if len(label.split()) > 8:
        return None
    return label, match.group(2).strip()


def entries(text: str) -> list[Entry]:
    """Group ``text`` into top-level entries with their indented children."""
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return []
    base = min(indent_of(line) for line in lines)
    result: list[Entry] = []
    for line in lines:
        if result and indent_of(line) > base:
            result[-1].children.append(clean_inline(strip_marker(line)))
            result[-1].raw.append(line)
            continue
        parts = split_label(line)
        if parts is None:
            result.append(Entry(label="", value=clean_inline(strip_marker(line)), raw=[line]))
        else:
            result.append(Entry(label=parts[0], value=parts[1], raw=[line]))
    return result


def subheading_of(line: str) -> str | None:
    """Return the heading text when ``line`` is a ``###`` or bold lead-in line."""
    match = SUBHEADING_RE.match(line) or BOLD_LINE_RE.match(line)
    if match is None:
        return None
    return clean_inline(match.group(1)).rstrip(":").strip()


def subsections(text: str) -> list[tuple[str, str]]:
    """Split ``text`` on sub-headings; a leading untitled part has heading ``""``."""
    result: list[tuple[str, list[str]]] = [("", [])]
    for line in text.splitlines():
        heading = subheading_of(line)
        if heading is not None:
            result.append((heading, []))
        else:
            result[-1][1].append(line)
    return [
        (heading, "\n".join(body).strip())
        for heading, body in result
        if heading or "\n".join(body).strip()
    ]


def list_items(text: str) -> list[str]:
    """Return the top-level items of a list block.

    Nested items are folded into their parent item, ``; ``-joined.  Text
    with no list markers yields one item per non-blank line.
    """
    items: list[str] = []
    for entry in entries(text):
        head = clean_inline(strip_marker(entry.raw[0]))
        if entry.children:
            head = f"{head} {'; '.join(entry.children)}".strip()
        if head:
            items.append(head)
    return items


def split_list(text: str) -> list[str]:
    """Split an inline ``a, b; c`` list, ignoring separators inside parentheses."""
    items = []
    for part in _LIST_SPLIT_RE.split(text):
        item = _CONJUNCTION_RE.sub("", part.strip().rstrip(".").strip())
        if item:
            items.append(item[0].upper() + item[1:])
    return items


def sentences(text: str) -> list[str]:
    return [part.strip() for part in _SENTENCE_SPLIT_RE.split(text.strip()) if part.strip()]


def is_all_caps_title(line: str) -> bool:
    return bool(ALL_CAPS_RE.match(line.strip()))
