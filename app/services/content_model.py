"""
Line classification for generated statement-of-work bodies.

The completion API answers with loosely markdown-flavoured text. Every output
format (PDF, DOCX, HTML preview) styles that text the same way, so the rules
that decide what a line *is* live here and nowhere else.

Rules, in priority order per line:

1. Blank          — empty or whitespace-only
2. Table          — a run of >= 2 lines whose trimmed text starts with ``|``
                    (header row, separator row, data rows)
3. SectionHeader  — ``#``/``##`` heading, or an ALL CAPS line (optionally
                    ending in ``:``) of at least 3 characters
4. Subheader      — ``###``/``####`` heading, or a line wrapped in ``**``
5. Body           — anything else, verbatim

Public API
----------
classify(body)  -> Iterator[Block]
split_cells(row) -> List[str]
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator, List, Union

_LINE_BREAK_RE = re.compile(r"\r?\n")
_SECTION_MARKER_RE = re.compile(r"^#{1,2}\s+")
_SUBHEADER_MARKER_RE = re.compile(r"^#{3,4}\s+")
_ALL_CAPS_RE = re.compile(r"^[A-Z ]{3,}:?$")
_BOLD_LINE_RE = re.compile(r"^\*\*.*\*\*$")


# ---------------------------------------------------------------------------
# Block types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Blank:
    """One vertical blank unit."""


@dataclass(frozen=True)
class Table:
    headers: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)


@dataclass(frozen=True)
class SectionHeader:
    text: str


@dataclass(frozen=True)
class Subheader:
    text: str


@dataclass(frozen=True)
class Body:
    text: str


Block = Union[Blank, Table, SectionHeader, Subheader, Body]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _is_table_line(line: str) -> bool:
    return line.strip().startswith("|")


def split_cells(row: str) -> List[str]:
    """
    Split a pipe-delimited row into stripped cell values.

    Every empty field is dropped, wherever it sits in the row, so a header
    row yields exactly its non-empty cells. A data row may come back empty.
    """
    return [cell.strip() for cell in row.split("|") if cell.strip()]


def _classify_line(line: str) -> Block:
    stripped = line.strip()

    if _SECTION_MARKER_RE.match(line) or _ALL_CAPS_RE.match(stripped):
        text = _SECTION_MARKER_RE.sub("", line).strip()
        if text.endswith(":"):
            text = text[:-1].rstrip()
        return SectionHeader(text)

    if _SUBHEADER_MARKER_RE.match(line) or _BOLD_LINE_RE.match(stripped):
        text = _SUBHEADER_MARKER_RE.sub("", line).replace("**", "").strip()
        return Subheader(text)

    return Body(line)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def classify(body: str) -> Iterator[Block]:
    """
    Yield the blocks of *body* in source order.

    A table block replaces its whole source span. A single pipe-prefixed line
    is not a table and is classified by the remaining rules.
    """
    if not body:
        return

    lines = _LINE_BREAK_RE.split(body)
    i = 0
    while i < len(lines):
        line = lines[i]

        if not line.strip():
            yield Blank()
            i += 1
            continue

        if _is_table_line(line):
            end = i
            while end < len(lines) and _is_table_line(lines[end]):
                end += 1
            run = lines[i:end]
            if len(run) >= 2:
                # run[1] is the |---|---| separator; it is never validated
                yield Table(
                    headers=split_cells(run[0]),
                    rows=[split_cells(row) for row in run[2:]],
                )
                i = end
                continue

        yield _classify_line(line)
        i += 1
