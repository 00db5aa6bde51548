"""core/dsl/segmenter.py — Split a program into statements and call segments.

    track(instrument="Serum").newClip(bar=1) track(1).setMute(mute=true)
    └──────────── statement 0 ─────────────┘ └──── statement 1 ───────┘
    └─── call ───────────────┘└── call ───┘

A statement ends at whitespace outside strings and brackets, unless the next
non-blank character is ``.`` (or the last one was), which lets a chain
continue on the next line::

    track(instrument="Piano")
        .newClip(bar=1)
        .setVolume(volume_db=-6)
"""

from __future__ import annotations

import re

from core.dsl.errors import DSLError, DSLSyntaxError
from core.dsl.scanner import Scanner, find_closing
from core.dsl.types import CallSegment, Statement

_CALL_HEAD_RE = re.compile(r"\s*(\.)?\s*([A-Za-z_][A-Za-z0-9_]*)\s*\(")


def preview(text: str, limit: int = 200) -> str:
    """Single-line excerpt of ``text`` capped at ``limit`` characters."""
    flat = " ".join(text.split())
    if len(flat) <= limit:
        return flat
    return flat[: limit - 3] + "..."


def split_statements(program: str) -> list[str]:
    """Split a program into top-level statement texts.

    Raises:
        DSLSyntaxError: On unterminated strings or unbalanced brackets.
    """
    statements: list[str] = []
    sc = Scanner()
    start: int | None = None
    i = 0
    n = len(program)
    while i < n:
        ch = program[i]
        if ch.isspace() and sc.at_top_level:
            j = i
            while j < n and program[j].isspace():
                j += 1
            if start is not None and (program[i - 1] == "." or (j < n and program[j] == ".")):
                # chain continues across the whitespace
                i = j
                continue
            if start is not None:
                statements.append(program[start:i])
                start = None
            i = j
            continue
        if start is None:
            start = i
        sc.feed(ch, i)
        i += 1
    sc.finish(preview(program))
    if start is not None:
        statements.append(program[start:])
    return statements


def split_calls(statement: str) -> list[CallSegment]:
    """Split one statement into its ordered call segments.

    Each segment ends where the depth returns to zero after its ``(``; the
    ``.`` and whitespace before the next segment are separators.

    Raises:
        DSLSyntaxError: If the text is not a ``name(...)`` chain.
    """
    calls: list[CallSegment] = []
    i = 0
    n = len(statement)
    while i < n:
        m = _CALL_HEAD_RE.match(statement, i)
        if m is None:
            raise DSLSyntaxError(f"expected a call like name(...) at {statement[i:].strip()!r}")
        chained = m.group(1) is not None
        if calls and not chained:
            raise DSLSyntaxError(f"expected '.' before {m.group(2)}(...)")
        open_index = m.end() - 1
        close_index = find_closing(statement, open_index)
        calls.append(
            CallSegment(
                name=m.group(2),
                args=statement[open_index + 1 : close_index],
                chained=chained,
                text=statement[i : close_index + 1].strip(),
            )
        )
        i = close_index + 1
        while i < n and statement[i].isspace():
            i += 1
    return calls


def segment_program(program: str, preview_limit: int = 200) -> list[Statement]:
    """Segment a full program into :class:`Statement` objects.

    Raises:
        DSLSyntaxError: With the failing statement attached.
    """
    statements: list[Statement] = []
    for index, text in enumerate(split_statements(program)):
        try:
            calls = split_calls(text)
        except DSLError as exc:
            exc.attach_statement(index, preview(text, preview_limit))
            raise
        statements.append(Statement(index=index, text=text.strip(), calls=tuple(calls)))
    return statements
