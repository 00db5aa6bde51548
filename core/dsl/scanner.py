"""core/dsl/scanner.py — Quote/bracket-aware scanning and literal typing.

Two layers:

1. :class:`Scanner` — a character-level state machine (``NORMAL``,
   ``IN_STRING``, ``IN_ESCAPE``) with a bracket stack.  The segmenter and the
   parameter extractor feed it one character at a time to know whether a
   delimiter sits at the top level or inside a literal.

2. :func:`scan_value` — turns one literal's text into a typed
   :data:`~core.dsl.types.LiteralValue`, or :class:`~core.dsl.types.Unparseable`.

Literal grammar
───────────────
::

    string  := '"' ( '\\' any | [^"\\] )* '"'
    number  := '-'? digit+ ( '.' digit+ )?
    boolean := 'true' | 'false' | 'True' | 'False'
    array   := '[' ( literal ( ',' literal )* ','? )? ']'
    note    := '{' ( field '=' number ( ',' field '=' number )* ','? )? '}'
    field   := 'pitch' | 'velocity' | 'start' | 'duration'

Pure module — no I/O.
"""

from __future__ import annotations

import math
import re
from enum import Enum

from core.dsl.errors import DSLSyntaxError
from core.dsl.types import (
    NOTE_FIELDS,
    ArrayValue,
    BoolValue,
    NoteValue,
    NumberValue,
    ScanResult,
    StringValue,
    Unparseable,
)

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")

_BOOLEANS: dict[str, bool] = {
    "true": True,
    "false": False,
    "True": True,
    "False": False,
}

_OPENERS: dict[str, str] = {"(": ")", "[": "]", "{": "}"}
_CLOSERS: dict[str, str] = {")": "(", "]": "[", "}": "{"}

# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------


class ScanState(str, Enum):
    """Lexical state of the scanner."""

    NORMAL = "normal"
    IN_STRING = "in_string"
    IN_ESCAPE = "in_escape"


class Scanner:
    """Tracks quote state and bracket nesting over a character stream.

    Usage::

        sc = Scanner()
        for i, ch in enumerate(text):
            if ch == "," and sc.at_top_level:
                ...  # real delimiter
            sc.feed(ch, i)
        sc.finish(text)
    """

    __slots__ = ("state", "_stack")

    def __init__(self) -> None:
        self.state = ScanState.NORMAL
        self._stack: list[str] = []

    @property
    def depth(self) -> int:
        """Current bracket nesting depth (all bracket kinds combined)."""
        return len(self._stack)

    @property
    def at_top_level(self) -> bool:
        """True outside any string and any bracket."""
        return self.state is ScanState.NORMAL and not self._stack

    def feed(self, ch: str, pos: int = -1) -> None:
        """Advance the machine by one character.

        Raises:
            DSLSyntaxError: On a closing bracket that does not match the
                innermost open one.
        """
        if self.state is ScanState.IN_ESCAPE:
            self.state = ScanState.IN_STRING
            return
        if self.state is ScanState.IN_STRING:
            if ch == "\\":
                self.state = ScanState.IN_ESCAPE
            elif ch == '"':
                self.state = ScanState.NORMAL
            return

        if ch == '"':
            self.state = ScanState.IN_STRING
        elif ch in _OPENERS:
            self._stack.append(ch)
        elif ch in _CLOSERS:
            if not self._stack or self._stack[-1] != _CLOSERS[ch]:
                where = f" at position {pos}" if pos >= 0 else ""
                raise DSLSyntaxError(f"unmatched {ch!r}{where}")
            self._stack.pop()

    def finish(self, text: str) -> None:
        """Assert the stream ended cleanly.

        Raises:
            DSLSyntaxError: If a string or bracket is still open.
        """
        if self.state is not ScanState.NORMAL:
            raise DSLSyntaxError(f"unterminated string in {text!r}")
        if self._stack:
            raise DSLSyntaxError(f"unclosed {self._stack[-1]!r} in {text!r}")


# ---------------------------------------------------------------------------
# Top-level search helpers
# ---------------------------------------------------------------------------


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split ``text`` on ``sep`` occurrences outside strings and brackets.

    >>> split_top_level('a="x, y", b=[1, 2]')
    ['a="x, y"', ' b=[1, 2]']
    """
    parts: list[str] = []
    sc = Scanner()
    start = 0
    for i, ch in enumerate(text):
        if ch == sep and sc.at_top_level:
            parts.append(text[start:i])
            start = i + 1
            continue
        sc.feed(ch, i)
    sc.finish(text)
    parts.append(text[start:])
    return parts


def find_top_level(text: str, target: str) -> int:
    """Index of the first ``target`` outside strings and brackets, or -1."""
    sc = Scanner()
    for i, ch in enumerate(text):
        if ch == target and sc.at_top_level:
            return i
        sc.feed(ch, i)
    return -1


def find_closing(text: str, open_index: int) -> int:
    """Index of the bracket closing the one at ``open_index``.

    Brackets and quotes inside the span are skipped, so
    ``track(name="a (b)")`` closes at the final ``)``.

    Raises:
        DSLSyntaxError: If the bracket is never closed.
    """
    sc = Scanner()
    for i in range(open_index, len(text)):
        sc.feed(text[i], i)
        if sc.at_top_level:
            return i
    opener = text[open_index] if open_index < len(text) else "("
    raise DSLSyntaxError(f"unclosed {opener!r} in {text!r}")


def _is_enclosed(text: str, opener: str, closer: str) -> bool:
    """True when ``text`` is exactly one ``opener ... closer`` group."""
    if len(text) < 2 or text[0] != opener or text[-1] != closer:
        return False
    return find_closing(text, 0) == len(text) - 1


# ---------------------------------------------------------------------------
# Literal typing
# ---------------------------------------------------------------------------


def scan_value(text: str) -> ScanResult:
    """Type one literal.

    Args:
        text: Raw value text as extracted from a parameter list.

    Returns:
        The typed literal, or :class:`Unparseable` for anything that is not
        valid literal syntax (malformed numbers, bare words, empty text).

    Raises:
        DSLSyntaxError: On structural errors inside arrays or note objects
            (mismatched brackets, unknown note fields).
    """
    text = text.strip()
    if not text:
        return Unparseable(text)

    first = text[0]
    if first == '"':
        return _scan_string(text)
    if first == "[":
        return _scan_array(text)
    if first == "{":
        return _scan_note(text)
    if text in _BOOLEANS:
        return BoolValue(_BOOLEANS[text])
    if _NUMBER_RE.fullmatch(text):
        return _scan_number(text)
    return Unparseable(text)


def _scan_number(text: str) -> ScanResult:
    # Values must survive float() in the builders: no inf, no int overflow.
    try:
        value: int | float = float(text) if "." in text else int(text)
        finite = math.isfinite(float(value))
    except (ValueError, OverflowError):
        return Unparseable(text)
    return NumberValue(value) if finite else Unparseable(text)


def _scan_string(text: str) -> ScanResult:
    chars: list[str] = []
    escaped = False
    last = len(text) - 1
    for i in range(1, len(text)):
        ch = text[i]
        if escaped:
            chars.append(ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == '"':
            # Anything after the closing quote makes the literal invalid.
            return StringValue("".join(chars)) if i == last else Unparseable(text)
        else:
            chars.append(ch)
    return Unparseable(text)


def _scan_array(text: str) -> ScanResult:
    if not _is_enclosed(text, "[", "]"):
        return Unparseable(text)
    inner = text[1:-1]
    if not inner.strip():
        return ArrayValue(())

    pieces = split_top_level(inner, ",")
    if not pieces[-1].strip():
        pieces.pop()  # trailing comma

    items = []
    for piece in pieces:
        item = scan_value(piece)
        if isinstance(item, Unparseable):
            return Unparseable(text)
        items.append(item)
    return ArrayValue(tuple(items))


def _scan_note(text: str) -> ScanResult:
    if not _is_enclosed(text, "{", "}"):
        return Unparseable(text)

    fields: dict[str, int | float] = {}
    for piece in split_top_level(text[1:-1], ","):
        if not piece.strip():
            continue
        eq = find_top_level(piece, "=")
        if eq < 0:
            raise DSLSyntaxError(f"expected field=value in note object, got {piece.strip()!r}")
        key = piece[:eq].strip()
        if key not in NOTE_FIELDS:
            raise DSLSyntaxError(
                f"unknown note field {key!r} (allowed: {', '.join(NOTE_FIELDS)})"
            )
        value = scan_value(piece[eq + 1 :])
        if isinstance(value, NumberValue):
            fields[key] = value.value
        else:
            # Unparseable / non-numeric field degrades to absent.
            fields.pop(key, None)
    return NoteValue(**fields)
