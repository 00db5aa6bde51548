"""core/dsl/types.py — Immutable value objects for the studio DSL.

Hierarchy:

    Program (str)
    └── Statement (one per top-level unit)
        └── CallSegment (track(...), .newClip(...), ...)
            └── raw args text → LiteralValue (via core.dsl.scanner)

Every type is a frozen dataclass.  Action records are plain dicts so the
downstream executor can serialise them as JSON without conversion.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

ActionRecord = dict[str, Any]
"""One output unit: ``{"action": <discriminator>, ...operation fields}``."""

# ---------------------------------------------------------------------------
# Literal values
# ---------------------------------------------------------------------------

NOTE_FIELDS: tuple[str, ...] = ("pitch", "velocity", "start", "duration")
"""Fields allowed inside a ``{...}`` note object, in output order."""


@dataclass(frozen=True)
class StringValue:
    """A double-quoted string with escapes already removed."""

    value: str


@dataclass(frozen=True)
class NumberValue:
    """An integer or decimal literal.

    ``value`` is an ``int`` when the source text had no fractional part,
    otherwise a ``float``.
    """

    value: int | float

    @property
    def is_integral(self) -> bool:
        return isinstance(self.value, int) or float(self.value).is_integer()


@dataclass(frozen=True)
class BoolValue:
    value: bool


@dataclass(frozen=True)
class ArrayValue:
    """A bracketed, ordered list of literals (may nest)."""

    items: tuple[LiteralValue, ...]


@dataclass(frozen=True)
class NoteValue:
    """A ``{pitch=60, velocity=100, start=0.0, duration=1.0}`` note object.

    Fields omitted in the source are ``None``; builders apply defaults.
    """

    pitch: int | float | None = None
    velocity: int | float | None = None
    start: int | float | None = None
    duration: int | float | None = None


@dataclass(frozen=True)
class Unparseable:
    """Scanner outcome for text that is not a valid literal.

    Callers treat it exactly like an absent parameter.
    """

    text: str


LiteralValue = Union[StringValue, NumberValue, BoolValue, ArrayValue, NoteValue]
ScanResult = Union[LiteralValue, Unparseable]


# ---------------------------------------------------------------------------
# Program structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CallSegment:
    """One operation invocation inside a statement.

    ``args`` is the raw text between the call's parentheses; it is split into
    parameters lazily by :mod:`core.dsl.params`.
    """

    name: str
    """Operation keyword, e.g. ``"track"`` or ``"newClip"``."""

    args: str
    """Raw argument text, without the enclosing parentheses."""

    chained: bool
    """True when the segment was written with a leading ``.``."""

    text: str
    """Full source text of the segment (for error messages)."""


@dataclass(frozen=True)
class Statement:
    """One ``track(...)`` call plus its chained operations."""

    index: int
    """0-based position of the statement in the program."""

    text: str
    calls: tuple[CallSegment, ...]
