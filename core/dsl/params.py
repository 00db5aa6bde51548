"""core/dsl/params.py — Parameter extraction and typed access.

``extract_params('instrument="Serum", name="Bass"')`` returns the raw text of
each value keyed by name::

    {"instrument": '"Serum"', "name": '"Bass"'}

Values stay untyped until an action builder asks for them through
:class:`Params`, which runs :func:`core.dsl.scanner.scan_value` once per name
and degrades unparseable text to "absent".
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping, Sequence
from typing import TypeVar

from core.dsl.errors import DSLSyntaxError, MissingRequiredParameter
from core.dsl.scanner import find_closing, find_top_level, scan_value, split_top_level
from core.dsl.types import (
    ArrayValue,
    BoolValue,
    CallSegment,
    LiteralValue,
    NoteValue,
    NumberValue,
    ScanResult,
    StringValue,
    Unparseable,
)

logger = logging.getLogger(__name__)

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Raw extraction
# ---------------------------------------------------------------------------


def argument_span(call_text: str) -> str:
    """Return the text between a call's first ``(`` and its matching ``)``.

    Quotes are honoured, so ``track(name="a (b)")`` yields ``name="a (b)"``.

    Raises:
        DSLSyntaxError: If the call has no parenthesis or it never closes.
    """
    start = call_text.find("(")
    if start < 0:
        raise DSLSyntaxError(f"expected '(' in call {call_text!r}")
    end = find_closing(call_text, start)
    return call_text[start + 1 : end]


def split_arguments(args: str) -> tuple[dict[str, str], list[str]]:
    """Split an argument list into named and positional raw values.

    Commas and ``=`` inside strings, arrays and note objects are content.
    Repeated names keep the last value.  Empty pieces (``a=1,,b=2`` or a
    trailing comma) are ignored.

    Raises:
        DSLSyntaxError: On an empty or invalid parameter name.
    """
    named: dict[str, str] = {}
    positional: list[str] = []
    if not args.strip():
        return named, positional

    for piece in split_top_level(args, ","):
        piece = piece.strip()
        if not piece:
            continue
        eq = find_top_level(piece, "=")
        if eq < 0:
            positional.append(piece)
            continue
        key = piece[:eq].strip()
        if not _IDENT_RE.fullmatch(key):
            raise DSLSyntaxError(f"invalid parameter name {key!r} in {piece!r}")
        named[key] = piece[eq + 1 :].strip()
    return named, positional


def extract_params(args: str) -> dict[str, str]:
    """Named parameters of an argument list, as raw value text."""
    return split_arguments(args)[0]


# ---------------------------------------------------------------------------
# Typed access
# ---------------------------------------------------------------------------


class Params:
    """Typed, read-only view over one call's parameters.

    ``get_*`` accessors return ``None`` when a parameter is absent, has the
    wrong type, or could not be parsed.  ``require_*`` accessors raise
    :class:`MissingRequiredParameter` in those cases.
    """

    def __init__(
        self,
        operation: str,
        raw: Mapping[str, str],
        positional: Sequence[str] = (),
    ) -> None:
        self.operation = operation
        self.positional: tuple[str, ...] = tuple(positional)
        self._raw = dict(raw)
        self._scanned: dict[str, ScanResult] = {}

    @classmethod
    def from_call(cls, call: CallSegment) -> Params:
        named, positional = split_arguments(call.args)
        return cls(call.name, named, positional)

    def __contains__(self, name: object) -> bool:
        return name in self._raw

    def __len__(self) -> int:
        return len(self._raw)

    def raw(self, name: str) -> str | None:
        return self._raw.get(name)

    def value(self, name: str) -> LiteralValue | None:
        """Typed literal for ``name``; ``None`` if absent or unparseable."""
        if name not in self._raw:
            return None
        if name not in self._scanned:
            self._scanned[name] = scan_value(self._raw[name])
        result = self._scanned[name]
        if isinstance(result, Unparseable):
            logger.debug(
                "%s(): treating unparseable %s=%r as absent", self.operation, name, result.text
            )
            return None
        return result

    def get_int(self, name: str) -> int | None:
        v = self.value(name)
        if isinstance(v, NumberValue) and v.is_integral:
            return int(v.value)
        return None

    def get_float(self, name: str) -> float | None:
        v = self.value(name)
        if isinstance(v, NumberValue):
            return float(v.value)
        return None

    def get_bool(self, name: str) -> bool | None:
        v = self.value(name)
        if isinstance(v, BoolValue):
            return v.value
        return None

    def get_str(self, name: str) -> str | None:
        v = self.value(name)
        if isinstance(v, StringValue):
            return v.value
        return None

    def get_notes(self, name: str) -> tuple[NoteValue, ...] | None:
        """Array of note objects; ``None`` if any element is not a note."""
        v = self.value(name)
        if not isinstance(v, ArrayValue):
            return None
        if not all(isinstance(item, NoteValue) for item in v.items):
            return None
        return v.items  # type: ignore[return-value]

    def require_float(self, name: str) -> float:
        return self._require(name, self.get_float)

    def require_bool(self, name: str) -> bool:
        return self._require(name, self.get_bool)

    def require_str(self, name: str) -> str:
        return self._require(name, self.get_str)

    def require_notes(self, name: str) -> tuple[NoteValue, ...]:
        return self._require(name, self.get_notes)

    def _require(self, name: str, getter: Callable[[str], T | None]) -> T:
        result = getter(name)
        if result is None:
            raise MissingRequiredParameter(self.operation, name)
        return result
