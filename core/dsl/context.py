"""core/dsl/context.py — Track-context resolution.

Two scopes of state:

    ParseContext   one per parse() call  — track-index counter, snapshot, config
    TrackContext   one per statement     — the "current track" of the chain

Resolution order for ``track(...)``:

    1. id=N / bare N     → index N-1           (reference, no action)
       id="N"            → index N-1           (digit strings are ordinals)
       id="Name"         → snapshot lookup     (reference, no action)
    2. selected=true     → first selected track in the snapshot
    3. anything else     → creation (see core.dsl.builders.build_create_track)

Chained operations use the statement's current track, falling back to the
snapshot's selected track when the chain has none.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from core.config import DEFAULT_CONFIG, DSLConfig
from core.dsl.errors import (
    DSLSyntaxError,
    NoTrackContext,
    UnresolvedSelection,
    UnresolvedTrackReference,
)
from core.dsl.params import Params
from core.dsl.scanner import scan_value
from core.dsl.session import EMPTY_SNAPSHOT, SessionSnapshot
from core.dsl.types import NumberValue, StringValue

logger = logging.getLogger(__name__)

# Bounded so int() never hits the interpreter's digit limit.
_ORDINAL_RE = re.compile(r"\d{1,9}")


@dataclass
class ParseContext:
    """Mutable state threaded through every builder during one parse.

    ``next_index`` starts from the owning parser's counter and is copied
    back only when the whole parse succeeds.
    """

    next_index: int = 0
    snapshot: SessionSnapshot = EMPTY_SNAPSHOT
    config: DSLConfig = DEFAULT_CONFIG
    created: list[int] = field(default_factory=list)
    """Indices assigned by ``create_track`` so far, in order."""

    def allocate_index(self, explicit: int | None = None) -> int:
        """Assign an index to a newly created track.

        An explicit index moves the counter to ``explicit + 1``, even when
        that is lower than its current value.
        """
        if explicit is None:
            index = self.next_index
        else:
            index = explicit
        self.next_index = index + 1
        self.created.append(index)
        return index


class TrackContext:
    """The current track of one statement."""

    def __init__(self, snapshot: SessionSnapshot = EMPTY_SNAPSHOT) -> None:
        self._snapshot = snapshot
        self.current: int | None = None

    def set(self, index: int) -> None:
        self.current = index

    def resolve(self, operation: str) -> int:
        """Track index for a chained ``operation``.

        Raises:
            NoTrackContext: If the chain has no track and nothing is selected.
        """
        if self.current is not None:
            return self.current
        fallback = self._snapshot.first_selected_index()
        if fallback is None:
            raise NoTrackContext(operation)
        logger.debug("%s(): no track in chain, using selected track %d", operation, fallback)
        return fallback


def resolve_reference(params: Params, ctx: ParseContext) -> int | None:
    """Resolve a ``track(...)`` call that refers to an existing track.

    Returns:
        The 0-based index of the referenced track, or ``None`` when the call
        is a creation call.

    Raises:
        UnresolvedSelection: ``selected=true`` with nothing selected.
        UnresolvedTrackReference: Unknown track name, or a number below 1.
        DSLSyntaxError: Positional arguments that are not a track reference.
    """
    if "id" in params:
        ref = params.value("id")
        if isinstance(ref, NumberValue) and ref.is_integral:
            return _from_ordinal(int(ref.value), ctx)
        if isinstance(ref, StringValue):
            return _from_string(ref.value, ctx)
        logger.debug("track(): ignoring unparseable id=%r", params.raw("id"))

    if params.get_bool("selected"):
        index = ctx.snapshot.first_selected_index()
        if index is None:
            raise UnresolvedSelection()
        return index

    if params.positional:
        if len(params) or len(params.positional) > 1:
            raise DSLSyntaxError("track() takes a single track number or keyword parameters")
        ref = scan_value(params.positional[0])
        if isinstance(ref, NumberValue) and ref.is_integral:
            return _from_ordinal(int(ref.value), ctx)
        if isinstance(ref, StringValue):
            return _from_string(ref.value, ctx)
        raise DSLSyntaxError(f"invalid track reference {params.positional[0]!r}")

    return None


def _from_ordinal(number: int, ctx: ParseContext) -> int:
    if number < 1:
        raise UnresolvedTrackReference(number, "track numbers start at 1")
    index = number - 1
    if ctx.snapshot.tracks and not ctx.snapshot.track_exists(index) and index not in ctx.created:
        logger.warning(
            "track(%d): no such track in session state (%d tracks)", number, len(ctx.snapshot)
        )
    return index


def _from_string(text: str, ctx: ParseContext) -> int:
    # id="2" is track 2, never a track named "2".
    digits = text.strip()
    if _ORDINAL_RE.fullmatch(digits):
        return _from_ordinal(int(digits), ctx)
    return _from_name(text, ctx)


def _from_name(name: str, ctx: ParseContext) -> int:
    index = ctx.snapshot.find_by_name(name)
    if index is None:
        raise UnresolvedTrackReference(name, "no track with that name in session state")
    return index
