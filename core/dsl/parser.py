"""core/dsl/parser.py — Translate studio DSL programs into action records.

Example::

    parser = DSLParser()
    parser.parse('track(instrument="Serum").newClip(bar=3, length_bars=4)')
    # [{"action": "create_track", "instrument": "Serum", "index": 0},
    #  {"action": "create_clip_at_bar", "track": 0, "bar": 3, "length_bars": 4}]

A parser instance keeps one piece of state between calls: the track-index
counter, which advances only on track creation.  Use one instance per
session (or per thread); independent parsers never interfere.

Every statement must open with ``track(...)``.  With
``strict_operations=False`` a statement that opens with a chained call
(``.setMute(mute=true)``) is accepted and applied to the session's
selected track instead.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from core.config import DEFAULT_CONFIG, DSLConfig
from core.dsl.builders import BUILDERS, build_create_track
from core.dsl.context import ParseContext, TrackContext, resolve_reference
from core.dsl.errors import DSLError, DSLSyntaxError, EmptyInputError
from core.dsl.params import Params
from core.dsl.segmenter import preview, segment_program
from core.dsl.session import EMPTY_SNAPSHOT, SessionSnapshot, snapshot_from_dict
from core.dsl.types import ActionRecord, CallSegment, Statement

logger = logging.getLogger(__name__)

SnapshotLike = SessionSnapshot | Mapping[str, Any] | None


def _coerce_snapshot(state: SnapshotLike) -> SessionSnapshot:
    if state is None:
        return EMPTY_SNAPSHOT
    if isinstance(state, SessionSnapshot):
        return state
    return snapshot_from_dict(state)


class DSLParser:
    """Stateful translator from DSL text to action records.

    Args:
        state:  Session snapshot used to resolve ``selected=true`` and named
                references.  Raw dicts are converted with
                :func:`~core.dsl.session.snapshot_from_dict`.
        config: Builder defaults and strictness.
    """

    def __init__(self, state: SnapshotLike = None, config: DSLConfig = DEFAULT_CONFIG) -> None:
        self._config = config
        self._snapshot = _coerce_snapshot(state)
        self._track_counter = 0

    @property
    def config(self) -> DSLConfig:
        return self._config

    @property
    def snapshot(self) -> SessionSnapshot:
        return self._snapshot

    @property
    def track_counter(self) -> int:
        """Index the next auto-indexed ``create_track`` will receive."""
        return self._track_counter

    def set_state(self, state: SnapshotLike) -> None:
        """Replace the session snapshot used for track resolution."""
        self._snapshot = _coerce_snapshot(state)

    def reset(self) -> None:
        """Restart automatic track numbering at 0."""
        self._track_counter = 0

    def parse(self, program: str) -> list[ActionRecord]:
        """Translate a whole program.

        Args:
            program: One or more whitespace-separated statements.

        Returns:
            Action records in encounter order.  Empty when every statement is
            a pure track reference.

        Raises:
            EmptyInputError: If ``program`` holds no statements.
            DSLError: Any other translation failure.  Nothing is returned and
                the track counter is left untouched.
        """
        if not program or not program.strip():
            raise EmptyInputError("empty DSL code")

        limit = self._config.max_preview_length
        statements = segment_program(program, limit)
        if not statements:
            raise EmptyInputError("no statements found in DSL code")

        ctx = ParseContext(
            next_index=self._track_counter,
            snapshot=self._snapshot,
            config=self._config,
        )
        actions: list[ActionRecord] = []
        for statement in statements:
            logger.debug("DSL statement %d: %s", statement.index, preview(statement.text, limit))
            try:
                actions.extend(self._translate_statement(statement, ctx))
            except DSLError as exc:
                exc.attach_statement(statement.index, preview(statement.text, limit))
                raise

        self._track_counter = ctx.next_index
        logger.info(
            "DSL parser: translated %d action(s) from %d statement(s)",
            len(actions),
            len(statements),
        )
        return actions

    def _translate_statement(self, statement: Statement, ctx: ParseContext) -> list[ActionRecord]:
        head, *chain = statement.calls
        emitted: list[ActionRecord] = []
        track_ctx = TrackContext(ctx.snapshot)

        if head.chained and head.name != "track" and not self._config.strict_operations:
            # Lenient: a bare ".op()" chain acts on the session's selected track.
            logger.warning(
                "DSL parser: statement %d has no track(...), using selected track",
                statement.index + 1,
            )
            chain = statement.calls
        elif head.chained or head.name != "track":
            raise DSLSyntaxError(f"statement must start with track(...), got {head.text!r}")
        else:
            track_ctx.set(self._open_track(head, ctx, emitted))

        for call in chain:
            action = self._dispatch(call, track_ctx, ctx)
            if action is not None:
                emitted.append(action)
        return emitted

    @staticmethod
    def _open_track(head: CallSegment, ctx: ParseContext, emitted: list[ActionRecord]) -> int:
        params = Params.from_call(head)
        index = resolve_reference(params, ctx)
        if index is None:
            action, index = build_create_track(params, ctx)
            emitted.append(action)
        return index

    def _dispatch(
        self, call: CallSegment, track_ctx: TrackContext, ctx: ParseContext
    ) -> ActionRecord | None:
        build = BUILDERS.get(call.name)
        if build is None:
            if call.name == "track":
                raise DSLSyntaxError("track(...) cannot be chained; start a new statement")
            if self._config.strict_operations:
                raise DSLSyntaxError(f"unknown operation {call.name}()")
            logger.warning("DSL parser: skipping unknown operation %s()", call.name)
            return None

        params = Params.from_call(call)
        if params.positional:
            raise DSLSyntaxError(f"{call.name}() takes keyword parameters only")
        return build(params, track_ctx.resolve(call.name), ctx)


def parse_dsl(
    program: str, state: SnapshotLike = None, config: DSLConfig = DEFAULT_CONFIG
) -> list[ActionRecord]:
    """One-shot translation with a fresh :class:`DSLParser`."""
    return DSLParser(state, config).parse(program)
