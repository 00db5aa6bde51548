"""core/dsl/builders.py — One action builder per DSL operation.

Each builder receives the call's :class:`~core.dsl.params.Params`, the
resolved 0-based track index, and the :class:`~core.dsl.context.ParseContext`,
and returns exactly one action record.

Operation → action
──────────────────
::

    track(...)                    create_track
    .newClip(bar=...)             create_clip_at_bar
    .newClip(start=|position=...) create_clip
    .addMidi(notes=[...])         add_midi
    .addFX(fxname=...)            add_track_fx
    .addInstrument(instrument=..) add_instrument
    .setVolume(volume_db=...)     set_track_volume
    .setPan(pan=...)              set_track_pan
    .setMute(mute=...)            set_track_mute
    .setSolo(solo=...)            set_track_solo
    .setName(name=...)            set_track_name

``addFX`` and ``addInstrument`` are interchangeable: the parameter, not the
keyword, decides the action.
"""

from __future__ import annotations

from collections.abc import Callable

from core.dsl.context import ParseContext
from core.dsl.errors import (
    AmbiguousParameter,
    DSLSyntaxError,
    MissingAlternativeParameter,
    MissingRequiredParameter,
)
from core.dsl.params import Params
from core.dsl.types import ActionRecord, NoteValue

Builder = Callable[[Params, int, ParseContext], ActionRecord]

BUILDERS: dict[str, Builder] = {}
"""Operation keyword → builder.  Populated by :func:`builder`."""


def builder(*keywords: str) -> Callable[[Builder], Builder]:
    """Register a function as the builder for one or more keywords."""

    def register(fn: Builder) -> Builder:
        for keyword in keywords:
            BUILDERS[keyword] = fn
        return fn

    return register


# ---------------------------------------------------------------------------
# Track creation
# ---------------------------------------------------------------------------


def build_create_track(params: Params, ctx: ParseContext) -> tuple[ActionRecord, int]:
    """Build ``create_track`` and allocate the new track's index.

    Returns:
        ``(action, index)`` — the index becomes the statement's current track.
    """
    action: ActionRecord = {"action": "create_track"}

    instrument = params.get_str("instrument")
    if instrument is not None:
        action["instrument"] = instrument
    name = params.get_str("name")
    if name is not None:
        action["name"] = name

    explicit = params.get_int("index")
    if explicit is not None and explicit < 0:
        raise DSLSyntaxError(f"track() index must be non-negative, got {explicit}")

    index = ctx.allocate_index(explicit)
    action["index"] = index
    return action, index


# ---------------------------------------------------------------------------
# Clips
# ---------------------------------------------------------------------------


@builder("newClip")
def build_new_clip(params: Params, track: int, ctx: ParseContext) -> ActionRecord:
    """Bar form (``bar``, ``length_bars``) or time form (``start``/``position``, ``length``)."""
    bar = params.get_int("bar")
    start = params.get_float("start")
    position = params.get_float("position")

    if bar is not None:
        if start is not None or position is not None:
            given = tuple(p for p in ("bar", "start", "position") if params.value(p) is not None)
            raise AmbiguousParameter("newClip", given)
        length_bars = params.get_int("length_bars")
        return {
            "action": "create_clip_at_bar",
            "track": track,
            "bar": bar,
            "length_bars": length_bars if length_bars is not None else ctx.config.default_length_bars,
        }

    if start is not None and position is not None:
        raise AmbiguousParameter("newClip", ("start", "position"))
    if start is None and position is None:
        raise MissingAlternativeParameter("newClip", ("bar", "start", "position"))

    length = params.get_float("length")
    return {
        "action": "create_clip",
        "track": track,
        "position": start if start is not None else position,
        "length": length if length is not None else ctx.config.default_clip_length,
    }


# ---------------------------------------------------------------------------
# MIDI
# ---------------------------------------------------------------------------


@builder("addMidi")
def build_add_midi(params: Params, track: int, ctx: ParseContext) -> ActionRecord:
    notes = params.require_notes("notes")
    return {
        "action": "add_midi",
        "track": track,
        "notes": [_note_payload(note, i, ctx) for i, note in enumerate(notes)],
    }


def _note_payload(note: NoteValue, position: int, ctx: ParseContext) -> dict[str, int | float]:
    if note.pitch is None or not float(note.pitch).is_integer():
        raise MissingRequiredParameter(
            "addMidi",
            f"notes[{position}].pitch",
            f"addMidi() note {position} requires an integer pitch",
        )
    config = ctx.config
    return {
        "pitch": int(note.pitch),
        # Velocity is a MIDI integer; fractional input rounds to the nearest step.
        "velocity": (
            round(note.velocity) if note.velocity is not None else config.default_note_velocity
        ),
        "start": float(note.start) if note.start is not None else config.default_note_start,
        "duration": (
            float(note.duration) if note.duration is not None else config.default_note_duration
        ),
    }


# ---------------------------------------------------------------------------
# Devices
# ---------------------------------------------------------------------------


@builder("addFX", "addInstrument")
def build_add_device(params: Params, track: int, ctx: ParseContext) -> ActionRecord:
    fxname = params.get_str("fxname")
    instrument = params.get_str("instrument")

    if fxname is not None and instrument is not None:
        raise AmbiguousParameter("addFX", ("fxname", "instrument"))
    if fxname is not None:
        return {"action": "add_track_fx", "track": track, "fxname": fxname}
    if instrument is not None:
        return {"action": "add_instrument", "track": track, "fxname": instrument}
    raise MissingAlternativeParameter("addFX", ("fxname", "instrument"))


# ---------------------------------------------------------------------------
# Track properties
# ---------------------------------------------------------------------------


@builder("setVolume")
def build_set_volume(params: Params, track: int, ctx: ParseContext) -> ActionRecord:
    return {
        "action": "set_track_volume",
        "track": track,
        "volume_db": params.require_float("volume_db"),
    }


@builder("setPan")
def build_set_pan(params: Params, track: int, ctx: ParseContext) -> ActionRecord:
    return {"action": "set_track_pan", "track": track, "pan": params.require_float("pan")}


@builder("setMute")
def build_set_mute(params: Params, track: int, ctx: ParseContext) -> ActionRecord:
    return {"action": "set_track_mute", "track": track, "mute": params.require_bool("mute")}


@builder("setSolo")
def build_set_solo(params: Params, track: int, ctx: ParseContext) -> ActionRecord:
    return {"action": "set_track_solo", "track": track, "solo": params.require_bool("solo")}


@builder("setName")
def build_set_name(params: Params, track: int, ctx: ParseContext) -> ActionRecord:
    return {"action": "set_track_name", "track": track, "name": params.require_str("name")}
