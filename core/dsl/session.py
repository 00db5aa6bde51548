"""core/dsl/session.py — Read-only session snapshot used for track resolution.

The snapshot is supplied by whoever drives the parser (an LLM tool, the CLI,
a DAW bridge).  The translator only reads it: it never adds, removes or
reorders tracks.

Raw snapshots arrive as JSON-like dicts in one of two shapes::

    {"tracks": [{"name": "Bass", "selected": false}, ...]}
    {"state": {"tracks": [...]}}

Use :func:`snapshot_from_dict` for lenient conversion.  Strict validation of
untrusted payloads lives in :mod:`tools.studio.schemas`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TrackDescriptor:
    """One existing track as reported by the session."""

    name: str
    selected: bool = False


@dataclass(frozen=True)
class SessionSnapshot:
    """Ordered, immutable list of the session's tracks.

    Position in ``tracks`` is the track's 0-based index.
    """

    tracks: tuple[TrackDescriptor, ...] = ()

    def first_selected_index(self) -> int | None:
        """Return the index of the first selected track, or ``None``.

        Sessions may have several selected tracks; only the first one in
        snapshot order is returned.
        """
        for i, track in enumerate(self.tracks):
            if track.selected:
                return i
        return None

    def track_exists(self, index: int) -> bool:
        return 0 <= index < len(self.tracks)

    def find_by_name(self, name: str) -> int | None:
        """Return the index of the track called ``name``.

        Exact match first, then case-insensitive.  ``None`` when nothing matches.
        """
        for i, track in enumerate(self.tracks):
            if track.name == name:
                return i
        needle = name.lower()
        for i, track in enumerate(self.tracks):
            if track.name.lower() == needle:
                return i
        return None

    def __len__(self) -> int:
        return len(self.tracks)


EMPTY_SNAPSHOT = SessionSnapshot()


def snapshot_from_dict(payload: Mapping[str, Any] | None) -> SessionSnapshot:
    """Build a :class:`SessionSnapshot` from a raw state dict.

    Accepts the bare and the ``{"state": ...}``-wrapped shapes.  Entries that
    are not mappings become unnamed, unselected placeholders so the indices of
    the remaining tracks stay aligned with the session.  Only a literal
    ``True`` counts as selected.
    """
    if not payload:
        return EMPTY_SNAPSHOT

    state = payload.get("state")
    if isinstance(state, Mapping):
        payload = state

    raw_tracks = payload.get("tracks")
    if not isinstance(raw_tracks, list):
        return EMPTY_SNAPSHOT

    tracks: list[TrackDescriptor] = []
    for entry in raw_tracks:
        if not isinstance(entry, Mapping):
            tracks.append(TrackDescriptor(name=""))
            continue
        name = entry.get("name")
        tracks.append(
            TrackDescriptor(
                name=name if isinstance(name, str) else "",
                selected=entry.get("selected") is True,
            )
        )
    return SessionSnapshot(tracks=tuple(tracks))
