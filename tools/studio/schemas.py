"""
tools/studio/schemas.py — Pydantic models for session state received from callers.

Session snapshots come from outside the process (an LLM tool call, a JSON
file, a DAW bridge), so they are validated here before being converted into
the immutable :class:`~core.dsl.session.SessionSnapshot` the parser reads.

Both the bare and the wrapped shapes are accepted::

    {"tracks": [{"name": "Bass", "selected": true}]}
    {"state": {"tracks": [...]}}
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.dsl.session import SessionSnapshot, TrackDescriptor


class TrackPayload(BaseModel):
    """One track entry of a session payload."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field("", description="Track name as shown in the DAW.")
    selected: bool = Field(False, description="Whether the track is currently selected.")


class SessionPayload(BaseModel):
    """Session state supplied alongside DSL code."""

    model_config = ConfigDict(extra="ignore")

    tracks: list[TrackPayload] = Field(
        default_factory=list,
        description="Existing tracks in session order (position = 0-based index).",
    )

    @model_validator(mode="before")
    @classmethod
    def unwrap_state(cls, data: Any) -> Any:
        """Accept ``{"state": {...}}`` as produced by DAW bridges."""
        if isinstance(data, dict) and "tracks" not in data and isinstance(data.get("state"), dict):
            return data["state"]
        return data

    def to_snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            tracks=tuple(TrackDescriptor(name=t.name, selected=t.selected) for t in self.tracks)
        )
