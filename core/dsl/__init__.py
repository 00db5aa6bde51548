"""core/dsl — Studio DSL translator.

Turns chained-method programs such as::

    track(instrument="Serum").newClip(bar=1, length_bars=4).setVolume(volume_db=-3)

into ordered action records for an external DAW executor.  Zero I/O: the
session snapshot is supplied by the caller and only read.
"""

from core.dsl.errors import (
    AmbiguousParameter,
    DSLError,
    DSLSyntaxError,
    EmptyInputError,
    MissingAlternativeParameter,
    MissingRequiredParameter,
    NoTrackContext,
    UnresolvedSelection,
    UnresolvedTrackReference,
)
from core.dsl.parser import DSLParser, parse_dsl
from core.dsl.session import SessionSnapshot, TrackDescriptor, snapshot_from_dict

__all__ = [
    "AmbiguousParameter",
    "DSLError",
    "DSLParser",
    "DSLSyntaxError",
    "EmptyInputError",
    "MissingAlternativeParameter",
    "MissingRequiredParameter",
    "NoTrackContext",
    "SessionSnapshot",
    "TrackDescriptor",
    "UnresolvedSelection",
    "UnresolvedTrackReference",
    "parse_dsl",
    "snapshot_from_dict",
]
