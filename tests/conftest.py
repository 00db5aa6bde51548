"""
Shared fixtures for the test suite.

Centralizes session snapshots and parser construction so individual test
files don't repeat setup boilerplate.  Nothing here touches the network or
a DAW.
"""

import copy

import pytest

from core.config import DEFAULT_CONFIG, ENV_VARS
from core.dsl.context import ParseContext
from core.dsl.parser import DSLParser
from core.dsl.session import SessionSnapshot, TrackDescriptor

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SESSION_STATE: dict = {
    "state": {
        "tracks": [
            {"name": "Drums", "selected": False},
            {"name": "Bass", "selected": True},
            {"name": "Pads", "selected": True},
        ]
    }
}
"""Raw wrapped session state as sent by DAW bridges (tracks 1 and 2 selected)."""


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------


@pytest.fixture
def selected_snapshot() -> SessionSnapshot:
    """Three tracks; ``Bass`` (index 1) is the first selected one."""
    return SessionSnapshot(
        tracks=(
            TrackDescriptor(name="Drums"),
            TrackDescriptor(name="Bass", selected=True),
            TrackDescriptor(name="Pads", selected=True),
        )
    )


@pytest.fixture
def unselected_snapshot() -> SessionSnapshot:
    """Two tracks, none selected."""
    return SessionSnapshot(tracks=(TrackDescriptor(name="Drums"), TrackDescriptor(name="Bass")))


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


@pytest.fixture
def parser() -> DSLParser:
    """Fresh parser with no session state."""
    return DSLParser()


@pytest.fixture
def session_parser(selected_snapshot: SessionSnapshot) -> DSLParser:
    """Fresh parser whose snapshot has a selected track at index 1."""
    return DSLParser(selected_snapshot)


@pytest.fixture
def parse_ctx() -> ParseContext:
    """Empty per-parse context with default config."""
    return ParseContext(config=DEFAULT_CONFIG)


@pytest.fixture
def session_state() -> dict:
    """Raw wrapped session state dict (fresh copy per test)."""
    return copy.deepcopy(SESSION_STATE)


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_dsl_env(monkeypatch):
    """Tools and the CLI read DSL_* variables at call time; start every test without them."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
