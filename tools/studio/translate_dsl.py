"""translate_dsl tool — Turn studio DSL code into DAW action records.

Use when the model has written a program such as::

    track(instrument="Serum", name="Bass").newClip(bar=1, length_bars=8)
    track(selected=true).setVolume(volume_db=-6).addFX(fxname="ReaEQ")

The tool only translates.  Executing the returned actions is the job of the
DAW-side executor.

Without an explicit config the tool reads ``DSL_*`` environment variables on
every call, so the registry's shared instance follows the current
environment.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from pydantic import ValidationError

from core.config import DSLConfig
from core.dsl.errors import DSLError
from core.dsl.parser import DSLParser
from tools.base import StudioTool, ToolParameter, ToolResult
from tools.studio.schemas import SessionPayload

logger = logging.getLogger(__name__)

INVALID_CONFIG = "invalid_config"
INVALID_SESSION = "invalid_session"


class TranslateDSL(StudioTool):
    """Translate DSL code into an ordered list of action records."""

    def __init__(self, config: DSLConfig | None = None) -> None:
        self._config = config

    @property
    def name(self) -> str:
        return "translate_dsl"

    @property
    def description(self) -> str:
        return (
            "Translate studio DSL code into DAW action records. "
            "Statements start with track(...) (create, or reference by id, number or "
            "selected=true) and chain .newClip, .addMidi, .addFX, .addInstrument, "
            ".setVolume, .setPan, .setMute, .setSolo, .setName. "
            "Pass the current session tracks to resolve selected/named tracks."
        )

    @property
    def parameters(self) -> list[ToolParameter]:
        return [
            ToolParameter(
                name="dsl_code",
                type=str,
                description="DSL program, one statement per line or separated by spaces.",
            ),
            ToolParameter(
                name="session",
                type=dict,
                description=(
                    'Optional session state: {"tracks": [{"name": str, "selected": bool}]} '
                    'or the same wrapped as {"state": {...}}.'
                ),
                required=False,
                default=None,
            ),
            ToolParameter(
                name="lenient",
                type=bool,
                description=(
                    "Skip unknown chained operations, and apply statements that start "
                    "with a chained call to the selected track."
                ),
                required=False,
                default=False,
            ),
        ]

    def _resolve_config(self, lenient: bool) -> DSLConfig:
        config = self._config if self._config is not None else DSLConfig.from_env()
        if lenient:
            config = dataclasses.replace(config, strict_operations=False)
        return config

    def execute(self, **kwargs: Any) -> ToolResult:
        """Parse ``dsl_code`` against the optional session snapshot."""
        dsl_code: str = kwargs["dsl_code"]
        session: dict | None = kwargs.get("session")

        try:
            config = self._resolve_config(bool(kwargs.get("lenient")))
        except ValueError as exc:
            return ToolResult.failure(str(exc), INVALID_CONFIG)

        try:
            snapshot = SessionPayload.model_validate(session or {}).to_snapshot()
        except ValidationError as exc:
            return ToolResult.failure(
                f"Invalid session state: {exc.error_count()} error(s): {exc.errors()[0]['msg']}",
                INVALID_SESSION,
            )

        try:
            actions = DSLParser(snapshot, config).parse(dsl_code)
        except DSLError as exc:
            logger.debug("translate_dsl: %s", exc)
            return ToolResult.failure(str(exc), exc.kind, statement_index=exc.statement_index)

        return ToolResult(
            success=True,
            data={"actions": actions},
            metadata={
                "action_count": len(actions),
                "created_tracks": sum(1 for a in actions if a["action"] == "create_track"),
                "session_tracks": len(snapshot),
            },
        )
