"""
Configuration dataclasses for the DSL translator.

These immutable config objects decouple translation defaults from function
signatures, making it easy to define standard configurations and share them
between the parser, the tool layer, and the CLI.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

# Environment variable → DSLConfig field.  Read only by DSLConfig.from_env().
ENV_VARS: dict[str, str] = {
    "DSL_DEFAULT_LENGTH_BARS": "default_length_bars",
    "DSL_DEFAULT_CLIP_LENGTH": "default_clip_length",
    "DSL_DEFAULT_NOTE_VELOCITY": "default_note_velocity",
    "DSL_MAX_PREVIEW_LENGTH": "max_preview_length",
    "DSL_STRICT_OPERATIONS": "strict_operations",
}

_TRUTHY: frozenset[str] = frozenset({"1", "true", "yes", "on"})
_FALSY: frozenset[str] = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class DSLConfig:
    """
    Configuration for DSL translation.

    Immutable configuration object that can be shared by any number of
    parser instances.  Holds the defaults applied by the action builders.

    Attributes:
        default_length_bars: Clip length in bars when ``newClip(bar=...)``
            omits ``length_bars``. Defaults to 4.
        default_clip_length: Clip length when ``newClip(start=...)`` omits
            ``length``. Defaults to 4.0.
        default_note_velocity: Velocity for notes without ``velocity``.
            Defaults to 100.
        default_note_start: Start for notes without ``start``. Defaults to 0.0.
        default_note_duration: Duration for notes without ``duration``.
            Defaults to 1.0.
        max_preview_length: Maximum characters of DSL text quoted in logs
            and error messages. Defaults to 200.
        strict_operations: When True an unknown chained operation is a syntax
            error; when False it is skipped with a warning.

    Example:
        >>> config = DSLConfig(default_length_bars=8)
        >>> parser = DSLParser(config=config)
    """

    default_length_bars: int = 4
    default_clip_length: float = 4.0
    default_note_velocity: int = 100
    default_note_start: float = 0.0
    default_note_duration: float = 1.0
    max_preview_length: int = 200
    strict_operations: bool = True

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.default_length_bars <= 0:
            raise ValueError(
                f"default_length_bars must be positive, got {self.default_length_bars}"
            )
        if self.default_clip_length <= 0:
            raise ValueError(
                f"default_clip_length must be positive, got {self.default_clip_length}"
            )
        if not 0 <= self.default_note_velocity <= 127:
            raise ValueError(
                f"default_note_velocity must be in 0-127, got {self.default_note_velocity}"
            )
        if self.default_note_start < 0:
            raise ValueError(
                f"default_note_start must be non-negative, got {self.default_note_start}"
            )
        if self.default_note_duration <= 0:
            raise ValueError(
                f"default_note_duration must be positive, got {self.default_note_duration}"
            )
        if self.max_preview_length < 10:
            raise ValueError(
                f"max_preview_length must be at least 10, got {self.max_preview_length}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DSLConfig:
        """Build a config from ``DSL_*`` environment variables.

        Unset variables keep their dataclass defaults.

        Raises:
            ValueError: If a variable cannot be converted or fails validation.
        """
        env = os.environ if environ is None else environ
        overrides: dict[str, object] = {}
        for var, field_name in ENV_VARS.items():
            raw = env.get(var)
            if raw is None or not raw.strip():
                continue
            raw = raw.strip()
            if field_name == "strict_operations":
                overrides[field_name] = _parse_flag(var, raw)
            elif field_name == "default_clip_length":
                overrides[field_name] = _parse_number(var, raw, float)
            else:
                overrides[field_name] = _parse_number(var, raw, int)
        return cls(**overrides)  # type: ignore[arg-type]


def _parse_flag(var: str, raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f"{var} must be a boolean flag, got {raw!r}")


def _parse_number(var: str, raw: str, kind: type) -> int | float:
    try:
        return kind(raw)
    except ValueError:
        raise ValueError(f"{var} must be {kind.__name__}, got {raw!r}") from None


# Pre-defined configurations for common use cases

DEFAULT_CONFIG = DSLConfig()
"""Default configuration: 4-bar clips, strict operation names."""

LENIENT_CONFIG = DSLConfig(strict_operations=False)
"""Skips unknown chained operations instead of failing the parse."""
