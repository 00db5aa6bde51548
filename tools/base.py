"""
tools/base.py — StudioTool contract shared by the registry, the CLI and any
LLM tool-calling layer.

A tool declares its parameters once.  The same declaration drives input
validation (:meth:`StudioTool.validate_inputs`) and the JSON-schema
description handed to a model (:meth:`StudioTool.to_dict`).

Calling a tool never raises: every outcome is a :class:`ToolResult`, and a
failed result names its cause in ``error_kind`` so callers can branch on it
without parsing messages.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

# Python parameter type -> JSON Schema type
_JSON_TYPES: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    dict: "object",
}

INVALID_INPUT = "invalid_input"
TOOL_ERROR = "tool_error"


@dataclass(frozen=True)
class ToolParameter:
    """
    One declared keyword parameter of a tool.

    Attributes:
        name: Keyword the caller passes
        type: Expected Python type; must be a key of the JSON type map
        description: Shown to the model in the tool schema
        required: Whether a value must be supplied
        default: Documented default for optional parameters
    """

    name: str
    type: type
    description: str
    required: bool = True
    default: Any = None

    def __post_init__(self) -> None:
        if self.type not in _JSON_TYPES:
            raise ValueError(f"Parameter '{self.name}' has unsupported type {self.type.__name__}")

    @property
    def json_type(self) -> str:
        return _JSON_TYPES[self.type]

    def validate(self, value: Any) -> str | None:
        """Return an error message for ``value``, or None when it is acceptable."""
        if value is None:
            return f"Required parameter '{self.name}' is missing" if self.required else None

        # bool is an int subclass; only bool parameters take it
        if isinstance(value, bool) and self.type is not bool:
            return f"Parameter '{self.name}' must be {self.json_type}, got boolean"
        if not isinstance(value, self.type):
            return f"Parameter '{self.name}' must be {self.json_type}, got {type(value).__name__}"
        return None

    def to_schema(self) -> dict[str, Any]:
        """JSON-schema property for this parameter."""
        prop: dict[str, Any] = {"type": self.json_type, "description": self.description}
        if not self.required and self.default is not None:
            prop["default"] = self.default
        return prop


@dataclass(frozen=True)
class ToolResult:
    """
    Outcome of one tool call.

    Attributes:
        success: Whether the call succeeded
        data: Payload on success
        error: Human-readable message on failure
        metadata: Counts on success; ``error_kind`` and context on failure
    """

    success: bool
    data: Any = None
    error: str | None = None
    metadata: dict[str, Any] | None = None

    @classmethod
    def failure(cls, error: str, kind: str, **context: Any) -> "ToolResult":
        return cls(success=False, error=error, metadata={"error_kind": kind, **context})

    @property
    def error_kind(self) -> str | None:
        """Machine-readable failure category, or None for successes."""
        if self.success or not self.metadata:
            return None
        return self.metadata.get("error_kind")


class StudioTool(ABC):
    """
    Base class for studio tools.

    Studio tools are deterministic functions over DSL text and session
    snapshots.  They never touch the DAW themselves; the action records they
    return are executed downstream.

    Subclasses provide ``name``, ``description``, ``parameters`` and
    ``execute()``.  Callers invoke the instance itself, which validates the
    keyword arguments before ``execute()`` sees them.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique tool identifier (lowercase, underscores)."""

    @property
    @abstractmethod
    def description(self) -> str:
        """
        Description used by a model to decide when to call the tool.

        Name the DSL operations the tool understands.
        """

    @property
    @abstractmethod
    def parameters(self) -> list[ToolParameter]:
        """Keyword parameters this tool accepts."""

    def validate_inputs(self, **kwargs: Any) -> str | None:
        """
        Check keyword arguments against the declared parameters.

        Returns:
            The first error message, or None when every argument is valid.
        """
        declared = {p.name for p in self.parameters}
        unknown = sorted(set(kwargs) - declared)
        if unknown:
            return f"Unknown parameter(s) for {self.name}: {', '.join(unknown)}"

        for param in self.parameters:
            error = param.validate(kwargs.get(param.name))
            if error is not None:
                return error
        return None

    @abstractmethod
    def execute(self, **kwargs: Any) -> ToolResult:
        """Run the tool on already-validated keyword arguments."""

    def __call__(self, **kwargs: Any) -> ToolResult:
        error = self.validate_inputs(**kwargs)
        if error is not None:
            return ToolResult.failure(error, INVALID_INPUT)

        try:
            return self.execute(**kwargs)
        except Exception as e:
            logger.exception("Tool %s failed", self.name)
            return ToolResult.failure(f"Tool execution failed: {e}", TOOL_ERROR)

    def to_dict(self) -> dict[str, Any]:
        """
        Describe the tool for a tool_use API.

        Returns:
            ``{"name", "description", "input_schema"}`` where ``input_schema``
            is a JSON-schema object built from :attr:`parameters`.
        """
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": {
                "type": "object",
                "properties": {p.name: p.to_schema() for p in self.parameters},
                "required": [p.name for p in self.parameters if p.required],
            },
        }
