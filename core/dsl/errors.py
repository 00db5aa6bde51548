"""core/dsl/errors.py — Typed failures raised by the DSL translator.

Every error derives from :class:`DSLError` and exposes a stable ``kind``
string so the tool layer can report it without string-matching messages.

A failing statement aborts the whole parse.  The parser attaches the failing
statement's index and a short preview before re-raising.
"""

from __future__ import annotations


class DSLError(Exception):
    """Base class for all DSL translation failures."""

    kind: str = "dsl_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.statement_index: int | None = None
        self.statement_preview: str | None = None

    def attach_statement(self, index: int, preview: str) -> None:
        """Record which statement failed (first call wins)."""
        if self.statement_index is not None:
            return
        self.statement_index = index
        self.statement_preview = preview

    def __str__(self) -> str:
        if self.statement_index is None:
            return self.message
        return f"{self.message} (statement {self.statement_index + 1}: {self.statement_preview})"


class EmptyInputError(DSLError):
    """The program contains no statements."""

    kind = "empty_input"


class DSLSyntaxError(DSLError):
    """Grammar violation: unbalanced brackets, bad call shape, wrong leading call."""

    kind = "syntax_error"


class MissingRequiredParameter(DSLError):
    """An operation's mandatory parameter is absent or unparseable."""

    kind = "missing_required_parameter"

    def __init__(self, operation: str, parameter: str, message: str | None = None) -> None:
        super().__init__(message or f"{operation}() requires parameter {parameter!r}")
        self.operation = operation
        self.parameter = parameter


class AmbiguousParameter(DSLError):
    """Mutually exclusive parameter forms were combined."""

    kind = "ambiguous_parameter"

    def __init__(
        self, operation: str, parameters: tuple[str, ...], message: str | None = None
    ) -> None:
        names = ", ".join(parameters)
        super().__init__(message or f"{operation}() accepts only one of: {names}")
        self.operation = operation
        self.parameters = parameters


class MissingAlternativeParameter(MissingRequiredParameter, AmbiguousParameter):
    """None of an operation's alternative parameter forms was given."""

    kind = "missing_required_parameter"

    def __init__(self, operation: str, parameters: tuple[str, ...]) -> None:
        names = " or ".join(parameters)
        DSLError.__init__(self, f"{operation}() must specify {names}")
        self.operation = operation
        self.parameter = parameters[0]
        self.parameters = parameters


class NoTrackContext(DSLError):
    """A chained operation has no current track and no selected-track fallback."""

    kind = "no_track_context"

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"no track context for {operation}() call and no selected track found"
        )
        self.operation = operation


class UnresolvedSelection(DSLError):
    """``track(selected=true)`` was used but no snapshot track is selected."""

    kind = "unresolved_selection"

    def __init__(self) -> None:
        super().__init__("no selected track found in session state")


class UnresolvedTrackReference(DSLError):
    """``track(id=...)`` names a track that cannot be resolved."""

    kind = "unresolved_track_reference"

    def __init__(self, reference: str | int, reason: str) -> None:
        super().__init__(f"cannot resolve track reference {reference!r}: {reason}")
        self.reference = reference
