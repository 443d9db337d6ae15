"""Error handling and exception definitions for vlnorm.

Every error raised here aborts the whole normalize call. Recoverable problems
are reported through :class:`vlnorm.infra.diagnostics.Diagnostics` instead.
"""

from .enums import ErrorCode, NormalizePhase
from .models import Diagnostic, ErrorDetail, ErrorResponse


class VlnormError(Exception):
    """Base exception for all vlnorm errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        details: list[ErrorDetail] | None = None,
        hint: str | None = None,
        phase: NormalizePhase | None = None,
    ):
        """Initialize vlnorm error.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            details: Optional detailed error information
            hint: Optional correction hint for the user
            phase: Optional normalization phase where error occurred
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or []
        self.hint = hint
        self.phase = phase

    def to_error_response(self) -> ErrorResponse:
        """Convert exception to ErrorResponse model.

        Returns:
            ErrorResponse model instance
        """
        return ErrorResponse(
            code=self.code.value,
            message=self.message,
            details=self.details if self.details else None,
            hint=self.hint,
            phase=self.phase.value if self.phase else None,
        )


class InvalidSpecError(VlnormError):
    """Raised when a spec has no valid normalization."""

    def __init__(
        self,
        message: str,
        details: list[ErrorDetail] | None = None,
        hint: str | None = None,
        phase: NormalizePhase | None = None,
    ):
        """Initialize invalid spec error."""
        super().__init__(
            message=message,
            code=ErrorCode.E400_INVALID_SPEC,
            details=details,
            hint=hint,
            phase=phase,
        )


class CompositeMarkError(VlnormError):
    """Base class for axis and orientation failures of composite marks."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        mark: str,
        hint: str | None = None,
        details: list[ErrorDetail] | None = None,
    ):
        """Initialize composite mark error.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            mark: Composite mark type being expanded
            hint: Optional correction hint for the user
            details: Optional detailed error information
        """
        super().__init__(
            message=message,
            code=code,
            details=details,
            hint=hint,
            phase=NormalizePhase.ORIENTATION,
        )
        self.mark = mark


class MissingContinuousAxisError(CompositeMarkError):
    """Raised when neither x nor y is a continuous field definition."""

    def __init__(self, mark: str):
        """Initialize missing continuous axis error."""
        super().__init__(
            message=f"Need a valid continuous axis for {mark}s",
            code=ErrorCode.E422_MISSING_CONTINUOUS_AXIS,
            mark=mark,
            hint="Map a quantitative or temporal field to either x or y",
        )


class AggregateConflictError(CompositeMarkError):
    """Raised when both axes carry the composite mark as their aggregate."""

    def __init__(self, mark: str):
        """Initialize aggregate conflict error."""
        super().__init__(
            message="Both x and y cannot have aggregate",
            code=ErrorCode.E422_AGGREGATE_CONFLICT,
            mark=mark,
            hint=f"Set aggregate '{mark}' on exactly one axis, or use an explicit orient",
            details=[
                ErrorDetail(field="x", reason=f"aggregate is '{mark}'"),
                ErrorDetail(field="y", reason=f"aggregate is '{mark}'"),
            ],
        )


class OrientConflictError(CompositeMarkError):
    """Raised when an explicit orient contradicts the axis types."""

    def __init__(self, mark: str, orient: str, required: str):
        """Initialize orient conflict error.

        Args:
            mark: Composite mark type
            orient: Orient given on the mark definition
            required: Orient implied by the encoding
        """
        super().__init__(
            message=f"Explicit orient '{orient}' conflicts with the encoding of {mark}, which requires '{required}'",
            code=ErrorCode.E422_ORIENT_CONFLICT,
            mark=mark,
            hint="Remove the orient property or swap the x and y encodings",
        )
        self.orient = orient
        self.required = required


class CustomAggregateError(CompositeMarkError):
    """Raised when a box plot's continuous axis carries a foreign aggregate."""

    def __init__(self, mark: str, aggregate: str, channel: str):
        """Initialize custom aggregate error."""
        super().__init__(
            message="Continuous axis should not have customized aggregation function " + aggregate,
            code=ErrorCode.E422_CUSTOM_AGGREGATE,
            mark=mark,
            hint=f"Remove aggregate '{aggregate}' from the {channel} channel",
            details=[ErrorDetail(field=channel, reason=f"aggregate '{aggregate}' is not supported by {mark}")],
        )


class UnregisteredMarkError(VlnormError):
    """Raised when dispatching or inspecting an unknown composite mark."""

    def __init__(self, message: str, mark: str, available: list[str] | None = None):
        """Initialize unregistered mark error."""
        hint = None
        if available:
            hint = f"Registered composite marks: {', '.join(available)}"

        super().__init__(
            message=message,
            code=ErrorCode.E404_UNREGISTERED_MARK,
            hint=hint,
            phase=NormalizePhase.COMPOSITE_EXPANSION,
        )
        self.mark = mark


class UnknownChannelError(VlnormError):
    """Raised when a channel name outside the closed channel set is looked up."""

    def __init__(self, channel: str):
        """Initialize unknown channel error."""
        super().__init__(
            message=f"Invalid encoding channel {channel}",
            code=ErrorCode.E500_UNKNOWN_CHANNEL,
            hint="This is a programming error: only registered channels may be queried",
        )
        self.channel = channel


class StrictModeError(VlnormError):
    """Raised in strict mode when a recoverable warning is emitted."""

    def __init__(self, diagnostic: Diagnostic):
        """Initialize strict mode error."""
        details = [ErrorDetail(field=diagnostic.channel, reason=diagnostic.message)]
        super().__init__(
            message=f"Warning treated as error: {diagnostic.message}",
            code=ErrorCode.E422_STRICT_WARNING,
            details=details,
            hint="Run in permissive mode to collect warnings instead",
            phase=NormalizePhase(diagnostic.phase) if diagnostic.phase else None,
        )
        self.diagnostic = diagnostic
