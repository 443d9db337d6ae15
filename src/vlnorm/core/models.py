"""Pydantic models for vlnorm data structures."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import WarningCode


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Channel or property that caused the error")
    reason: str | None = Field(default=None, description="Detailed reason for the error")
    suggestion: str | None = Field(default=None, description="Suggested correction")


class ErrorResponse(BaseModel):
    """Serializable form of a fatal normalization error."""

    code: str = Field(..., description="Error code (e.g., E422_MISSING_CONTINUOUS_AXIS)")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] | None = Field(default=None, description="Detailed error information")
    hint: str | None = Field(default=None, description="Correction hint for the user")
    phase: str | None = Field(default=None, description="Normalization phase where the error occurred")


class Diagnostic(BaseModel):
    """A recoverable warning emitted while normalizing a spec."""

    model_config = ConfigDict(frozen=True)

    code: WarningCode = Field(..., description="Warning category")
    message: str = Field(..., description="Human-readable warning message")
    channel: str | None = Field(default=None, description="Encoding channel the warning refers to")
    mark: str | None = Field(default=None, description="Mark type the warning refers to")
    phase: str | None = Field(default=None, description="Normalization phase that raised the warning")


class NormalizeResult(BaseModel):
    """Output of a normalize call: the normalized tree plus collected warnings."""

    spec: dict[str, Any] = Field(..., description="Normalized unit / layer / facet spec")
    warnings: list[Diagnostic] = Field(default_factory=list, description="Warnings in traversal order")

    @property
    def messages(self) -> list[str]:
        """Warning messages in emission order."""
        return [w.message for w in self.warnings]


class StackProperties(BaseModel):
    """Stacking decision for one unit spec."""

    model_config = ConfigDict(frozen=True)

    groupby_channel: str | None = Field(..., description="Dimension axis of the stack ('x' or 'y')")
    field_channel: str = Field(..., description="Measure axis of the stack ('x' or 'y')")
    stack_fields: list[str] = Field(..., description="Stack-by field names from color and detail")
    offset: str = Field(..., description="Stack offset mode")
