"""Unit tests for error handling."""

import json

import pytest

from vlnorm.core.enums import ErrorCode, NormalizePhase, WarningCode
from vlnorm.core.errors import (
    AggregateConflictError,
    CompositeMarkError,
    CustomAggregateError,
    InvalidSpecError,
    MissingContinuousAxisError,
    OrientConflictError,
    StrictModeError,
    UnknownChannelError,
    UnregisteredMarkError,
    VlnormError,
)
from vlnorm.core.models import Diagnostic, ErrorDetail


class TestVlnormError:
    """Test base VlnormError class."""

    def test_basic_error(self) -> None:
        """Test basic error creation."""
        error = VlnormError(
            message="Test error",
            code=ErrorCode.E400_INVALID_SPEC,
        )
        assert str(error) == "Test error"
        assert error.code == ErrorCode.E400_INVALID_SPEC
        assert error.details == []
        assert error.hint is None
        assert error.phase is None

    def test_full_error(self) -> None:
        """Test error with all fields."""
        details = [
            ErrorDetail(
                field="y",
                reason="Test reason",
                suggestion="Test suggestion",
            )
        ]
        error = VlnormError(
            message="Full error",
            code=ErrorCode.E422_ORIENT_CONFLICT,
            details=details,
            hint="Test hint",
            phase=NormalizePhase.ORIENTATION,
        )
        assert error.message == "Full error"
        assert len(error.details) == 1
        assert error.hint == "Test hint"
        assert error.phase == NormalizePhase.ORIENTATION

    def test_to_error_response(self) -> None:
        """Test conversion to ErrorResponse."""
        error = VlnormError(
            message="Test error",
            code=ErrorCode.E400_INVALID_SPEC,
            hint="Fix your spec",
            phase=NormalizePhase.COMPOSITE_EXPANSION,
        )
        response = error.to_error_response()
        assert response.code == "E400_INVALID_SPEC"
        assert response.message == "Test error"
        assert response.hint == "Fix your spec"
        assert response.phase == "composite_expansion"
        assert response.details is None

    def test_error_response_serializes(self) -> None:
        """Test that the error response is JSON serializable."""
        error = AggregateConflictError("box-plot")
        payload = json.loads(error.to_error_response().model_dump_json())
        assert payload["code"] == "E422_AGGREGATE_CONFLICT"
        assert payload["phase"] == "orientation"
        assert [d["field"] for d in payload["details"]] == ["x", "y"]


class TestCompositeMarkErrors:
    """Test axis and orientation errors of composite marks."""

    def test_missing_continuous_axis(self) -> None:
        """Test message and code of the missing axis error."""
        error = MissingContinuousAxisError("errorbar")
        assert isinstance(error, CompositeMarkError)
        assert error.message == "Need a valid continuous axis for errorbars"
        assert error.code == ErrorCode.E422_MISSING_CONTINUOUS_AXIS
        assert error.phase == NormalizePhase.ORIENTATION
        assert error.mark == "errorbar"

    def test_aggregate_conflict(self) -> None:
        """Test message of the aggregate conflict error."""
        error = AggregateConflictError("box-plot")
        assert error.message == "Both x and y cannot have aggregate"
        assert "box-plot" in error.hint

    def test_orient_conflict(self) -> None:
        """Test orient conflict error keeps both orientations."""
        error = OrientConflictError("box-plot", "horizontal", "vertical")
        assert error.orient == "horizontal"
        assert error.required == "vertical"
        assert "horizontal" in error.message
        assert error.code == ErrorCode.E422_ORIENT_CONFLICT

    def test_custom_aggregate(self) -> None:
        """Test custom aggregate error names the aggregate."""
        error = CustomAggregateError("box-plot", "mean", "y")
        assert error.message == "Continuous axis should not have customized aggregation function mean"
        assert error.details[0].field == "y"
        assert error.code == ErrorCode.E422_CUSTOM_AGGREGATE


class TestOtherErrors:
    """Test registry, channel and strict-mode errors."""

    def test_invalid_spec(self) -> None:
        """Test invalid spec error code."""
        error = InvalidSpecError("Bad spec", hint="Fix it")
        assert error.code == ErrorCode.E400_INVALID_SPEC
        assert error.hint == "Fix it"

    def test_unregistered_mark_with_available(self) -> None:
        """Test hint lists the registered marks."""
        error = UnregisteredMarkError("Invalid mark type foo", "foo", ["box-plot", "errorbar"])
        assert error.code == ErrorCode.E404_UNREGISTERED_MARK
        assert error.hint == "Registered composite marks: box-plot, errorbar"
        assert error.mark == "foo"

    def test_unregistered_mark_without_available(self) -> None:
        """Test no hint without registered marks."""
        error = UnregisteredMarkError("Invalid mark type foo", "foo")
        assert error.hint is None

    def test_unknown_channel(self) -> None:
        """Test unknown channel error."""
        error = UnknownChannelError("shapes")
        assert error.channel == "shapes"
        assert error.message == "Invalid encoding channel shapes"
        assert error.code == ErrorCode.E500_UNKNOWN_CHANNEL

    def test_strict_mode_error_wraps_diagnostic(self) -> None:
        """Test strict mode error carries the warning."""
        diagnostic = Diagnostic(
            code=WarningCode.INCOMPATIBLE_CHANNEL,
            message='shape dropped as it is incompatible with "box-plot".',
            channel="shape",
            mark="box-plot",
            phase=NormalizePhase.CHANNEL_FILTERING.value,
        )
        error = StrictModeError(diagnostic)
        assert error.diagnostic is diagnostic
        assert error.message.startswith("Warning treated as error: ")
        assert error.phase == NormalizePhase.CHANNEL_FILTERING
        assert error.details[0].field == "shape"

    def test_errors_are_exceptions(self) -> None:
        """Test every error can be raised and caught as VlnormError."""
        with pytest.raises(VlnormError):
            raise MissingContinuousAxisError("box-plot")
