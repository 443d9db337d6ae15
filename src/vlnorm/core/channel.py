"""Constants and lookup tables for encoding channels (visual variables)."""

from types import MappingProxyType

from .enums import RangeType, ScaleType
from .errors import UnknownChannelError
from .mark import AREA, BAR, CIRCLE, POINT, PRIMITIVE_MARKS, RECT, RULE, SQUARE, TEXT, TICK

X = "x"
Y = "y"
X2 = "x2"
Y2 = "y2"
ROW = "row"
COLUMN = "column"
COLOR = "color"
OPACITY = "opacity"
SIZE = "size"
SHAPE = "shape"
TEXT_CHANNEL = "text"
TOOLTIP = "tooltip"
DETAIL = "detail"
ORDER = "order"

CHANNELS: tuple[str, ...] = (
    X,
    Y,
    X2,
    Y2,
    ROW,
    COLUMN,
    COLOR,
    OPACITY,
    SIZE,
    SHAPE,
    TEXT_CHANNEL,
    TOOLTIP,
    DETAIL,
    ORDER,
)

FACET_CHANNELS: tuple[str, ...] = (ROW, COLUMN)
SECONDARY_CHANNELS = MappingProxyType({X: X2, Y: Y2})
UNIT_CHANNELS: tuple[str, ...] = tuple(c for c in CHANNELS if c not in FACET_CHANNELS)

# Channels that may hold an array of field definitions
ARRAY_CHANNELS: frozenset[str] = frozenset({DETAIL, ORDER, TOOLTIP})

# Channels contributing stack-by fields
STACK_GROUP_CHANNELS: tuple[str, ...] = (COLOR, DETAIL)

_ALL_MARKS = frozenset(PRIMITIVE_MARKS)

_SUPPORTED_MARKS = MappingProxyType(
    {
        X: _ALL_MARKS,
        Y: _ALL_MARKS,
        COLOR: _ALL_MARKS,
        OPACITY: _ALL_MARKS,
        DETAIL: _ALL_MARKS,
        ORDER: _ALL_MARKS,
        TOOLTIP: _ALL_MARKS,
        ROW: _ALL_MARKS,
        COLUMN: _ALL_MARKS,
        X2: frozenset({RULE, BAR, RECT, AREA, TEXT}),
        Y2: frozenset({RULE, BAR, RECT, AREA, TEXT}),
        SIZE: frozenset({POINT, TICK, RULE, CIRCLE, SQUARE, BAR, TEXT}),
        SHAPE: frozenset({POINT}),
        TEXT_CHANNEL: frozenset({TEXT}),
    }
)

_DIMENSION_ONLY = frozenset({ROW, COLUMN, SHAPE})
_MEASURE_ONLY = frozenset({SIZE, TEXT_CHANNEL})

_CONTINUOUS_SCALES = frozenset(
    {
        ScaleType.LINEAR.value,
        ScaleType.LOG.value,
        ScaleType.POW.value,
        ScaleType.SQRT.value,
        ScaleType.TIME.value,
        ScaleType.UTC.value,
        ScaleType.SEQUENTIAL.value,
    }
)
_ALL_SCALES = frozenset(s.value for s in ScaleType)

_SUPPORTED_SCALE_TYPES = MappingProxyType(
    {
        X: _ALL_SCALES,
        Y: _ALL_SCALES,
        X2: _ALL_SCALES,
        Y2: _ALL_SCALES,
        ROW: frozenset({ScaleType.BAND.value}),
        COLUMN: frozenset({ScaleType.BAND.value}),
        SHAPE: frozenset({ScaleType.ORDINAL.value, ScaleType.POINT.value}),
        SIZE: _CONTINUOUS_SCALES
        | frozenset({ScaleType.POINT.value, ScaleType.BAND.value, ScaleType.BIN_ORDINAL.value}),
        OPACITY: _CONTINUOUS_SCALES
        | frozenset({ScaleType.POINT.value, ScaleType.BAND.value, ScaleType.BIN_ORDINAL.value}),
        COLOR: _ALL_SCALES,
    }
)

_NO_SCALE = frozenset({DETAIL, ORDER, TEXT_CHANNEL, TOOLTIP})


def _check(channel: str) -> None:
    if channel not in CHANNELS:
        raise UnknownChannelError(channel)


def is_channel(name: str) -> bool:
    """Whether a name belongs to the closed channel set."""
    return name in CHANNELS


def supported_marks_for(channel: str) -> frozenset[str]:
    """Return the primitive marks that support a channel.

    Args:
        channel: Channel name

    Returns:
        Set of mark types

    Raises:
        UnknownChannelError: If the channel is not a registered channel
    """
    _check(channel)
    return _SUPPORTED_MARKS[channel]


def supports_mark(channel: str, mark: str) -> bool:
    """Return whether a channel supports a particular mark type."""
    return mark in supported_marks_for(channel)


def supports_role(channel: str) -> dict[str, bool]:
    """Return whether a channel supports the dimension and measure roles.

    Args:
        channel: Channel name

    Returns:
        Dictionary with ``dimension`` and ``measure`` flags
    """
    _check(channel)
    return {
        "dimension": channel not in _MEASURE_ONLY,
        "measure": channel not in _DIMENSION_ONLY,
    }


def has_scale(channel: str) -> bool:
    """Whether a channel is mapped through a scale."""
    _check(channel)
    return channel not in _NO_SCALE


def supports_scale_type(channel: str, scale_type: ScaleType | str) -> bool:
    """Whether a channel can use a scale of the given type."""
    _check(channel)
    if not has_scale(channel):
        return False
    value = scale_type.value if isinstance(scale_type, ScaleType) else scale_type
    return value in _SUPPORTED_SCALE_TYPES[channel]


def range_type(channel: str) -> RangeType | None:
    """Return the kind of range a channel's scale produces.

    Args:
        channel: Channel name

    Returns:
        RangeType, or None for channels without a scale
    """
    _check(channel)
    if channel in (X, Y, X2, Y2, SIZE, OPACITY):
        return RangeType.CONTINUOUS
    if channel in (SHAPE, ROW, COLUMN):
        return RangeType.DISCRETE
    if channel == COLOR:
        return RangeType.FLEXIBLE
    return None
