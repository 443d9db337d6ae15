"""Enumerations for vlnorm core types."""

from enum import Enum


class FieldType(str, Enum):
    """Measurement type of an encoded data field."""

    QUANTITATIVE = "quantitative"
    TEMPORAL = "temporal"
    ORDINAL = "ordinal"
    NOMINAL = "nominal"


class ScaleType(str, Enum):
    """Scale types a channel may be mapped through."""

    # Continuous
    LINEAR = "linear"
    LOG = "log"
    POW = "pow"
    SQRT = "sqrt"
    TIME = "time"
    UTC = "utc"
    SEQUENTIAL = "sequential"
    # Discretizing
    QUANTILE = "quantile"
    QUANTIZE = "quantize"
    THRESHOLD = "threshold"
    BIN_ORDINAL = "bin-ordinal"
    # Discrete
    ORDINAL = "ordinal"
    POINT = "point"
    BAND = "band"


class RangeType(str, Enum):
    """Kind of range a channel's scale produces."""

    CONTINUOUS = "continuous"
    DISCRETE = "discrete"
    FLEXIBLE = "flexible"


class Orient(str, Enum):
    """Orientation of a composite mark (which axis is continuous)."""

    VERTICAL = "vertical"  # continuous y
    HORIZONTAL = "horizontal"  # continuous x


class StackOffset(str, Enum):
    """Stack offset modes."""

    ZERO = "zero"
    CENTER = "center"
    NORMALIZE = "normalize"
    NONE = "none"


class ChannelDefKind(str, Enum):
    """Variants of the value bound to an encoding channel."""

    FIELD = "field"
    VALUE = "value"
    FIELD_LIST = "field_list"
    EMPTY = "empty"


class ErrorCode(str, Enum):
    """Error codes for fatal normalization failures."""

    E400_INVALID_SPEC = "E400_INVALID_SPEC"
    E404_UNREGISTERED_MARK = "E404_UNREGISTERED_MARK"
    E422_MISSING_CONTINUOUS_AXIS = "E422_MISSING_CONTINUOUS_AXIS"
    E422_AGGREGATE_CONFLICT = "E422_AGGREGATE_CONFLICT"
    E422_ORIENT_CONFLICT = "E422_ORIENT_CONFLICT"
    E422_CUSTOM_AGGREGATE = "E422_CUSTOM_AGGREGATE"
    E422_STRICT_WARNING = "E422_STRICT_WARNING"
    E500_UNKNOWN_CHANNEL = "E500_UNKNOWN_CHANNEL"


class WarningCode(str, Enum):
    """Codes for recoverable diagnostics collected during normalization."""

    INCOMPATIBLE_CHANNEL = "incompatible_channel"
    EMPTY_FIELD_DEF = "empty_field_def"
    FACET_CHANNEL_DROPPED = "facet_channel_dropped"
    CUSTOM_AGGREGATE = "custom_aggregate"
    CENTER_EXTENT_MISMATCH = "center_extent_mismatch"
    CENTER_NOT_NEEDED = "center_not_needed"
    RANGED_CENTER_EXTENT = "ranged_center_extent"
    STACK_NON_LINEAR_SCALE = "stack_non_linear_scale"
    STACK_RANGED_MARK = "stack_ranged_mark"
    STACK_NON_SUMMATIVE = "stack_non_summative"


class NormalizePhase(str, Enum):
    """Stages of the normalization pipeline, for error and warning tracking."""

    CHANNEL_FILTERING = "channel_filtering"
    FACET_EXTRACTION = "facet_extraction"
    ORIENTATION = "orientation"
    TRANSFORM_EXTRACTION = "transform_extraction"
    COMPOSITE_EXPANSION = "composite_expansion"
    OVERLAY = "overlay"
    STACK = "stack"
