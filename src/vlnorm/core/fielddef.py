"""Field definitions: variant classification and canonical field naming.

A channel definition is one of three shapes:

- a field reference ``{"field": ..., "type": ..., "aggregate"?, "bin"?, "timeUnit"?, ...}``
  (``{"aggregate": "count"}`` counts as a field reference without a field);
- a constant ``{"value": ...}``;
- a list of field references (``detail``, ``order`` and ``tooltip`` only).

Callers branch on :func:`channel_def_kind` instead of probing keys.
"""

from typing import Any

from .enums import ChannelDefKind, FieldType

COUNT = "count"

BIN_SUFFIX_START = "_start"
BIN_SUFFIX_END = "_end"
BIN_SUFFIX_RANGE = "_range"

_CONTINUOUS_TYPES = (FieldType.QUANTITATIVE.value, FieldType.TEMPORAL.value)
_DISCRETE_TYPES = (FieldType.NOMINAL.value, FieldType.ORDINAL.value)


def channel_def_kind(channel_def: Any) -> ChannelDefKind:  # noqa: ANN401
    """Classify a channel definition into its variant.

    Args:
        channel_def: Value bound to an encoding channel

    Returns:
        The ChannelDefKind variant; EMPTY for anything malformed
    """
    if isinstance(channel_def, list):
        return ChannelDefKind.FIELD_LIST if channel_def else ChannelDefKind.EMPTY
    if not isinstance(channel_def, dict):
        return ChannelDefKind.EMPTY
    if channel_def.get("field") is not None or channel_def.get("aggregate") == COUNT:
        return ChannelDefKind.FIELD
    if "value" in channel_def:
        return ChannelDefKind.VALUE
    return ChannelDefKind.EMPTY


def is_field_def(channel_def: Any) -> bool:  # noqa: ANN401
    """Whether the channel definition is a single field reference."""
    return channel_def_kind(channel_def) is ChannelDefKind.FIELD


def is_value_def(channel_def: Any) -> bool:  # noqa: ANN401
    """Whether the channel definition is a constant value."""
    return channel_def_kind(channel_def) is ChannelDefKind.VALUE


def is_binned(field_def: dict[str, Any]) -> bool:
    """Whether the field definition requests binning."""
    return bool(field_def.get("bin"))


def is_discrete(channel_def: Any) -> bool:  # noqa: ANN401
    """Whether the channel definition is a discrete (nominal/ordinal/binned) field."""
    if not is_field_def(channel_def):
        return False
    field_type = channel_def.get("type")
    if field_type in _DISCRETE_TYPES:
        return True
    return field_type == FieldType.QUANTITATIVE.value and is_binned(channel_def)


def is_continuous(channel_def: Any) -> bool:  # noqa: ANN401
    """Whether the channel definition is a continuous (quantitative/temporal, non-binned) field."""
    if not is_field_def(channel_def):
        return False
    return channel_def.get("type") in _CONTINUOUS_TYPES and not is_discrete(channel_def)


def is_measure(channel_def: Any) -> bool:  # noqa: ANN401
    """Whether the channel definition plays the measure role."""
    return is_continuous(channel_def)


def canonical_field_name(
    field_def: dict[str, Any],
    bin_suffix: str | None = None,
    *,
    expr: bool = False,
) -> str | None:
    """Return the field name a field definition has after its implicit transforms.

    Args:
        field_def: Field reference, possibly with aggregate, timeUnit or bin
        bin_suffix: Suffix for binned fields; defaults to ``_start``
        expr: Prefix the name with ``datum.`` for use in expressions

    Returns:
        The canonical field name, or None when the definition has no field
    """
    field = field_def.get("field")
    aggregate = field_def.get("aggregate")

    if aggregate == COUNT and field is None:
        name = "count_*"
    elif field is None:
        return None
    elif aggregate:
        name = f"{aggregate}_{field}"
    elif field_def.get("timeUnit"):
        name = f"{field_def['timeUnit']}_{field}"
    elif is_binned(field_def):
        name = f"bin_{field}{bin_suffix if bin_suffix is not None else BIN_SUFFIX_START}"
    else:
        name = str(field)

    return f"datum.{name}" if expr else name


def strip_modifiers(field_def: dict[str, Any], field: str) -> dict[str, Any]:
    """Return a copy of a field definition pointing at ``field`` without bin/timeUnit/aggregate."""
    stripped = {k: v for k, v in field_def.items() if k not in ("bin", "timeUnit", "aggregate")}
    stripped["field"] = field
    return stripped


def get_title(field_def: dict[str, Any]) -> str | None:
    """Return the explicit title of a field definition, preferring the axis title."""
    axis = field_def.get("axis")
    if isinstance(axis, dict) and axis.get("title") is not None:
        return str(axis["title"])
    if field_def.get("title") is not None:
        return str(field_def["title"])
    return None
