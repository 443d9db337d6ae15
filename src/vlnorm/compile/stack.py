"""Stack properties of a unit spec and the stack / impute transforms they imply."""

from typing import Any

from vlnorm.core import messages
from vlnorm.core.channel import ORDER, SECONDARY_CHANNELS, STACK_GROUP_CHANNELS, X, Y
from vlnorm.core.encoding import channel_has_field, is_aggregate
from vlnorm.core.enums import ChannelDefKind, NormalizePhase, ScaleType, StackOffset, WarningCode
from vlnorm.core.fielddef import (
    BIN_SUFFIX_RANGE,
    BIN_SUFFIX_START,
    canonical_field_name,
    channel_def_kind,
    is_measure,
)
from vlnorm.core.mark import AREA, BAR
from vlnorm.core.models import StackProperties
from vlnorm.infra.diagnostics import Diagnostics

STACKABLE_MARKS: tuple[str, ...] = (BAR, AREA)

# Aggregates whose values add up across the stacked groups
SUM_OPS: tuple[str, ...] = ("count", "sum", "distinct", "valid", "missing")

_STACKABLE_SCALES = (ScaleType.LINEAR.value, ScaleType.TIME.value, ScaleType.UTC.value)
_DISABLED_OFFSETS = (None, False, StackOffset.NONE.value)


def _scale_type(scale_map: dict[str, Any] | None, channel: str) -> str | None:
    scale = (scale_map or {}).get(channel)
    if isinstance(scale, dict):
        return scale.get("type")
    return scale


def get_stack_fields(encoding: dict[str, Any], scale_map: dict[str, Any] | None = None) -> list[str]:
    """Collect the stack-by field names from the color and detail channels.

    Aggregated definitions are skipped. Binned fields on an ordinal scale use
    the ``_range`` suffix, all other binned fields ``_start``.

    Args:
        encoding: Encoding mapping
        scale_map: Channel to scale (or scale type) mapping

    Returns:
        Field names in channel order
    """
    fields: list[str] = []
    for channel in STACK_GROUP_CHANNELS:
        channel_def = encoding.get(channel)
        kind = channel_def_kind(channel_def)
        if kind is ChannelDefKind.FIELD:
            items = [channel_def]
        elif kind is ChannelDefKind.FIELD_LIST:
            items = [item for item in channel_def if channel_def_kind(item) is ChannelDefKind.FIELD]
        else:
            continue

        ordinal = _scale_type(scale_map, channel) == ScaleType.ORDINAL.value
        suffix = BIN_SUFFIX_RANGE if ordinal else BIN_SUFFIX_START
        for field_def in items:
            if field_def.get("aggregate"):
                continue
            name = canonical_field_name(field_def, suffix)
            if name is not None and name not in fields:
                fields.append(name)
    return fields


def _resolve_offset(measure_def: dict[str, Any], config: dict[str, Any]) -> str | None:
    offset = measure_def["stack"] if "stack" in measure_def else config.get("stack")
    if offset in _DISABLED_OFFSETS:
        return None
    if offset is True:
        configured = config.get("stack")
        return StackOffset.ZERO.value if configured in _DISABLED_OFFSETS or configured is True else str(configured)
    return str(offset)


def compute_stack_properties(
    mark: str,
    encoding: dict[str, Any],
    scale_map: dict[str, Any] | None,
    config: dict[str, Any],
    diagnostics: Diagnostics | None = None,
) -> StackProperties | None:
    """Decide whether and how a unit spec is stacked.

    Args:
        mark: Primitive mark type
        encoding: Resolved encoding of the unit spec
        scale_map: Channel to scale (or scale type) mapping
        config: Effective config
        diagnostics: Warning sink; warnings are skipped when None

    Returns:
        StackProperties, or None when the spec is not stacked
    """
    if mark not in STACKABLE_MARKS or not is_aggregate(encoding):
        return None

    stack_fields = get_stack_fields(encoding, scale_map)
    if not stack_fields:
        return None

    x_measure = channel_has_field(encoding, X) and is_measure(encoding[X])
    y_measure = channel_has_field(encoding, Y) and is_measure(encoding[Y])
    if x_measure and y_measure:
        # Both continuous: the aggregated axis is the measure
        x_measure = bool(encoding[X].get("aggregate"))
        y_measure = bool(encoding[Y].get("aggregate"))
    if x_measure == y_measure:
        return None
    field_channel, groupby_channel = (X, Y) if x_measure else (Y, X)

    aggregate = encoding[field_channel].get("aggregate")
    if not aggregate:
        return None

    offset = _resolve_offset(encoding[field_channel], config)
    if offset is None:
        return None

    scale_type = _scale_type(scale_map, field_channel)
    if scale_type is not None and scale_type not in _STACKABLE_SCALES:
        if diagnostics is not None:
            diagnostics.warn(
                WarningCode.STACK_NON_LINEAR_SCALE,
                messages.stack_non_linear_scale(scale_type),
                channel=field_channel,
                mark=mark,
                phase=NormalizePhase.STACK,
            )
        return None

    if SECONDARY_CHANNELS[field_channel] in encoding:
        if diagnostics is not None:
            diagnostics.warn(
                WarningCode.STACK_RANGED_MARK,
                messages.stack_ranged_mark(field_channel),
                channel=field_channel,
                mark=mark,
                phase=NormalizePhase.STACK,
            )
        return None

    if aggregate not in SUM_OPS:
        if diagnostics is not None:
            diagnostics.warn(
                WarningCode.STACK_NON_SUMMATIVE,
                messages.stack_non_summative_aggregate(aggregate),
                channel=field_channel,
                mark=mark,
                phase=NormalizePhase.STACK,
            )
        return None

    return StackProperties(
        groupby_channel=groupby_channel if channel_has_field(encoding, groupby_channel) else None,
        field_channel=field_channel,
        stack_fields=stack_fields,
        offset=offset,
    )


def _sort_field(field_def: dict[str, Any]) -> str | None:
    name = canonical_field_name(field_def)
    if name is None:
        return None
    return ("-" if field_def.get("sort") == "descending" else "") + name


def _field_expr(encoding: dict[str, Any], channel: str | None) -> str | None:
    if channel is None or channel_def_kind(encoding.get(channel)) is not ChannelDefKind.FIELD:
        return None
    return canonical_field_name(encoding[channel])


def stack_transform(stack: StackProperties, encoding: dict[str, Any]) -> dict[str, Any]:
    """Build the stack transform of a stacked unit spec.

    Args:
        stack: Stack properties from :func:`compute_stack_properties`
        encoding: Encoding the properties were computed from

    Returns:
        Stack transform stage
    """
    order = encoding.get(ORDER)
    kind = channel_def_kind(order)
    if kind is ChannelDefKind.FIELD:
        sortby = [s for s in [_sort_field(order)] if s]
    elif kind is ChannelDefKind.FIELD_LIST:
        sortby = [s for s in (_sort_field(d) for d in order if channel_def_kind(d) is ChannelDefKind.FIELD) if s]
    else:
        sortby = [f"-{name}" for name in stack.stack_fields]

    field = _field_expr(encoding, stack.field_channel)
    groupby = _field_expr(encoding, stack.groupby_channel)

    transform: dict[str, Any] = {
        "type": "stack",
        "groupby": [groupby] if groupby else [],
        "field": field,
        "sortby": sortby,
        "output": {"start": f"{field}_start", "end": f"{field}_end"},
    }
    if stack.offset != StackOffset.ZERO.value:
        transform["offset"] = stack.offset
    return transform


def impute_transform(stack: StackProperties, encoding: dict[str, Any]) -> dict[str, Any]:
    """Build the impute transform that fills gaps of a stacked area with zeros."""
    groupby = _field_expr(encoding, stack.groupby_channel)
    return {
        "type": "impute",
        "field": _field_expr(encoding, stack.field_channel),
        "groupby": list(stack.stack_fields),
        "orderby": [groupby] if groupby else [],
        "method": "value",
        "value": 0,
    }


def assemble_stack_transforms(
    mark: str,
    encoding: dict[str, Any],
    scale_map: dict[str, Any] | None,
    config: dict[str, Any],
    diagnostics: Diagnostics | None = None,
) -> list[dict[str, Any]]:
    """Return the stack-related transforms of a unit spec.

    Args:
        mark: Primitive mark type
        encoding: Resolved encoding
        scale_map: Channel to scale (or scale type) mapping
        config: Effective config
        diagnostics: Warning sink

    Returns:
        ``[]`` when not stacked, ``[stack]`` for bars, ``[stack, impute]`` for areas
    """
    stack = compute_stack_properties(mark, encoding, scale_map, config, diagnostics)
    if stack is None:
        return []
    transforms = [stack_transform(stack, encoding)]
    if mark == AREA:
        transforms.append(impute_transform(stack, encoding))
    return transforms
