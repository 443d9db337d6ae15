"""Shared plumbing for composite marks: orientation, axis resolution and part layers."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from vlnorm.core import messages
from vlnorm.core.channel import COLOR, DETAIL, OPACITY, SIZE, TOOLTIP, X, Y, supports_mark
from vlnorm.core.encoding import drop_empty_channel_defs, field_defs, filter_channels, omit_channels
from vlnorm.core.enums import NormalizePhase, Orient, WarningCode
from vlnorm.core.errors import (
    AggregateConflictError,
    CustomAggregateError,
    InvalidSpecError,
    MissingContinuousAxisError,
    OrientConflictError,
)
from vlnorm.core.fielddef import get_title, is_continuous, is_field_def
from vlnorm.core.mark import mark_type, to_mark_def
from vlnorm.infra.diagnostics import Diagnostics

# Channels every composite mark accepts; marks may add their own
COMPOSITE_CHANNELS: tuple[str, ...] = (X, Y, COLOR, DETAIL, OPACITY, SIZE, TOOLTIP)

# (field prefix, title prefix) pairs of the statistics listed in a summary tooltip
TooltipSummary = Sequence[tuple[str, str]]

# Keys of a unit spec that belong to the mark rather than to the enclosing layer
_UNIT_ONLY_KEYS = ("mark", "encoding")


@dataclass(frozen=True)
class AxisResolution:
    """Continuous and discrete axes of a composite mark.

    Attributes:
        continuous_axis: ``x`` or ``y``
        continuous_field_def: Continuous field definition with the mark's own aggregate removed
        discrete_axis: The other positional channel
        discrete_field_def: Field definition on the discrete axis, or None when absent
        is_1d: True when the discrete axis is not encoded at all
    """

    continuous_axis: str
    continuous_field_def: dict[str, Any]
    discrete_axis: str
    discrete_field_def: dict[str, Any] | None
    is_1d: bool


def _explicit_orient(mark: Any) -> Orient | None:  # noqa: ANN401
    orient = mark.get("orient") if isinstance(mark, dict) else None
    if orient is None:
        return None
    try:
        return Orient(orient)
    except ValueError as e:
        raise InvalidSpecError(
            f"Invalid orient '{orient}' for {mark_type(mark)}",
            hint="Use 'vertical' or 'horizontal'",
            phase=NormalizePhase.ORIENTATION,
        ) from e


def _require(required: Orient, explicit: Orient | None, composite_mark: str) -> Orient:
    if explicit is not None and explicit is not required:
        raise OrientConflictError(composite_mark, explicit.value, required.value)
    return required


def resolve_orientation(spec: dict[str, Any], composite_mark: str) -> Orient:
    """Determine which axis of a composite mark is continuous.

    Args:
        spec: Unit spec with a composite mark
        composite_mark: Composite mark type, compared against axis aggregates

    Returns:
        VERTICAL when y is the continuous axis, HORIZONTAL when x is

    Raises:
        MissingContinuousAxisError: Neither x nor y is continuous
        OrientConflictError: An explicit orient contradicts the encoding
        AggregateConflictError: Both axes carry the composite mark as aggregate
    """
    encoding = spec.get("encoding") or {}
    x, y = encoding.get(X), encoding.get(Y)
    explicit = _explicit_orient(spec.get("mark"))

    x_continuous = is_continuous(x)
    y_continuous = is_continuous(y)

    if not x_continuous and not y_continuous:
        raise MissingContinuousAxisError(composite_mark)

    if x_continuous != y_continuous:
        return _require(Orient.VERTICAL if y_continuous else Orient.HORIZONTAL, explicit, composite_mark)

    x_aggregate = x.get("aggregate")
    y_aggregate = y.get("aggregate")

    if not x_aggregate and y_aggregate == composite_mark:
        return _require(Orient.VERTICAL, explicit, composite_mark)
    if not y_aggregate and x_aggregate == composite_mark:
        return _require(Orient.HORIZONTAL, explicit, composite_mark)
    if x_aggregate == composite_mark and y_aggregate == composite_mark:
        raise AggregateConflictError(composite_mark)

    return explicit or Orient.VERTICAL


def resolve_axes(
    spec: dict[str, Any],
    orient: Orient,
    composite_mark: str,
    diagnostics: Diagnostics,
    *,
    strict_aggregate: bool = False,
) -> AxisResolution:
    """Split the positional channels into continuous and discrete axes.

    The continuous definition loses its ``aggregate``. An aggregate other than
    the composite mark itself is a warning, or an error with ``strict_aggregate``.

    Args:
        spec: Unit spec with a composite mark
        orient: Orientation from :func:`resolve_orientation`
        composite_mark: Composite mark type
        diagnostics: Warning sink
        strict_aggregate: Raise on a foreign aggregate instead of warning

    Returns:
        AxisResolution for the spec

    Raises:
        CustomAggregateError: Foreign aggregate with ``strict_aggregate``
        MissingContinuousAxisError: The continuous definition has no field
    """
    encoding = spec.get("encoding") or {}
    continuous_axis, discrete_axis = (Y, X) if orient is Orient.VERTICAL else (X, Y)

    continuous_def = dict(encoding[continuous_axis])
    aggregate = continuous_def.pop("aggregate", None)
    if aggregate and aggregate != composite_mark:
        if strict_aggregate:
            raise CustomAggregateError(composite_mark, aggregate, continuous_axis)
        diagnostics.warn(
            WarningCode.CUSTOM_AGGREGATE,
            messages.custom_aggregate(aggregate, composite_mark),
            channel=continuous_axis,
            mark=composite_mark,
            phase=NormalizePhase.ORIENTATION,
        )
    if continuous_def.get("field") is None:
        raise MissingContinuousAxisError(composite_mark)

    discrete_def = encoding.get(discrete_axis)
    return AxisResolution(
        continuous_axis=continuous_axis,
        continuous_field_def=continuous_def,
        discrete_axis=discrete_axis,
        discrete_field_def=discrete_def if is_field_def(discrete_def) else None,
        is_1d=discrete_axis not in encoding,
    )


def filter_unsupported_channels(
    spec: dict[str, Any],
    supported: tuple[str, ...],
    composite_mark: str,
    diagnostics: Diagnostics,
) -> dict[str, Any]:
    """Return a copy of the spec whose encoding only holds supported channels with data."""
    encoding = filter_channels(spec.get("encoding") or {}, supported, composite_mark, diagnostics)
    return {**spec, "encoding": drop_empty_channel_defs(encoding, diagnostics)}


def split_tooltip(encoding: dict[str, Any]) -> tuple[dict[str, Any], bool]:
    """Keep only the tooltip definitions that survive the composite aggregate.

    Aggregated tooltip fields stay in the encoding and join the aggregate like
    any other channel. Raw fields and values are removed, as no single row is
    left to show them for.

    Args:
        encoding: Encoding of a composite mark

    Returns:
        Tuple of (encoding, whether raw tooltip definitions were removed)
    """
    tooltip = encoding.get(TOOLTIP)
    if tooltip is None:
        return encoding, False

    items = tooltip if isinstance(tooltip, list) else [tooltip]
    aggregated = [item for item in items if is_field_def(item) and item.get("aggregate")]

    result = omit_channels(encoding, [TOOLTIP])
    if aggregated:
        result[TOOLTIP] = aggregated if isinstance(tooltip, list) else aggregated[0]
    return result, len(aggregated) < len(items)


def outer_spec(spec: dict[str, Any]) -> dict[str, Any]:
    """Properties of a unit spec that move to the enclosing layer."""
    return {key: value for key, value in spec.items() if key not in _UNIT_ONLY_KEYS}


def is_part_enabled(mark_def: dict[str, Any], part: str, composite_config: dict[str, Any]) -> bool:
    """Whether a part layer is emitted.

    A part flag on the mark definition wins when set; otherwise the config decides.
    ``True`` and non-empty dicts enable a part.
    """
    flag = mark_def.get(part)
    if flag is None:
        flag = composite_config.get(part)
    return bool(flag)


class PartLayerFactory:
    """Builds the primitive unit specs of one composite mark."""

    def __init__(
        self,
        mark_def: dict[str, Any],
        composite_config: dict[str, Any],
        axes: AxisResolution,
        shared_encoding: dict[str, Any],
    ) -> None:
        """Initialize the factory.

        Args:
            mark_def: Composite mark definition (type, parts, color, opacity, ...)
            composite_config: Config section of the composite mark
            axes: Resolved axes of the spec
            shared_encoding: Encoding shared by every part by default
        """
        self.mark_def = to_mark_def(mark_def)
        self.composite_config = composite_config
        self.axes = axes
        self.shared_encoding = shared_encoding

    def _continuous_channel_def(self, prefix: str) -> dict[str, Any]:
        field_def = self.axes.continuous_field_def
        channel_def: dict[str, Any] = {
            "field": f"{prefix}_{field_def['field']}",
            "type": field_def.get("type"),
            "title": get_title(field_def) or field_def["field"],
        }
        if field_def.get("scale") is not None:
            channel_def["scale"] = field_def["scale"]
        axis = field_def.get("axis")
        if isinstance(axis, dict):
            axis_without_title = {k: v for k, v in axis.items() if k != "title"}
            if axis_without_title:
                channel_def["axis"] = axis_without_title
        elif axis is not None:
            channel_def["axis"] = axis
        return channel_def

    def _part_mark(self, part: str, mark: str | dict[str, Any]) -> dict[str, Any]:
        base = to_mark_def(mark)
        part_config = self.composite_config.get(part)
        part_def = self.mark_def.get(part)

        resolved: dict[str, Any] = dict(base)
        if isinstance(part_config, dict):
            resolved.update(part_config)
        for key in ("color", "opacity", "clip"):
            if self.mark_def.get(key) is not None:
                resolved[key] = self.mark_def[key]
        if isinstance(part_def, dict):
            resolved.update(part_def)

        resolved["type"] = base["type"]
        resolved["role"] = part
        return resolved

    def summary_tooltip(self, summary: TooltipSummary) -> dict[str, Any]:
        """Build the tooltip encoding listing synthesized statistics.

        An aggregated user tooltip left in the shared encoding wins over the
        summary. Otherwise the tooltip lists each statistic, titled like
        ``"Q1 of people"``, followed by the other fields of the shared encoding.

        Args:
            summary: (field prefix, title prefix) pairs in display order

        Returns:
            Encoding holding only the ``tooltip`` channel
        """
        if TOOLTIP in self.shared_encoding:
            return {TOOLTIP: self.shared_encoding[TOOLTIP]}

        field_def = self.axes.continuous_field_def
        title = get_title(field_def) or field_def["field"]
        tooltip = [
            {
                "field": f"{prefix}_{field_def['field']}",
                "type": field_def.get("type"),
                "title": f"{title_prefix} of {title}",
            }
            for prefix, title_prefix in summary
        ]
        for other in field_defs(self.shared_encoding):
            entry = {key: other[key] for key in ("field", "type", "title") if key in other}
            if entry not in tooltip:
                tooltip.append(entry)
        return {TOOLTIP: tooltip}

    def build(
        self,
        part: str,
        mark: str | dict[str, Any],
        position_prefix: str,
        end_position_prefix: str | None = None,
        encoding: dict[str, Any] | None = None,
        extra_encoding: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Build the unit spec of one part layer.

        Args:
            part: Part name, checked against the mark definition and config
            mark: Primitive mark type or built-in mark definition of the part
            position_prefix: Prefix of the synthesized field on the continuous axis
            end_position_prefix: Prefix of the field on the secondary channel, if ranged
            encoding: Encoding to use instead of the shared encoding
            extra_encoding: Channels overriding the shared encoding

        Returns:
            A one-element list with the unit spec, or an empty list when the part is disabled
        """
        if not is_part_enabled(self.mark_def, part, self.composite_config):
            return []

        part_mark = self._part_mark(part, mark)
        axis = self.axes.continuous_axis

        part_encoding: dict[str, Any] = {axis: self._continuous_channel_def(position_prefix)}
        if end_position_prefix is not None:
            part_encoding[f"{axis}2"] = {
                "field": f"{end_position_prefix}_{self.axes.continuous_field_def['field']}",
                "type": self.axes.continuous_field_def.get("type"),
            }
        part_encoding.update(self.shared_encoding if encoding is None else encoding)
        part_encoding.update(extra_encoding or {})

        primitive = part_mark["type"]
        part_encoding = {
            channel: channel_def
            for channel, channel_def in part_encoding.items()
            if supports_mark(channel, primitive)
        }
        return [{"mark": part_mark, "encoding": part_encoding}]
