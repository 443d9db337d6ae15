"""Error bar expansion, plus the center/extent statistics shared with error bands."""

from dataclasses import dataclass
from typing import Any

from vlnorm.core import messages
from vlnorm.core.channel import SECONDARY_CHANNELS, X, X2, Y, Y2
from vlnorm.core.config import ERRORBAR, mark_config
from vlnorm.core.encoding import omit_channels
from vlnorm.core.enums import NormalizePhase, Orient, WarningCode
from vlnorm.core.errors import InvalidSpecError
from vlnorm.core.fielddef import is_continuous, is_field_def
from vlnorm.core.mark import BAR, LINE, POINT, RULE, TICK, to_mark_def
from vlnorm.core.transforms import extract_transforms_from_encoding
from vlnorm.infra.diagnostics import Diagnostics

from .common import (
    COMPOSITE_CHANNELS,
    AxisResolution,
    PartLayerFactory,
    TooltipSummary,
    filter_unsupported_channels,
    is_part_enabled,
    outer_spec,
    resolve_axes,
    resolve_orientation,
    split_tooltip,
)

ERRORBAR_PARTS: tuple[str, ...] = ("bar", "line", "ticks", "rule", "point")
ERROR_CHANNELS: tuple[str, ...] = (*COMPOSITE_CHANNELS, X2, Y2)

CENTERS: tuple[str, ...] = ("mean", "median")
EXTENTS: tuple[str, ...] = ("ci", "iqr", "stderr", "stdev")


@dataclass(frozen=True)
class ErrorParams:
    """Result of the shared error bar / error band preparation.

    Attributes:
        spec: Spec after channel filtering
        mark_def: Composite mark definition
        orient: Resolved orientation
        axes: Resolved continuous and discrete axes
        transform: Full transform pipeline, user transforms first
        shared_encoding: Encoding shared by every part
        is_ranged: Whether the bounds come precomputed from ``x``/``x2`` or ``y``/``y2``
        tooltip_summary: Statistics for the summary tooltip; empty when no tooltip is requested
    """

    spec: dict[str, Any]
    mark_def: dict[str, Any]
    orient: Orient
    axes: AxisResolution
    transform: list[dict[str, Any]]
    shared_encoding: dict[str, Any]
    is_ranged: bool
    tooltip_summary: TooltipSummary = ()


def resolve_center_extent(
    mark_def: dict[str, Any],
    composite_config: dict[str, Any],
    composite_mark: str,
    diagnostics: Diagnostics,
) -> tuple[str, str]:
    """Pick the center statistic and the extent of an error bar or band.

    Args:
        mark_def: Composite mark definition
        composite_config: Config section of the composite mark
        composite_mark: Composite mark type
        diagnostics: Warning sink

    Returns:
        Tuple of (center, extent)

    Raises:
        InvalidSpecError: Unknown center or extent
    """
    explicit_center = mark_def.get("center")
    explicit_extent = mark_def.get("extent")

    if explicit_center:
        center = explicit_center
    elif explicit_extent:
        center = "median" if explicit_extent == "iqr" else "mean"
    else:
        center = composite_config.get("center") or "mean"

    extent = explicit_extent or composite_config.get("extent") or ("stderr" if center == "mean" else "iqr")

    if center not in CENTERS:
        raise InvalidSpecError(
            f"Invalid center '{center}' for {composite_mark}",
            hint=f"Use one of: {', '.join(CENTERS)}",
            phase=NormalizePhase.COMPOSITE_EXPANSION,
        )
    if extent not in EXTENTS:
        raise InvalidSpecError(
            f"Invalid extent '{extent}' for {composite_mark}",
            hint=f"Use one of: {', '.join(EXTENTS)}",
            phase=NormalizePhase.COMPOSITE_EXPANSION,
        )

    if (center == "median") != (extent == "iqr"):
        diagnostics.warn(
            WarningCode.CENTER_EXTENT_MISMATCH,
            messages.center_extent_mismatch(center, extent, composite_mark),
            mark=composite_mark,
            phase=NormalizePhase.COMPOSITE_EXPANSION,
        )
    return center, extent


def _statistics(
    field: str,
    center: str,
    extent: str,
    *,
    needs_center: bool,
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    if extent in ("stderr", "stdev"):
        aggregate = [
            {"op": extent, "field": field, "as": f"extent_{field}"},
            {"op": center, "field": field, "as": f"center_{field}"},
        ]
        calculates = [
            {"calculate": f"datum.center_{field} + datum.extent_{field}", "as": f"upper_{field}"},
            {"calculate": f"datum.center_{field} - datum.extent_{field}", "as": f"lower_{field}"},
        ]
        return aggregate, calculates

    lower_op, upper_op = ("ci0", "ci1") if extent == "ci" else ("q1", "q3")
    aggregate = [
        {"op": lower_op, "field": field, "as": f"lower_{field}"},
        {"op": upper_op, "field": field, "as": f"upper_{field}"},
    ]
    if needs_center:
        aggregate.append({"op": center, "field": field, "as": f"center_{field}"})
    return aggregate, []


def _ranged_calculates(field: str, end_field: str, *, needs_center: bool) -> list[dict[str, Any]]:
    calculates = [
        {"calculate": f"datum.{field}", "as": f"lower_{field}"},
        {"calculate": f"datum.{end_field}", "as": f"upper_{field}"},
    ]
    if needs_center:
        calculates.append({"calculate": f"(datum.{field} + datum.{end_field}) / 2", "as": f"center_{field}"})
    return calculates


def _ranged_orient(encoding: dict[str, Any], composite_mark: str) -> Orient | None:
    """Orientation implied by precomputed bounds, or None when neither axis carries them."""
    x_ranged = is_field_def(encoding.get(X2)) and is_continuous(encoding.get(X))
    y_ranged = is_field_def(encoding.get(Y2)) and is_continuous(encoding.get(Y))

    if x_ranged and y_ranged:
        raise InvalidSpecError(
            f"Both x and y cannot be ranged for {composite_mark}",
            hint="Encode the precomputed bounds on one axis only",
            phase=NormalizePhase.ORIENTATION,
        )
    if x_ranged:
        return Orient.HORIZONTAL
    if y_ranged:
        return Orient.VERTICAL
    return None


def _tooltip_summary(center: str | None, extent: str | None, *, needs_center: bool) -> TooltipSummary:
    center_title = center.capitalize() if center else "Center"
    has_center = needs_center or extent in ("stderr", "stdev")
    summary: list[tuple[str, str]] = [("center", center_title)] if has_center else []

    if extent in ("stderr", "stdev"):
        summary += [("upper", f"{center_title} + {extent}"), ("lower", f"{center_title} - {extent}")]
    elif extent == "ci":
        summary += [("upper", "Upper CI"), ("lower", "Lower CI")]
    elif extent == "iqr":
        summary += [("upper", "Q3"), ("lower", "Q1")]
    else:
        summary += [("upper", "Upper"), ("lower", "Lower")]
    return tuple(summary)


def error_params(
    spec: dict[str, Any],
    composite_mark: str,
    config: dict[str, Any],
    diagnostics: Diagnostics,
    center_parts: tuple[str, ...] = (),
) -> ErrorParams:
    """Resolve axes and build the statistics pipeline of an error bar or band.

    Args:
        spec: Unit spec with the composite mark
        composite_mark: ``errorbar`` or ``errorband``
        config: Effective config
        diagnostics: Warning sink
        center_parts: Parts drawn at the center statistic

    Returns:
        ErrorParams for building the part layers

    Raises:
        InvalidSpecError: Both axes are ranged, or center/extent are unknown
    """
    spec = filter_unsupported_channels(spec, ERROR_CHANNELS, composite_mark, diagnostics)
    encoding = spec["encoding"]
    mark_def = to_mark_def(spec["mark"])
    composite_config = mark_config(config, composite_mark)

    ranged_orient = _ranged_orient(encoding, composite_mark)
    is_ranged = ranged_orient is not None
    orient = ranged_orient or resolve_orientation(spec, composite_mark)
    axes = resolve_axes(spec, orient, composite_mark, diagnostics)
    field = axes.continuous_field_def["field"]
    end_channel = SECONDARY_CHANNELS[axes.continuous_axis]

    needs_center = any(is_part_enabled(mark_def, part, composite_config) for part in center_parts)

    center: str | None = None
    extent: str | None = None
    if is_ranged:
        if mark_def.get("center") or mark_def.get("extent"):
            diagnostics.warn(
                WarningCode.RANGED_CENTER_EXTENT,
                messages.ranged_center_extent(mark_def.get("center"), mark_def.get("extent"), composite_mark),
                mark=composite_mark,
                phase=NormalizePhase.COMPOSITE_EXPANSION,
            )
        statistics: list[dict[str, Any]] = []
        calculates = _ranged_calculates(field, encoding[end_channel]["field"], needs_center=needs_center)
    else:
        center, extent = resolve_center_extent(mark_def, composite_config, composite_mark, diagnostics)
        if extent in ("ci", "iqr") and mark_def.get("center") and not needs_center:
            diagnostics.warn(
                WarningCode.CENTER_NOT_NEEDED,
                messages.center_not_needed(extent, composite_mark),
                mark=composite_mark,
                phase=NormalizePhase.COMPOSITE_EXPANSION,
            )
        statistics, calculates = _statistics(field, center, extent, needs_center=needs_center)

    shared, raw_tooltip = split_tooltip(omit_channels(encoding, [axes.continuous_axis, end_channel]))
    extracted = extract_transforms_from_encoding(shared)
    aggregate = [*extracted.aggregate, *statistics]

    tooltip_summary: TooltipSummary = ()
    if raw_tooltip or mark_def.get("tooltip") is True:
        tooltip_summary = _tooltip_summary(center, extent, needs_center=needs_center)

    transform = [
        *(spec.get("transform") or []),
        *extracted.bins,
        *extracted.time_units,
        *([{"aggregate": aggregate, "groupby": extracted.groupby}] if aggregate else []),
        *calculates,
    ]

    return ErrorParams(
        spec=spec,
        mark_def=mark_def,
        orient=orient,
        axes=axes,
        transform=transform,
        shared_encoding=extracted.encoding,
        is_ranged=is_ranged,
        tooltip_summary=tooltip_summary,
    )


def normalize_errorbar(spec: dict[str, Any], config: dict[str, Any], diagnostics: Diagnostics) -> dict[str, Any]:
    """Expand an error bar unit spec into a layer of primitive marks.

    Args:
        spec: Unit spec whose mark is ``errorbar``
        config: Effective config
        diagnostics: Warning sink

    Returns:
        Layer spec with the error bar transforms and part layers
    """
    params = error_params(spec, ERRORBAR, config, diagnostics, center_parts=("line", "point"))
    ticks_orient = Orient.HORIZONTAL if params.orient is Orient.VERTICAL else Orient.VERTICAL
    ticks_mark = {"type": TICK, "orient": ticks_orient.value}

    factory = PartLayerFactory(params.mark_def, mark_config(config, ERRORBAR), params.axes, params.shared_encoding)
    tooltip = factory.summary_tooltip(params.tooltip_summary) if params.tooltip_summary else {}
    layer = [
        *factory.build("bar", BAR, "lower", "upper", extra_encoding=tooltip),
        *factory.build("line", LINE, "center", extra_encoding=tooltip),
        *factory.build("ticks", ticks_mark, "lower", extra_encoding=tooltip),
        *factory.build("ticks", ticks_mark, "upper", extra_encoding=tooltip),
        *factory.build("rule", RULE, "lower", "upper", extra_encoding=tooltip),
        *factory.build("point", POINT, "center", extra_encoding=tooltip),
    ]

    return {**outer_spec(params.spec), "transform": params.transform, "layer": layer}
