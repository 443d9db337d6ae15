"""Box plot expansion into whisker rules, a box bar and a median tick."""

from typing import Any

from vlnorm.core.channel import COLOR, SIZE
from vlnorm.core.config import BOXPLOT, mark_config
from vlnorm.core.encoding import omit_channels
from vlnorm.core.enums import NormalizePhase, Orient
from vlnorm.core.errors import InvalidSpecError
from vlnorm.core.mark import BAR, RULE, TICK, to_mark_def
from vlnorm.core.transforms import extract_transforms_from_encoding
from vlnorm.infra.diagnostics import Diagnostics

from .common import (
    COMPOSITE_CHANNELS,
    PartLayerFactory,
    TooltipSummary,
    filter_unsupported_channels,
    outer_spec,
    resolve_axes,
    resolve_orientation,
    split_tooltip,
)

BOXPLOT_PARTS: tuple[str, ...] = ("boxWhisker", "box", "boxMid")

MIN_MAX = "min-max"

WHISKER_SUMMARY: TooltipSummary = (("upperWhisker", "Upper Whisker"), ("lowerWhisker", "Lower Whisker"))


def five_number_summary(extent: str | float) -> TooltipSummary:
    """Tooltip statistics of the box and its median tick, largest first."""
    is_min_max = extent == MIN_MAX
    return (
        ("upperWhisker" if is_min_max else "max", "Max"),
        ("upperBox", "Q3"),
        ("midBox", "Median"),
        ("lowerBox", "Q1"),
        ("lowerWhisker" if is_min_max else "min", "Min"),
    )


def _resolve_extent(mark_def: dict[str, Any], box_config: dict[str, Any]) -> str | float:
    extent = mark_def.get("extent", box_config.get("extent", MIN_MAX))
    if extent == MIN_MAX:
        return MIN_MAX
    if isinstance(extent, bool) or not isinstance(extent, int | float):
        raise InvalidSpecError(
            f"Invalid extent {extent!r} for {BOXPLOT}",
            hint="Use 'min-max' or a number scaling the interquartile range",
            phase=NormalizePhase.COMPOSITE_EXPANSION,
        )
    return extent


def box_params(field: str, extent: str | float) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Aggregate entries and follow-up calculates computing the box plot statistics.

    Args:
        field: Continuous field name
        extent: ``"min-max"`` or the IQR multiplier for the whiskers

    Returns:
        Tuple of (aggregate entries, calculate stages)
    """
    is_min_max = extent == MIN_MAX
    aggregate = [
        {"op": "q1", "field": field, "as": f"lowerBox_{field}"},
        {"op": "q3", "field": field, "as": f"upperBox_{field}"},
        {"op": "median", "field": field, "as": f"midBox_{field}"},
        {"op": "min", "field": field, "as": f"lowerWhisker_{field}" if is_min_max else f"min_{field}"},
        {"op": "max", "field": field, "as": f"upperWhisker_{field}" if is_min_max else f"max_{field}"},
    ]
    if is_min_max:
        return aggregate, []

    calculates = [
        {
            "calculate": f"datum.upperBox_{field} - datum.lowerBox_{field}",
            "as": f"iqr_{field}",
        },
        {
            "calculate": f"min(datum.upperBox_{field} + datum.iqr_{field} * {extent}, datum.max_{field})",
            "as": f"upperWhisker_{field}",
        },
        {
            "calculate": f"max(datum.lowerBox_{field} - datum.iqr_{field} * {extent}, datum.min_{field})",
            "as": f"lowerWhisker_{field}",
        },
    ]
    return aggregate, calculates


def normalize_boxplot(spec: dict[str, Any], config: dict[str, Any], diagnostics: Diagnostics) -> dict[str, Any]:
    """Expand a box plot unit spec into a layer of primitive marks.

    Args:
        spec: Unit spec whose mark is ``box-plot``
        config: Effective config
        diagnostics: Warning sink

    Returns:
        Layer spec with the box plot transforms and part layers
    """
    spec = filter_unsupported_channels(spec, COMPOSITE_CHANNELS, BOXPLOT, diagnostics)
    mark_def = to_mark_def(spec["mark"])
    box_config = mark_config(config, BOXPLOT)
    extent = _resolve_extent(mark_def, box_config)

    orient = resolve_orientation(spec, BOXPLOT)
    axes = resolve_axes(spec, orient, BOXPLOT, diagnostics, strict_aggregate=True)
    field = axes.continuous_field_def["field"]

    encoding, raw_tooltip = split_tooltip(omit_channels(spec["encoding"], [axes.continuous_axis]))
    extracted = extract_transforms_from_encoding(encoding)
    box_aggregate, calculates = box_params(field, extent)

    transform = [
        *(spec.get("transform") or []),
        *extracted.bins,
        *extracted.time_units,
        {"aggregate": [*extracted.aggregate, *box_aggregate], "groupby": extracted.groupby},
        *calculates,
    ]

    shared = extracted.encoding
    size = shared.get(SIZE) or {"value": mark_def.get("size", box_config.get("size"))}
    whisker_encoding = omit_channels(shared, [COLOR, SIZE])
    box_encoding = {**shared, SIZE: size}
    mid_encoding = {**omit_channels(shared, [COLOR]), SIZE: size, COLOR: {"value": "white"}}

    tick_orient = Orient.HORIZONTAL if orient is Orient.VERTICAL else Orient.VERTICAL
    factory = PartLayerFactory(mark_def, box_config, axes, shared)

    whisker_tooltip: dict[str, Any] = {}
    box_tooltip: dict[str, Any] = {}
    if raw_tooltip or mark_def.get("tooltip") is True:
        whisker_tooltip = factory.summary_tooltip(WHISKER_SUMMARY)
        box_tooltip = factory.summary_tooltip(five_number_summary(extent))

    layer = [
        *factory.build(
            "boxWhisker", RULE, "lowerWhisker", "lowerBox", encoding=whisker_encoding, extra_encoding=whisker_tooltip
        ),
        *factory.build(
            "boxWhisker", RULE, "upperBox", "upperWhisker", encoding=whisker_encoding, extra_encoding=whisker_tooltip
        ),
        *factory.build("box", BAR, "lowerBox", "upperBox", encoding=box_encoding, extra_encoding=box_tooltip),
        *factory.build(
            "boxMid",
            {"type": TICK, "orient": tick_orient.value},
            "midBox",
            encoding=mid_encoding,
            extra_encoding=box_tooltip,
        ),
    ]

    return {**outer_spec(spec), "transform": transform, "layer": layer}
