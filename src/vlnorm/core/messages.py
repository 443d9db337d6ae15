"""Message templates for warnings emitted during normalization."""

from typing import Any


def incompatible_channel(channel: str, mark: str, when: str | None = None) -> str:
    """Channel dropped because the mark does not support it."""
    suffix = f" {when}" if when else ""
    return f'{channel} dropped as it is incompatible with "{mark}"{suffix}.'


def empty_field_def(channel_def: Any, channel: str) -> str:  # noqa: ANN401
    """Channel definition without field or value."""
    return f"Dropping {channel_def!r} from channel {channel} since it does not contain data field or value."


def facet_channel_dropped(channel: str, container: str) -> str:
    """Row/column channel found where faceting is not allowed."""
    return (
        f"{channel} dropped as faceting is not allowed inside a {container}; "
        f"wrap the {container} in a facet instead."
    )


def custom_aggregate(aggregate: str, mark: str) -> str:
    """Continuous axis of an error bar/band carries a foreign aggregate."""
    return (
        f"Continuous axis should not have customized aggregation function {aggregate}; "
        f"{mark} already aggregates the data."
    )


def center_extent_mismatch(center: str, extent: str, mark: str) -> str:
    """Center and extent of an error bar/band do not belong together."""
    return f"{center} is not usually used with {extent} for {mark}."


def center_not_needed(extent: str, mark: str) -> str:
    """Center is ignored because the extent computes both bounds directly."""
    return f"Center is not needed to be specified in {mark} when extent is {extent}."


def ranged_center_extent(center: str | None, extent: str | None, mark: str) -> str:
    """Center/extent given although the bounds are precomputed."""
    parts = []
    if center:
        parts.append(f"center ({center})")
    if extent:
        parts.append(f"extent ({extent})")
    return f"{' and '.join(parts).capitalize()} not needed when data are aggregated for {mark}."


def stack_non_linear_scale(scale_type: str) -> str:
    """Stacking requested on a non-linear measure scale."""
    return f"Cannot stack non-linear scale ({scale_type})."


def stack_ranged_mark(channel: str) -> str:
    """Stacking requested on a ranged measure channel."""
    return f"Cannot stack {channel} if there is already {channel}2."


def stack_non_summative_aggregate(aggregate: str) -> str:
    """Stacking requested on a measure whose aggregate does not add up."""
    return f'Cannot stack non-summative aggregate "{aggregate}".'
