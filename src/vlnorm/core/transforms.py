"""Extraction of implicit bin / timeUnit / aggregate operations into explicit transform stages."""

from dataclasses import dataclass, field
from typing import Any

from .enums import ChannelDefKind
from .fielddef import BIN_SUFFIX_END, canonical_field_name, channel_def_kind, is_binned, strip_modifiers

__all__ = ["ExtractedTransforms", "extract_transforms_from_encoding"]


@dataclass(frozen=True)
class ExtractedTransforms:
    """Explicit pipeline pieces pulled out of an encoding.

    Attributes:
        bins: Bin stages, one per binned field definition
        time_units: TimeUnit stages, one per field definition with a timeUnit
        aggregate: Aggregate entries ``{"op", "field"?, "as"}``
        groupby: Unique groupby keys in first-seen order
        encoding: Rewritten encoding pointing at the post-transform fields
    """

    bins: list[dict[str, Any]] = field(default_factory=list)
    time_units: list[dict[str, Any]] = field(default_factory=list)
    aggregate: list[dict[str, Any]] = field(default_factory=list)
    groupby: list[str] = field(default_factory=list)
    encoding: dict[str, Any] = field(default_factory=dict)


class _Extractor:
    def __init__(self) -> None:
        self.bins: list[dict[str, Any]] = []
        self.time_units: list[dict[str, Any]] = []
        self.aggregate: list[dict[str, Any]] = []
        self.groupby: list[str] = []

    def _group(self, name: str) -> None:
        if name not in self.groupby:
            self.groupby.append(name)

    def rewrite(self, field_def: dict[str, Any]) -> dict[str, Any]:
        aggregate = field_def.get("aggregate")
        name = canonical_field_name(field_def)
        if name is None:
            return field_def

        if aggregate:
            entry = {"op": aggregate}
            if field_def.get("field") is not None:
                entry["field"] = field_def["field"]
            entry["as"] = name
            if entry not in self.aggregate:
                self.aggregate.append(entry)
            return strip_modifiers(field_def, name)

        if field_def.get("timeUnit"):
            stage = {"timeUnit": field_def["timeUnit"], "field": field_def["field"], "as": name}
            if stage not in self.time_units:
                self.time_units.append(stage)
            self._group(name)
            return strip_modifiers(field_def, name)

        if is_binned(field_def):
            end = canonical_field_name(field_def, BIN_SUFFIX_END)
            stage = {"bin": field_def["bin"], "field": field_def["field"], "as": [name, end]}
            if stage not in self.bins:
                self.bins.append(stage)
            self._group(name)
            self._group(str(end))
            return strip_modifiers(field_def, name)

        self._group(name)
        return field_def


def extract_transforms_from_encoding(encoding: dict[str, Any]) -> ExtractedTransforms:
    """Split implicit bin, timeUnit and aggregate modifiers into explicit transform stages.

    Args:
        encoding: Encoding mapping, usually without the continuous axis

    Returns:
        ExtractedTransforms with the stages, groupby keys and rewritten encoding
    """
    extractor = _Extractor()
    rewritten: dict[str, Any] = {}

    for channel, channel_def in encoding.items():
        kind = channel_def_kind(channel_def)
        if kind is ChannelDefKind.FIELD:
            rewritten[channel] = extractor.rewrite(channel_def)
        elif kind is ChannelDefKind.FIELD_LIST:
            rewritten[channel] = [
                extractor.rewrite(item) if channel_def_kind(item) is ChannelDefKind.FIELD else item
                for item in channel_def
            ]
        else:
            rewritten[channel] = channel_def

    return ExtractedTransforms(
        bins=extractor.bins,
        time_units=extractor.time_units,
        aggregate=extractor.aggregate,
        groupby=extractor.groupby,
        encoding=rewritten,
    )

