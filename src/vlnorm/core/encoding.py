"""Utilities for encoding mappings.

All functions return new mappings; an input encoding is never modified in place.
"""

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

from . import messages
from .channel import ARRAY_CHANNELS, CHANNELS, SECONDARY_CHANNELS, is_channel, supports_mark
from .enums import ChannelDefKind, NormalizePhase, WarningCode
from .fielddef import channel_def_kind

if TYPE_CHECKING:
    from vlnorm.infra.diagnostics import Diagnostics


def iter_channel_defs(encoding: dict[str, Any]) -> Iterator[tuple[str, dict[str, Any]]]:
    """Yield ``(channel, channel_def)`` pairs in declaration order.

    List-valued channels yield one pair per element.
    """
    for channel, channel_def in encoding.items():
        if isinstance(channel_def, list):
            for item in channel_def:
                yield channel, item
        else:
            yield channel, channel_def


def channel_has_field(encoding: dict[str, Any], channel: str) -> bool:
    """Whether a channel is bound to at least one field reference."""
    channel_def = encoding.get(channel)
    kind = channel_def_kind(channel_def)
    if kind is ChannelDefKind.FIELD:
        return True
    if kind is ChannelDefKind.FIELD_LIST:
        return any(channel_def_kind(item) is ChannelDefKind.FIELD for item in channel_def)
    return False


def is_aggregate(encoding: dict[str, Any]) -> bool:
    """Whether any channel carries an aggregated field."""
    for channel in CHANNELS:
        if not channel_has_field(encoding, channel):
            continue
        channel_def = encoding[channel]
        items = channel_def if isinstance(channel_def, list) else [channel_def]
        if any(isinstance(item, dict) and item.get("aggregate") for item in items):
            return True
    return False


def is_ranged(encoding: dict[str, Any]) -> bool:
    """Whether x and x2 (or y and y2) are both present."""
    return any(primary in encoding and secondary in encoding for primary, secondary in SECONDARY_CHANNELS.items())


def field_defs(encoding: dict[str, Any]) -> list[dict[str, Any]]:
    """Return every field definition of an encoding in channel order."""
    result = []
    for channel in CHANNELS:
        if not channel_has_field(encoding, channel):
            continue
        channel_def = encoding[channel]
        for item in channel_def if isinstance(channel_def, list) else [channel_def]:
            if channel_def_kind(item) is ChannelDefKind.FIELD:
                result.append(item)
    return result


def omit_channels(encoding: dict[str, Any], channels: Iterable[str]) -> dict[str, Any]:
    """Return a copy of the encoding without the given channels."""
    excluded = set(channels)
    return {channel: channel_def for channel, channel_def in encoding.items() if channel not in excluded}


def pick_channels(encoding: dict[str, Any], channels: Iterable[str]) -> dict[str, Any]:
    """Return a copy of the encoding restricted to the given channels."""
    allowed = set(channels)
    return {channel: channel_def for channel, channel_def in encoding.items() if channel in allowed}


def filter_channels(
    encoding: dict[str, Any],
    allowed: Iterable[str],
    mark: str,
    diagnostics: "Diagnostics",
) -> dict[str, Any]:
    """Keep only allowed channels, warning once for each dropped channel.

    Args:
        encoding: Encoding mapping
        allowed: Channels the mark supports
        mark: Mark type used in the warning
        diagnostics: Warning sink

    Returns:
        New encoding with unsupported channels removed
    """
    allowed_set = set(allowed)
    filtered = {}
    for channel, channel_def in encoding.items():
        if channel in allowed_set:
            filtered[channel] = channel_def
        else:
            diagnostics.warn(
                WarningCode.INCOMPATIBLE_CHANNEL,
                messages.incompatible_channel(channel, mark),
                channel=channel,
                mark=mark,
                phase=NormalizePhase.CHANNEL_FILTERING,
            )
    return filtered


def _warn_empty(diagnostics: "Diagnostics", channel_def: Any, channel: str) -> None:  # noqa: ANN401
    diagnostics.warn(
        WarningCode.EMPTY_FIELD_DEF,
        messages.empty_field_def(channel_def, channel),
        channel=channel,
        phase=NormalizePhase.CHANNEL_FILTERING,
    )


def _with_data(channel: str, channel_def: Any, diagnostics: "Diagnostics") -> Any:  # noqa: ANN401
    kind = channel_def_kind(channel_def)

    if kind is ChannelDefKind.FIELD_LIST and channel in ARRAY_CHANNELS:
        kept = []
        for item in channel_def:
            if channel_def_kind(item) in (ChannelDefKind.FIELD, ChannelDefKind.VALUE):
                kept.append(item)
            else:
                _warn_empty(diagnostics, item, channel)
        return kept or None
    if kind in (ChannelDefKind.FIELD, ChannelDefKind.VALUE):
        return channel_def

    _warn_empty(diagnostics, channel_def, channel)
    return None


def drop_empty_channel_defs(encoding: dict[str, Any], diagnostics: "Diagnostics") -> dict[str, Any]:
    """Drop channel definitions without a field or value, warning for each.

    List-valued channels keep their valid elements and are dropped only when none remain.
    """
    result: dict[str, Any] = {}
    for channel, channel_def in encoding.items():
        kept = _with_data(channel, channel_def, diagnostics)
        if kept is not None:
            result[channel] = kept
    return result


def drop_invalid_field_defs(mark: str, encoding: dict[str, Any], diagnostics: "Diagnostics") -> dict[str, Any]:
    """Drop channels the mark does not support and channel definitions without data.

    Args:
        mark: Primitive mark type
        encoding: Encoding mapping
        diagnostics: Warning sink

    Returns:
        New encoding with only valid channel definitions
    """
    result: dict[str, Any] = {}

    for channel, channel_def in encoding.items():
        if not is_channel(channel) or not supports_mark(channel, mark):
            diagnostics.warn(
                WarningCode.INCOMPATIBLE_CHANNEL,
                messages.incompatible_channel(channel, mark),
                channel=channel,
                mark=mark,
                phase=NormalizePhase.CHANNEL_FILTERING,
            )
            continue

        kept = _with_data(channel, channel_def, diagnostics)
        if kept is not None:
            result[channel] = kept

    return result
