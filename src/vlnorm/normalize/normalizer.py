"""Top-level spec normalization.

Rewrites a user spec into a tree of unit / layer / facet specs whose units only
use primitive marks:

- row/column channels of a unit become a facet wrapper;
- composite marks are expanded through the composite-mark registry;
- ``x2``/``y2`` without ``x``/``y`` are promoted to the primary channel;
- line and area units get their point/line overlays as extra layers.
"""

import copy
from typing import Any

from vlnorm.compile.stack import compute_stack_properties
from vlnorm.compositemark import CompositeMarkRegistry, default_registry
from vlnorm.core import messages
from vlnorm.core.channel import FACET_CHANNELS, SECONDARY_CHANNELS, supports_mark
from vlnorm.core.config import init_config
from vlnorm.core.encoding import drop_invalid_field_defs, omit_channels, pick_channels
from vlnorm.core.enums import NormalizePhase, WarningCode
from vlnorm.core.mark import AREA, LINE, POINT, is_mark_def, is_primitive_mark, mark_type
from vlnorm.core.models import NormalizeResult
from vlnorm.infra.diagnostics import Diagnostics
from vlnorm.infra.logging import get_logger
from vlnorm.infra.settings import NormalizerSettings

from .spec import is_facet_spec, is_layer_spec, is_unit_spec

logger = get_logger(__name__)

LAYER = "layer"
FACET = "facet"

# Unit properties that stay on the inner spec of a facet wrapper
_INNER_FACET_KEYS = ("mark", "encoding", "width", "height")

POINT_OVERLAY_MARK = {"type": "point", "filled": True, "role": "pointOverlay"}
LINE_OVERLAY_MARK = {"type": "line", "role": "lineOverlay"}

# Mark-def keys requesting overlays
_OVERLAY_KEYS = ("point", "line")


class Normalizer:
    """Normalizes spec trees against one effective config."""

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        *,
        strict: bool | None = None,
        registry: CompositeMarkRegistry | None = None,
        settings: NormalizerSettings | None = None,
    ) -> None:
        """Initialize normalizer.

        Args:
            config: Caller config merged over the built-in defaults
            strict: Treat every warning as a fatal error; the settings decide when None
            registry: Composite-mark registry; the default registry when None
            settings: Environment settings; read from the environment when None
        """
        self.settings = settings or NormalizerSettings()
        self.config = config
        self.strict = self.settings.strict if strict is None else strict
        self.registry = registry or default_registry
        self._file_config = self.settings.load_config()
        self._logger = logger.bind(strict=self.strict)

    def normalize(self, spec: dict[str, Any]) -> NormalizeResult:
        """Normalize a spec tree.

        Args:
            spec: Parsed spec; never modified

        Returns:
            NormalizeResult with the normalized tree and the collected warnings

        Raises:
            VlnormError: On specs without a valid normalization, or any warning in strict mode
        """
        diagnostics = Diagnostics(strict=self.strict)
        config = init_config(self._file_config, self.config, spec.get("config"))

        normalized = self._normalize(copy.deepcopy(spec), config, diagnostics, None)

        self._logger.debug("Normalized spec", warnings=len(diagnostics))
        return NormalizeResult(spec=normalized, warnings=diagnostics.warnings)

    def _normalize(
        self,
        spec: dict[str, Any],
        config: dict[str, Any],
        diagnostics: Diagnostics,
        container: str | None,
    ) -> dict[str, Any]:
        if is_facet_spec(spec):
            return {**spec, "spec": self._normalize(spec["spec"], config, diagnostics, FACET)}
        if is_layer_spec(spec):
            return {**spec, "layer": [self._normalize(child, config, diagnostics, LAYER) for child in spec["layer"]]}
        if is_unit_spec(spec):
            return self._normalize_unit(spec, config, diagnostics, container)
        return spec

    def _normalize_unit(
        self,
        spec: dict[str, Any],
        config: dict[str, Any],
        diagnostics: Diagnostics,
        container: str | None,
    ) -> dict[str, Any]:
        encoding = spec.get("encoding") or {}
        facet_channels = [channel for channel in FACET_CHANNELS if channel in encoding]

        if facet_channels:
            if container is None:
                return self._facet_wrapper(spec, config, diagnostics)
            for channel in facet_channels:
                diagnostics.warn(
                    WarningCode.FACET_CHANNEL_DROPPED,
                    messages.facet_channel_dropped(channel, container),
                    channel=channel,
                    mark=mark_type(spec.get("mark")),
                    phase=NormalizePhase.FACET_EXTRACTION,
                )
            spec = {**spec, "encoding": omit_channels(encoding, facet_channels)}

        mark = spec.get("mark")
        if not is_primitive_mark(mark):
            return self.registry.dispatch(spec, config, diagnostics)

        encoding = promote_secondary_channels(spec.get("encoding") or {})
        encoding = drop_invalid_field_defs(mark_type(mark), encoding, diagnostics)
        spec = {**spec, "encoding": encoding}

        if container == LAYER:
            return spec
        return normalize_overlay(spec, config)

    def _facet_wrapper(
        self,
        spec: dict[str, Any],
        config: dict[str, Any],
        diagnostics: Diagnostics,
    ) -> dict[str, Any]:
        encoding = spec["encoding"]
        outer = {key: value for key, value in spec.items() if key not in _INNER_FACET_KEYS}
        inner = {key: spec[key] for key in _INNER_FACET_KEYS if key in spec}
        inner["encoding"] = omit_channels(encoding, FACET_CHANNELS)

        return {
            **outer,
            "facet": pick_channels(encoding, FACET_CHANNELS),
            "spec": self._normalize(inner, config, diagnostics, FACET),
        }


def promote_secondary_channels(encoding: dict[str, Any]) -> dict[str, Any]:
    """Move ``x2``/``y2`` to ``x``/``y`` when the primary channel is missing.

    The secondary channel is removed after promotion. Channel order is kept,
    with the primary channel taking the secondary channel's position.
    """
    renames = {
        secondary: primary
        for primary, secondary in SECONDARY_CHANNELS.items()
        if secondary in encoding and primary not in encoding
    }
    if not renames:
        return encoding
    return {renames.get(channel, channel): channel_def for channel, channel_def in encoding.items()}


def _overlay_flags(mark: Any, config: dict[str, Any]) -> tuple[Any, Any]:  # noqa: ANN401
    """Return the (line, point) overlay requests of a line or area unit."""
    overlay = config.get("overlay") or {}
    mark_def = mark if is_mark_def(mark) else {}
    kind = mark_type(mark)

    if kind == LINE:
        point = mark_def["point"] if mark_def.get("point") is not None else overlay.get("line")
        return False, point

    area_overlay = overlay.get("area")
    line = mark_def["line"] if mark_def.get("line") is not None else area_overlay in ("line", "linepoint")
    point = mark_def["point"] if mark_def.get("point") is not None else area_overlay == "linepoint"
    return line, point


def _overlay_mark(base: dict[str, Any], options: Any) -> dict[str, Any]:  # noqa: ANN401
    mark = dict(base)
    if isinstance(options, dict):
        mark.update(options)
    mark["type"] = base["type"]
    mark["role"] = base["role"]
    return mark


def _supported(encoding: dict[str, Any], mark: str) -> dict[str, Any]:
    return {channel: channel_def for channel, channel_def in encoding.items() if supports_mark(channel, mark)}


def normalize_overlay(spec: dict[str, Any], config: dict[str, Any]) -> dict[str, Any]:
    """Expand a line or area unit with overlays into a layer spec.

    Args:
        spec: Primitive unit spec
        config: Effective config

    Returns:
        A layer spec ``[base, line?, point?]``, or the unit spec unchanged when no overlay applies
    """
    mark = spec["mark"]
    kind = mark_type(mark)
    if kind not in (LINE, AREA):
        return spec

    line, point = _overlay_flags(mark, config)
    if not line and not point:
        return spec

    if is_mark_def(mark):
        mark = {key: value for key, value in mark.items() if key not in _OVERLAY_KEYS}

    encoding = spec["encoding"]
    overlay_encoding = encoding
    if kind == AREA:
        stack = compute_stack_properties(AREA, encoding, None, config)
        if stack is not None:
            measure = stack.field_channel
            overlay_encoding = {**encoding, measure: {**encoding[measure], "stack": stack.offset}}

    outer = {key: value for key, value in spec.items() if key not in ("mark", "encoding")}
    layer: list[dict[str, Any]] = [{"mark": mark, "encoding": encoding}]
    if line:
        layer.append(
            {"mark": _overlay_mark(LINE_OVERLAY_MARK, line), "encoding": _supported(overlay_encoding, LINE)},
        )
    if point:
        layer.append(
            {"mark": _overlay_mark(POINT_OVERLAY_MARK, point), "encoding": _supported(overlay_encoding, POINT)},
        )

    logger.debug("Expanded overlay", mark=kind, line=bool(line), point=bool(point))
    return {**outer, "layer": layer}


def normalize(
    spec: dict[str, Any],
    config: dict[str, Any] | None = None,
    *,
    strict: bool | None = None,
) -> NormalizeResult:
    """Normalize a spec tree with a fresh :class:`Normalizer`.

    Args:
        spec: Parsed spec; never modified
        config: Caller config merged over the built-in defaults, below ``spec["config"]``
        strict: Treat every warning as a fatal error; ``VLNORM_STRICT`` decides when None

    Returns:
        NormalizeResult with the normalized tree and the collected warnings
    """
    return Normalizer(config, strict=strict).normalize(spec)
