"""Error band expansion into a filled band and optional border lines."""

from typing import Any

from vlnorm.core.config import ERRORBAND, mark_config
from vlnorm.core.mark import AREA, LINE, RECT, RULE
from vlnorm.infra.diagnostics import Diagnostics

from .common import PartLayerFactory, outer_spec
from .errorbar import error_params

ERRORBAND_PARTS: tuple[str, ...] = ("band", "borders")

_CURVE_PROPERTIES = ("interpolate", "tension")


def normalize_errorband(spec: dict[str, Any], config: dict[str, Any], diagnostics: Diagnostics) -> dict[str, Any]:
    """Expand an error band unit spec into a layer of primitive marks.

    A band over a discrete axis is drawn as an area with line borders; a
    band without a discrete axis is a rect with rule borders.

    Args:
        spec: Unit spec whose mark is ``errorband``
        config: Effective config
        diagnostics: Warning sink

    Returns:
        Layer spec with the error band transforms and part layers
    """
    params = error_params(spec, ERRORBAND, config, diagnostics)

    if params.axes.is_1d:
        band_mark: dict[str, Any] = {"type": RECT}
        borders_mark: dict[str, Any] = {"type": RULE}
    else:
        curve = {key: params.mark_def[key] for key in _CURVE_PROPERTIES if params.mark_def.get(key) is not None}
        band_mark = {"type": AREA, **curve}
        borders_mark = {"type": LINE, **curve}

    factory = PartLayerFactory(params.mark_def, mark_config(config, ERRORBAND), params.axes, params.shared_encoding)
    tooltip = factory.summary_tooltip(params.tooltip_summary) if params.tooltip_summary else {}
    layer = [
        *factory.build("band", band_mark, "lower", "upper", extra_encoding=tooltip),
        *factory.build("borders", borders_mark, "lower", extra_encoding=tooltip),
        *factory.build("borders", borders_mark, "upper", extra_encoding=tooltip),
    ]

    return {**outer_spec(params.spec), "transform": params.transform, "layer": layer}
