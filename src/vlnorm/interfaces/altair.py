"""Hand-off of normalized specs to Altair chart objects."""

from typing import Any

import altair as alt

from vlnorm.core.errors import InvalidSpecError
from vlnorm.core.mark import is_primitive_mark, mark_type
from vlnorm.core.models import NormalizeResult
from vlnorm.infra.logging import get_logger
from vlnorm.normalize.spec import is_facet_spec, is_layer_spec, is_unit_spec

logger = get_logger(__name__)


def _check_primitive(spec: dict[str, Any]) -> None:
    if is_facet_spec(spec):
        _check_primitive(spec["spec"])
    elif is_layer_spec(spec):
        for child in spec["layer"]:
            _check_primitive(child)
    elif is_unit_spec(spec) and not is_primitive_mark(spec["mark"]):
        msg = f"Mark '{mark_type(spec['mark'])}' must be normalized before building a chart"
        raise InvalidSpecError(msg, hint="Pass the spec through vlnorm.normalize first")


def to_chart(normalized: dict[str, Any] | NormalizeResult) -> alt.Chart | alt.LayerChart | alt.FacetChart:
    """Build the Altair top-level chart matching a normalized spec.

    The spec is not validated against the Vega-Lite schema.

    Args:
        normalized: Normalized spec, or the result of ``normalize``

    Returns:
        Chart for unit specs, LayerChart for layer specs, FacetChart for facet specs

    Raises:
        InvalidSpecError: If the tree still holds composite marks or is not a unit, layer or facet spec
    """
    spec = normalized.spec if isinstance(normalized, NormalizeResult) else normalized
    _check_primitive(spec)

    if is_facet_spec(spec):
        chart = alt.FacetChart.from_dict(spec, validate=False)
    elif is_layer_spec(spec):
        chart = alt.LayerChart.from_dict(spec, validate=False)
    elif is_unit_spec(spec):
        chart = alt.Chart.from_dict(spec, validate=False)
    else:
        msg = "Expected a unit, layer or facet spec"
        raise InvalidSpecError(msg)

    logger.debug("Built Altair chart", chart_type=type(chart).__name__)
    return chart
