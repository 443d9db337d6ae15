"""Top-level spec normalization."""

from .normalizer import Normalizer, normalize
from .spec import field_defs, is_facet_spec, is_layer_spec, is_unit_spec

__all__ = [
    "Normalizer",
    "field_defs",
    "is_facet_spec",
    "is_layer_spec",
    "is_unit_spec",
    "normalize",
]
