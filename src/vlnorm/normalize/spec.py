"""Spec kind predicates and tree-wide helpers."""

from typing import Any

from vlnorm.core import encoding as enc
from vlnorm.core.fielddef import is_field_def

# Presentation properties ignored when comparing field definitions
_PRESENTATION_KEYS = ("scale", "axis", "legend")


def is_unit_spec(spec: dict[str, Any]) -> bool:
    """Whether the spec is a unit spec (one mark, one encoding)."""
    return "mark" in spec


def is_layer_spec(spec: dict[str, Any]) -> bool:
    """Whether the spec is a layer spec."""
    return "layer" in spec


def is_facet_spec(spec: dict[str, Any]) -> bool:
    """Whether the spec is a facet spec."""
    return "facet" in spec and "spec" in spec


def field_defs(spec: dict[str, Any]) -> list[dict[str, Any]]:
    """Collect the unique field definitions of a spec tree in traversal order.

    Definitions that differ only in scale, axis or legend count as one; the
    first one seen is kept.

    Args:
        spec: Unit, layer or facet spec

    Returns:
        Field definitions, each distinct definition once
    """
    collected: list[dict[str, Any]] = []
    seen: list[dict[str, Any]] = []

    def add(field_def: dict[str, Any]) -> None:
        key = {k: v for k, v in field_def.items() if k not in _PRESENTATION_KEYS}
        if key not in seen:
            seen.append(key)
            collected.append(field_def)

    def visit(node: dict[str, Any]) -> None:
        if is_facet_spec(node):
            for facet_def in (node.get("facet") or {}).values():
                if is_field_def(facet_def):
                    add(facet_def)
            visit(node["spec"])
        elif is_layer_spec(node):
            for child in node["layer"]:
                visit(child)
        elif is_unit_spec(node):
            for field_def in enc.field_defs(node.get("encoding") or {}):
                add(field_def)

    visit(spec)
    return collected
