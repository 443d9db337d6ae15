"""Primitive mark types and mark definition helpers."""

from typing import Any

AREA = "area"
BAR = "bar"
LINE = "line"
POINT = "point"
TEXT = "text"
TICK = "tick"
RULE = "rule"
RECT = "rect"
CIRCLE = "circle"
SQUARE = "square"

PRIMITIVE_MARKS: tuple[str, ...] = (AREA, BAR, LINE, POINT, TEXT, TICK, RULE, RECT, CIRCLE, SQUARE)


def is_mark_def(mark: Any) -> bool:  # noqa: ANN401
    """Whether a mark is given as a definition object rather than a bare type."""
    return isinstance(mark, dict) and "type" in mark


def mark_type(mark: Any) -> str:  # noqa: ANN401
    """Return the type tag of a mark, unwrapping mark definitions."""
    if is_mark_def(mark):
        return str(mark["type"])
    return str(mark)


def to_mark_def(mark: Any) -> dict[str, Any]:  # noqa: ANN401
    """Return a fresh mark definition dict for a bare type or a mark def."""
    if is_mark_def(mark):
        return dict(mark)
    return {"type": mark}


def is_primitive_mark(mark: Any) -> bool:  # noqa: ANN401
    """Whether the mark type is one of the primitive marks."""
    return mark_type(mark) in PRIMITIVE_MARKS
