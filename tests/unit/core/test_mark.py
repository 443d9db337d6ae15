"""Unit tests for mark helpers."""

from vlnorm.core.mark import is_mark_def, is_primitive_mark, mark_type, to_mark_def


class TestMarkHelpers:
    """Test bare marks and mark definitions."""

    def test_mark_type(self) -> None:
        """Test type extraction from both forms."""
        assert mark_type("bar") == "bar"
        assert mark_type({"type": "errorbar", "ticks": True}) == "errorbar"

    def test_is_mark_def(self) -> None:
        """Test only dicts with a type are mark definitions."""
        assert is_mark_def({"type": "line"})
        assert not is_mark_def("line")
        assert not is_mark_def({"color": "red"})

    def test_to_mark_def_copies(self) -> None:
        """Test mark definitions are copied, bare marks wrapped."""
        mark = {"type": "point", "filled": True}
        mark_def = to_mark_def(mark)
        mark_def["filled"] = False
        assert mark["filled"] is True
        assert to_mark_def("tick") == {"type": "tick"}

    def test_is_primitive_mark(self) -> None:
        """Test composite marks are not primitive."""
        assert is_primitive_mark("area")
        assert is_primitive_mark({"type": "rect"})
        assert not is_primitive_mark("box-plot")
        assert not is_primitive_mark({"type": "errorband"})
