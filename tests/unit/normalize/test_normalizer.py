"""Unit tests for top-level spec normalization."""

import copy
from typing import Any

import pytest

from vlnorm.core.enums import WarningCode
from vlnorm.core.errors import MissingContinuousAxisError, StrictModeError, UnregisteredMarkError
from vlnorm.normalize import Normalizer, normalize
from vlnorm.normalize.normalizer import normalize_overlay, promote_secondary_channels

STOCKS = {"url": "data/stocks.csv", "format": {"type": "csv"}}
DATE = {"field": "date", "type": "temporal"}
PRICE = {"field": "price", "type": "quantitative"}
SUM_PRICE = {"aggregate": "sum", "field": "price", "type": "quantitative"}
SYMBOL = {"field": "symbol", "type": "nominal"}
POINT_OVERLAY = {"type": "point", "filled": True, "role": "pointOverlay"}
LINE_OVERLAY = {"type": "line", "role": "lineOverlay"}


class TestFacetWrapper:
    """Test conversion of row/column channels into facet specs."""

    def test_column(self) -> None:
        """Test a unit with column becomes a facet spec."""
        spec = {
            "name": "faceted",
            "width": 123,
            "height": 234,
            "description": "faceted spec",
            "data": {"url": "data/movies.json"},
            "mark": "point",
            "encoding": {
                "column": {"field": "MPAA_Rating", "type": "ordinal"},
                "x": {"field": "Worldwide_Gross", "type": "quantitative"},
                "y": {"field": "US_DVD_Sales", "type": "quantitative"},
            },
        }
        assert normalize(spec).spec == {
            "name": "faceted",
            "description": "faceted spec",
            "data": {"url": "data/movies.json"},
            "facet": {"column": {"field": "MPAA_Rating", "type": "ordinal"}},
            "spec": {
                "mark": "point",
                "width": 123,
                "height": 234,
                "encoding": {
                    "x": {"field": "Worldwide_Gross", "type": "quantitative"},
                    "y": {"field": "US_DVD_Sales", "type": "quantitative"},
                },
            },
        }

    def test_row(self) -> None:
        """Test a unit with row becomes a facet spec."""
        spec = {
            "data": {"url": "data/movies.json"},
            "mark": "point",
            "encoding": {
                "row": {"field": "MPAA_Rating", "type": "ordinal"},
                "x": {"field": "Worldwide_Gross", "type": "quantitative"},
                "y": {"field": "US_DVD_Sales", "type": "quantitative"},
            },
        }
        assert normalize(spec).spec == {
            "data": {"url": "data/movies.json"},
            "facet": {"row": {"field": "MPAA_Rating", "type": "ordinal"}},
            "spec": {
                "mark": "point",
                "encoding": {
                    "x": {"field": "Worldwide_Gross", "type": "quantitative"},
                    "y": {"field": "US_DVD_Sales", "type": "quantitative"},
                },
            },
        }

    def test_faceted_composite_mark(self) -> None:
        """Test the inner spec of a facet is expanded."""
        spec = {
            "mark": "errorbar",
            "encoding": {"row": SYMBOL, "x": {"field": "year", "type": "ordinal"}, "y": PRICE},
        }
        result = normalize(spec).spec
        assert result["facet"] == {"row": SYMBOL}
        assert "layer" in result["spec"]
        assert "transform" in result["spec"]

    def test_facet_channel_in_layer_dropped(self) -> None:
        """Test row/column inside a layer are dropped with a warning."""
        spec = {"layer": [{"mark": "point", "encoding": {"row": SYMBOL, "x": DATE, "y": PRICE}}]}
        result = normalize(spec)
        assert result.spec == {"layer": [{"mark": "point", "encoding": {"x": DATE, "y": PRICE}}]}
        assert [w.code for w in result.warnings] == [WarningCode.FACET_CHANNEL_DROPPED]
        assert "layer" in result.messages[0]

    def test_facet_channel_in_facet_dropped(self) -> None:
        """Test row/column inside a facet's inner spec are dropped with a warning."""
        spec = {
            "facet": {"row": SYMBOL},
            "spec": {"mark": "point", "encoding": {"column": SYMBOL, "x": DATE, "y": PRICE}},
        }
        result = normalize(spec)
        assert "column" not in result.spec["spec"]["encoding"]
        assert result.warnings[0].channel == "column"


class TestOverlay:
    """Test point and line overlays."""

    def test_line_with_point(self) -> None:
        """Test a line with the point overlay enabled in the config."""
        config = {"overlay": {"line": True}}
        spec = {"data": STOCKS, "mark": "line", "encoding": {"x": DATE, "y": PRICE}, "config": config}
        assert normalize(spec).spec == {
            "data": STOCKS,
            "layer": [
                {"mark": "line", "encoding": {"x": DATE, "y": PRICE}},
                {"mark": POINT_OVERLAY, "encoding": {"x": DATE, "y": PRICE}},
            ],
            "config": config,
        }

    def test_faceted_line_with_point(self) -> None:
        """Test the overlay of a faceted line lands in the inner spec."""
        config = {"overlay": {"line": True}}
        spec = {
            "data": STOCKS,
            "mark": "line",
            "encoding": {"row": SYMBOL, "x": DATE, "y": PRICE},
            "config": config,
        }
        assert normalize(spec).spec == {
            "data": STOCKS,
            "facet": {"row": SYMBOL},
            "spec": {
                "layer": [
                    {"mark": "line", "encoding": {"x": DATE, "y": PRICE}},
                    {"mark": POINT_OVERLAY, "encoding": {"x": DATE, "y": PRICE}},
                ]
            },
            "config": config,
        }

    def test_area_with_line_and_point(self) -> None:
        """Test linepoint overlays on an area."""
        config = {"overlay": {"area": "linepoint"}}
        spec = {"data": STOCKS, "mark": "area", "encoding": {"x": DATE, "y": PRICE}, "config": config}
        assert normalize(spec).spec == {
            "data": STOCKS,
            "layer": [
                {"mark": "area", "encoding": {"x": DATE, "y": PRICE}},
                {"mark": LINE_OVERLAY, "encoding": {"x": DATE, "y": PRICE}},
                {"mark": POINT_OVERLAY, "encoding": {"x": DATE, "y": PRICE}},
            ],
            "config": config,
        }

    def test_area_with_line(self) -> None:
        """Test a line overlay on an area."""
        config = {"overlay": {"area": "line"}}
        spec = {"data": STOCKS, "mark": "area", "encoding": {"x": DATE, "y": PRICE}, "config": config}
        layer = normalize(spec).spec["layer"]
        assert [part["mark"] for part in layer] == ["area", LINE_OVERLAY]

    def test_stacked_area_with_line(self) -> None:
        """Test the overlay line of a stacked area carries the stack offset."""
        config = {"overlay": {"area": "line"}}
        spec = {
            "data": STOCKS,
            "mark": "area",
            "encoding": {"x": DATE, "y": SUM_PRICE, "color": SYMBOL},
            "config": config,
        }
        assert normalize(spec).spec == {
            "data": STOCKS,
            "layer": [
                {"mark": "area", "encoding": {"x": DATE, "y": SUM_PRICE, "color": SYMBOL}},
                {
                    "mark": LINE_OVERLAY,
                    "encoding": {"x": DATE, "y": {**SUM_PRICE, "stack": "zero"}, "color": SYMBOL},
                },
            ],
            "config": config,
        }

    def test_streamgraph_with_line(self) -> None:
        """Test a center-stacked area keeps its offset on the overlay."""
        y = {**SUM_PRICE, "stack": "center"}
        spec = {
            "mark": "area",
            "encoding": {"x": DATE, "y": y, "color": SYMBOL},
            "config": {"overlay": {"area": "line"}},
        }
        base, line = normalize(spec).spec["layer"]
        assert base["encoding"]["y"] == y
        assert line["encoding"]["y"] == y

    def test_mark_def_point(self) -> None:
        """Test a point overlay requested on the mark definition."""
        spec = {
            "mark": {"type": "line", "color": "red", "point": {"color": "black"}},
            "encoding": {"x": DATE, "y": PRICE},
        }
        base, point = normalize(spec).spec["layer"]
        assert base["mark"] == {"type": "line", "color": "red"}
        assert point["mark"] == {**POINT_OVERLAY, "color": "black"}

    def test_mark_def_disables_config(self) -> None:
        """Test a false mark definition flag wins over the config."""
        spec = {"mark": {"type": "line", "point": False}, "encoding": {"x": DATE, "y": PRICE}}
        result = normalize(spec, {"overlay": {"line": True}}).spec
        assert result == {"mark": {"type": "line", "point": False}, "encoding": {"x": DATE, "y": PRICE}}

    def test_area_mark_def_line(self) -> None:
        """Test a line overlay requested on an area mark definition."""
        spec = {"mark": {"type": "area", "line": True}, "encoding": {"x": DATE, "y": PRICE}}
        layer = normalize(spec).spec["layer"]
        assert [part["mark"] for part in layer] == [{"type": "area"}, LINE_OVERLAY]

    def test_overlay_drops_unsupported_channels(self) -> None:
        """Test overlay layers only keep channels their mark supports."""
        spec = {
            "mark": {"type": "area", "line": True, "point": True},
            "encoding": {"x": DATE, "y": PRICE, "y2": {"field": "low", "type": "quantitative"}},
        }
        _, line, point = normalize(spec).spec["layer"]
        assert "y2" not in line["encoding"]
        assert "y2" not in point["encoding"]

    def test_no_overlay_inside_layer(self) -> None:
        """Test units inside a layer never get overlays."""
        spec = {"layer": [{"mark": "line", "encoding": {"x": DATE, "y": PRICE}}]}
        assert normalize(spec, {"overlay": {"line": True}}).spec == spec

    def test_other_marks_untouched(self) -> None:
        """Test overlays only apply to lines and areas."""
        spec = {"mark": "bar", "encoding": {"x": DATE, "y": PRICE}}
        assert normalize_overlay(spec, {"overlay": {"line": True, "area": "linepoint"}}) == spec


class TestSecondaryChannelPromotion:
    """Test promotion of x2/y2 to x/y."""

    def test_y2_to_y(self) -> None:
        """Test y2 without y becomes y."""
        spec = {
            "data": {"url": "data/population.json"},
            "mark": "rule",
            "encoding": {
                "y2": {"field": "age", "type": "ordinal"},
                "x": {"aggregate": "min", "field": "people", "type": "quantitative"},
                "x2": {"aggregate": "max", "field": "people", "type": "quantitative"},
            },
        }
        assert normalize(spec).spec == {
            "data": {"url": "data/population.json"},
            "mark": "rule",
            "encoding": {
                "y": {"field": "age", "type": "ordinal"},
                "x": {"aggregate": "min", "field": "people", "type": "quantitative"},
                "x2": {"aggregate": "max", "field": "people", "type": "quantitative"},
            },
        }

    def test_x2_to_x(self) -> None:
        """Test x2 without x becomes x."""
        spec = {
            "mark": "rule",
            "encoding": {
                "x2": {"field": "age", "type": "ordinal"},
                "y": {"aggregate": "min", "field": "people", "type": "quantitative"},
                "y2": {"aggregate": "max", "field": "people", "type": "quantitative"},
            },
        }
        encoding = normalize(spec).spec["encoding"]
        assert list(encoding) == ["x", "y", "y2"]
        assert encoding["x"] == {"field": "age", "type": "ordinal"}

    def test_nothing_missing(self) -> None:
        """Test complete encodings are left as they are."""
        spec = {
            "mark": "rule",
            "encoding": {
                "y": {"field": "age", "type": "ordinal"},
                "x": {"aggregate": "min", "field": "people", "type": "quantitative"},
                "x2": {"aggregate": "max", "field": "people", "type": "quantitative"},
            },
        }
        assert normalize(spec).spec == spec

    def test_promotion_keeps_position(self) -> None:
        """Test the promoted channel takes the secondary channel's position."""
        encoding = {"color": SYMBOL, "x2": DATE, "y": PRICE}
        assert list(promote_secondary_channels(encoding)) == ["color", "x", "y"]

    def test_promotion_returns_same_mapping(self) -> None:
        """Test nothing is copied when no promotion applies."""
        encoding = {"x": DATE, "x2": DATE}
        assert promote_secondary_channels(encoding) is encoding


class TestNormalizer:
    """Test the normalizer entry points."""

    def test_composite_dispatch(self) -> None:
        """Test box plots are expanded to four layers."""
        spec = {
            "mark": "box-plot",
            "encoding": {
                "x": {"field": "age", "type": "ordinal"},
                "y": {"field": "people", "type": "quantitative", "axis": {"title": "population"}},
                "size": {"value": 5},
                "color": {"value": "skyblue"},
            },
        }
        assert len(normalize(spec).spec["layer"]) == 4

    def test_errorbar_default_stderr(self) -> None:
        """Test error bars default to the standard error."""
        spec = {"mark": {"type": "errorbar"}, "encoding": {"y": PRICE}}
        aggregate = normalize(spec).spec["transform"][0]["aggregate"]
        assert "stderr" in [entry["op"] for entry in aggregate]

    @pytest.mark.parametrize("mark", ["box-plot", "errorbar", "errorband"])
    def test_both_discrete_rejected(self, mark: str) -> None:
        """Test every composite mark needs a continuous axis."""
        spec = {"mark": mark, "encoding": {"x": SYMBOL, "y": {"field": "age", "type": "ordinal"}}}
        with pytest.raises(MissingContinuousAxisError, match="continuous axis"):
            normalize(spec)

    def test_unknown_mark(self) -> None:
        """Test marks that are neither primitive nor registered."""
        with pytest.raises(UnregisteredMarkError, match="Invalid mark type violin"):
            normalize({"mark": "violin", "encoding": {"y": PRICE}})

    def test_invalid_field_defs_dropped(self) -> None:
        """Test empty and unsupported channels are dropped with warnings."""
        spec = {"mark": "bar", "encoding": {"x": DATE, "y": PRICE, "shape": SYMBOL, "color": {"type": "nominal"}}}
        result = normalize(spec)
        assert result.spec["encoding"] == {"x": DATE, "y": PRICE}
        assert [w.code for w in result.warnings] == [WarningCode.INCOMPATIBLE_CHANNEL, WarningCode.EMPTY_FIELD_DEF]

    def test_strict_mode(self) -> None:
        """Test strict mode turns the first warning into an error."""
        spec = {"mark": "box-plot", "encoding": {"x": SYMBOL, "y": PRICE, "shape": SYMBOL}}
        with pytest.raises(StrictModeError) as exc_info:
            normalize(spec, strict=True)
        assert exc_info.value.diagnostic.code is WarningCode.INCOMPATIBLE_CHANNEL

    def test_config_precedence(self) -> None:
        """Test spec config wins over caller config, which wins over defaults."""
        spec = {
            "mark": "errorbar",
            "encoding": {"y": PRICE},
            "config": {"errorbar": {"rule": False}},
        }
        result = Normalizer({"errorbar": {"ticks": True, "rule": True}}).normalize(spec)
        assert [layer["mark"]["role"] for layer in result.spec["layer"]] == ["ticks", "ticks"]

    def test_input_not_mutated(self) -> None:
        """Test the input spec is left untouched."""
        spec = {
            "mark": {"type": "line", "point": True},
            "encoding": {"row": SYMBOL, "x2": DATE, "y": PRICE, "color": {}},
        }
        before = copy.deepcopy(spec)
        normalize(spec)
        assert spec == before

    def test_unknown_keys_pass_through(self) -> None:
        """Test properties the normalizer does not know are kept."""
        spec = {"mark": "point", "encoding": {"x": DATE}, "selection": {"brush": {"type": "interval"}}}
        assert normalize(spec).spec["selection"] == {"brush": {"type": "interval"}}


IDEMPOTENCE_CASES: list[dict[str, Any]] = [
    {"mark": "point", "encoding": {"x": DATE, "y": PRICE}},
    {"mark": "line", "encoding": {"row": SYMBOL, "x": DATE, "y": PRICE}, "config": {"overlay": {"line": True}}},
    {"mark": {"type": "area", "line": True, "point": True}, "encoding": {"x": DATE, "y": SUM_PRICE, "color": SYMBOL}},
    {"mark": "rule", "encoding": {"y2": {"field": "age", "type": "ordinal"}, "x": PRICE, "x2": PRICE}},
    {
        "mark": {"type": "box-plot", "extent": 1.5},
        "encoding": {"x": SYMBOL, "y": PRICE, "color": {"value": "skyblue"}, "shape": SYMBOL},
    },
    {
        "mark": {"type": "errorbar", "ticks": True, "point": True, "extent": "ci"},
        "encoding": {"x": SYMBOL, "y": PRICE},
    },
    {"mark": {"type": "errorband", "borders": True}, "encoding": {"x": DATE, "y": PRICE}},
    {"mark": "box-plot", "encoding": {"x": SYMBOL, "y": PRICE, "color": {}, "tooltip": DATE}},
    {
        "mark": "errorbar",
        "encoding": {
            "x": PRICE,
            "x2": {"field": "high", "type": "quantitative"},
            "y": {"field": "volume", "type": "quantitative"},
            "tooltip": {"aggregate": "count", "type": "quantitative"},
        },
    },
    {"layer": [{"mark": "errorbar", "encoding": {"y": PRICE}}, {"mark": "line", "encoding": {"x": DATE}}]},
]


class TestIdempotence:
    """Test normalizing a normalized spec changes nothing."""

    @pytest.mark.parametrize("spec", IDEMPOTENCE_CASES)
    def test_idempotent(self, spec: dict[str, Any]) -> None:
        """Test normalize(normalize(s)) == normalize(s)."""
        once = normalize(spec).spec
        twice = normalize(once)
        assert twice.spec == once
        assert twice.warnings == []
