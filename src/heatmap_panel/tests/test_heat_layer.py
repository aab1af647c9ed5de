"""Tests for the heat color ramp, geometry helpers and overlay construction."""

import pytest
from shapely.errors import GEOSException

from heatmap_panel.mapping.geometry_utils import (
    get_centroid,
    polygon_rings,
    project_point,
    reproject,
    to_polygon,
)
from heatmap_panel.mapping.heat_layer import HeatLayer, build_overlay
from heatmap_panel.mapping.styles import (
    HOVER_LABEL_STYLE,
    format_number,
    percentage_to_hsl,
    style_for_value,
    value_to_hue,
)
from heatmap_panel.models.schemas import FeatureCollection, PanelOptions

# Web Mercator half-circumference (x at lon=180)
MERCATOR_MAX_X = 20037508.342789244
# Metres per degree of longitude at the equator in Web Mercator
METRES_PER_DEGREE = MERCATOR_MAX_X / 180


def _ring(lon, lat, size=1.0):
    return [[lon, lat], [lon + size, lat], [lon + size, lat + size], [lon, lat + size], [lon, lat]]


def _make_feature(region_id, lon=0.0, lat=0.0, kind="Polygon", size=1.0):
    """Create a raw GeoJSON square feature."""
    ring = _ring(lon, lat, size)
    return {
        "type": "Feature",
        "properties": {"id": region_id},
        "geometry": {"type": kind, "coordinates": ring if kind == "LineString" else [ring]},
    }


def _features(*raw):
    return FeatureCollection.from_geojson({"type": "FeatureCollection", "features": list(raw)}).features


# =============================================================================
# TestColorRamp
# =============================================================================


class TestColorRamp:
    def test_value_one_is_red(self):
        assert value_to_hue(1.0) == 0
        assert percentage_to_hsl(1.0) == "hsla(0, 100%, 50%, 0.3)"

    def test_value_zero_is_green(self):
        assert value_to_hue(0.0) == 120
        assert percentage_to_hsl(0.0) == "hsla(120, 100%, 50%, 0.3)"

    def test_midpoint(self):
        assert percentage_to_hsl(0.5) == "hsla(60, 100%, 50%, 0.3)"

    def test_no_clamp_above_one(self):
        assert value_to_hue(1.5) == -60
        assert percentage_to_hsl(1.5) == "hsla(-60, 100%, 50%, 0.3)"

    def test_no_clamp_below_zero(self):
        assert value_to_hue(-0.5) == 180

    def test_fractional_hue(self):
        assert value_to_hue(0.25) == pytest.approx(90)
        assert value_to_hue(0.333) == pytest.approx(80.04)


# =============================================================================
# TestFormatNumber
# =============================================================================


class TestFormatNumber:
    def test_integral_float(self):
        assert format_number(1.0) == "1"
        assert format_number(-60.0) == "-60"

    def test_negative_zero(self):
        assert format_number(-0.0) == "0"

    def test_fraction(self):
        assert format_number(0.25) == "0.25"

    def test_int(self):
        assert format_number(3) == "3"

    def test_non_finite(self):
        assert format_number(float("nan")) == "NaN"
        assert format_number(float("inf")) == "Infinity"
        assert format_number(float("-inf")) == "-Infinity"


# =============================================================================
# TestStyles
# =============================================================================


class TestStyles:
    def test_style_for_value(self):
        style = style_for_value(0.5)
        assert style.fill_color == "hsla(60, 100%, 50%, 0.3)"
        assert style.label == "0.5"

    def test_simplestyle_export(self):
        props = style_for_value(1.0).to_simplestyle()
        assert props["fill"] == "hsla(0, 100%, 50%, 0.3)"
        assert props["label"] == "1"

    def test_hover_label_style(self):
        assert HOVER_LABEL_STYLE.font == "18px Calibri,sans-serif"
        assert HOVER_LABEL_STYLE.stroke_color == "#fff"
        assert HOVER_LABEL_STYLE.stroke_width == 2
        assert HOVER_LABEL_STYLE.overflow is True


# =============================================================================
# TestGeometryUtils
# =============================================================================


class TestGeometryUtils:
    def test_project_origin(self):
        x, y = project_point(0.0, 0.0)
        assert x == pytest.approx(0.0, abs=1e-6)
        assert y == pytest.approx(0.0, abs=1e-6)

    def test_project_antimeridian(self):
        x, _ = project_point(180.0, 0.0)
        assert x == pytest.approx(MERCATOR_MAX_X, rel=1e-9)

    def test_polygon_rings_for_line(self):
        line = _ring(0, 0)
        assert polygon_rings("LineString", line) == [line]

    def test_polygon_rings_unknown_kind(self):
        assert polygon_rings("Point", [0, 0]) == []

    def test_to_polygon_with_hole(self):
        outer = _ring(0, 0, 10)
        hole = _ring(2, 2, 1)
        polygon = to_polygon("Polygon", [outer, hole])
        assert len(polygon.interiors) == 1
        assert polygon.area == pytest.approx(99.0)

    def test_to_polygon_drops_third_ordinate(self):
        ring = [[0, 0, 5], [1, 0, 5], [1, 1, 5], [0, 0, 5]]
        assert not to_polygon("Polygon", [ring]).has_z

    def test_to_polygon_too_few_positions(self):
        with pytest.raises((ValueError, GEOSException)):
            to_polygon("LineString", [[0, 0], [1, 1]])

    def test_reproject_square(self):
        polygon = reproject(to_polygon("Polygon", [_ring(0, 0)]))
        minx, miny, maxx, maxy = polygon.bounds
        assert minx == pytest.approx(0.0, abs=1e-6)
        assert miny == pytest.approx(0.0, abs=1e-6)
        assert maxx == pytest.approx(METRES_PER_DEGREE, rel=1e-9)
        # Mercator stretches latitude, so the square is slightly taller than wide
        assert maxy > maxx

    def test_centroid_of_empty(self):
        assert get_centroid(to_polygon("Point", [])) == (0.0, 0.0)


# =============================================================================
# TestFeatureCollection
# =============================================================================


class TestFeatureCollection:
    def test_numeric_ids_become_strings(self):
        (feature,) = _features(_make_feature(10))
        assert feature.id == "10"

    def test_integral_float_id(self):
        (feature,) = _features(_make_feature(10.0))
        assert feature.id == "10"

    def test_missing_id(self):
        raw = _make_feature("10")
        raw["properties"] = {}
        (feature,) = _features(raw)
        assert feature.id is None

    def test_unsupported_geometry_dropped(self, caplog):
        point = {
            "type": "Feature",
            "properties": {"id": "9"},
            "geometry": {"type": "Point", "coordinates": [0, 0]},
        }
        with caplog.at_level("WARNING"):
            features = _features(_make_feature("10"), point)
        assert [f.id for f in features] == ["10"]
        assert "Skipping feature 1" in caplog.text

    def test_geometry_kind_and_coordinates(self):
        (feature,) = _features(_make_feature("10", kind="LineString"))
        assert feature.geometry_kind == "LineString"
        assert feature.coordinates[0] == [0.0, 0.0]

    def test_options_accept_raw_geojson(self):
        options = PanelOptions(
            geojson={"type": "FeatureCollection", "features": [_make_feature("10")]}
        )
        assert [f.id for f in options.geojson.features] == ["10"]


# =============================================================================
# TestBuildOverlay
# =============================================================================


class TestBuildOverlay:
    def test_filters_to_regions_with_values(self):
        features = _features(_make_feature("10"), _make_feature("11", lon=2))
        styled = build_overlay({"10": 0.5}, features)
        assert [g.region_id for g in styled] == ["10"]

    def test_regions_without_features_ignored(self):
        features = _features(_make_feature("10"))
        styled = build_overlay({"10": 0.5, "99": 0.7}, features)
        assert [g.region_id for g in styled] == ["10"]

    def test_order_follows_features(self):
        features = _features(_make_feature("12"), _make_feature("10", lon=2), _make_feature("11", lon=4))
        styled = build_overlay({"10": 0.1, "11": 0.2, "12": 0.3}, features)
        assert [g.region_id for g in styled] == ["12", "10", "11"]

    def test_metadata(self):
        styled = build_overlay({"10": 0.5}, _features(_make_feature("10")))[0]
        assert styled.value == 0.5
        assert styled.label == "0.5"
        assert styled.color == "hsla(60, 100%, 50%, 0.3)"

    def test_zero_value_is_rendered(self):
        styled = build_overlay({"10": 0.0}, _features(_make_feature("10")))
        assert len(styled) == 1
        assert styled[0].color == "hsla(120, 100%, 50%, 0.3)"

    def test_geometry_is_reprojected(self):
        styled = build_overlay({"10": 0.5}, _features(_make_feature("10")))[0]
        assert styled.geometry.bounds[2] == pytest.approx(METRES_PER_DEGREE, rel=1e-9)

    def test_linestring_treated_as_polygon(self):
        polygon_version = build_overlay({"10": 0.5}, _features(_make_feature("10")))[0]
        line_version = build_overlay({"10": 0.5}, _features(_make_feature("10", kind="LineString")))[0]
        assert line_version.geometry.geom_type == "Polygon"
        assert line_version.geometry.area == pytest.approx(polygon_version.geometry.area)

    def test_float_feature_id_matches_region_key(self):
        styled = build_overlay({"10": 0.5}, _features(_make_feature(10.0)))
        assert [g.region_id for g in styled] == ["10"]

    def test_null_value_not_drawn(self):
        features = _features(_make_feature("10"), _make_feature("11", lon=2))
        styled = build_overlay({"10": None, "11": 0.2}, features)
        assert [g.region_id for g in styled] == ["11"]

    def test_feature_without_id_ignored(self):
        raw = _make_feature("10")
        raw["properties"] = {"name": "no id"}
        assert build_overlay({"10": 0.5}, _features(raw)) == []

    def test_degenerate_geometry_skipped(self, caplog):
        broken = {
            "type": "Feature",
            "properties": {"id": "10"},
            "geometry": {"type": "LineString", "coordinates": [[0, 0], [1, 1]]},
        }
        features = _features(broken, _make_feature("11"))
        with caplog.at_level("WARNING"):
            styled = build_overlay({"10": 0.5, "11": 0.2}, features)
        assert [g.region_id for g in styled] == ["11"]
        assert "Skipping region 10: geometry cannot form a valid polygon" in caplog.text

    def test_empty_inputs(self):
        assert build_overlay({}, _features(_make_feature("10"))) == []
        assert build_overlay({"10": 0.5}, []) == []

    def test_pure(self):
        features = _features(_make_feature("10"), _make_feature("11", lon=2))
        values = {"10": 0.5, "11": 0.9}
        first = build_overlay(values, features)
        second = build_overlay(values, features)
        assert [(g.region_id, g.color, g.geometry.wkt) for g in first] == [
            (g.region_id, g.color, g.geometry.wkt) for g in second
        ]
        assert values == {"10": 0.5, "11": 0.9}


# =============================================================================
# TestHeatLayer
# =============================================================================


class TestHeatLayer:
    def test_geojson_export(self):
        styled = build_overlay({"10": 1.0}, _features(_make_feature("10")))
        layer = HeatLayer(entity_id="A", geometries=tuple(styled))
        (feature,) = layer.to_geojson_features()
        assert feature["type"] == "Feature"
        assert feature["geometry"]["type"] == "Polygon"
        assert feature["properties"]["id"] == "10"
        assert feature["properties"]["fill"] == "hsla(0, 100%, 50%, 0.3)"
        assert feature["properties"]["label"] == "1"
        assert len(feature["properties"]["label_anchor"]) == 2

    def test_z_index_above_tiles(self):
        assert HeatLayer(entity_id="A", geometries=()).z_index == 2

    def test_layers_compare_by_identity(self):
        a = HeatLayer(entity_id="A", geometries=())
        b = HeatLayer(entity_id="A", geometries=())
        assert a != b
