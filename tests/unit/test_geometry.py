import pytest
from pyproj import Transformer

from watermap.common.geometry import (
    application_from_row,
    layer_object_from_row,
    point_from_geojson,
    point_from_geojson_coordinates,
    point_from_lat_lon,
    polyline_from_geojson,
    safe_float,
    to_wgs84,
)
from watermap.common.models import Point


def test_safe_float_parses_decimal_strings_and_rejects_junk():
    assert safe_float("56.4767") == 56.4767
    assert safe_float(3) == 3.0
    assert safe_float(None) is None
    assert safe_float("abc") is None
    assert safe_float("NaN") is None
    assert safe_float(True) is None


def test_geojson_position_is_lon_lat():
    assert point_from_geojson_coordinates([53.8036, 56.4767]) == Point(lat=56.4767, lon=53.8036)
    assert point_from_geojson({"type": "Point", "coordinates": [53.8036, 56.4767]}) == Point(56.4767, 53.8036)
    assert Point(56.4767, 53.8036).to_geojson() == [53.8036, 56.4767]


def test_point_conversion_rejects_out_of_range_and_wrong_types():
    assert point_from_lat_lon(91, 0) is None
    assert point_from_lat_lon(0, None) is None
    assert point_from_geojson({"type": "LineString", "coordinates": [[0, 0], [1, 1]]}) is None
    assert point_from_geojson_coordinates([1.0]) is None


def test_polyline_from_geojson_drops_bad_vertices():
    line = polyline_from_geojson(
        {"type": "LineString", "coordinates": [[53.80, 56.47], [None, 1], ["x", 2], [53.81, 56.48]]},
        line_id=9,
    )

    assert line.line_id == 9
    assert line.vertices == (Point(56.47, 53.80), Point(56.48, 53.81))


def test_polyline_from_geojson_empty_or_wrong_type():
    assert polyline_from_geojson({"type": "LineString", "coordinates": []}) is None
    assert polyline_from_geojson({"type": "Point", "coordinates": [0, 0]}) is None
    assert polyline_from_geojson(None) is None


def test_to_wgs84_from_web_mercator():
    transformer = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)
    x, y = transformer.transform(53.8036, 56.4767)

    lat, lon = to_wgs84(y, x, 3857)

    assert lat == pytest.approx(56.4767, abs=1e-6)
    assert lon == pytest.approx(53.8036, abs=1e-6)


def test_application_from_api_row():
    app = application_from_row(
        {
            "id": 1,
            "status": "new",
            "coordinates": {"lat": 56.4767, "lng": 53.8036},
            "team": {"id": 3, "name": "водосеть"},
            "line_id": 10,
        }
    )

    assert app.point == Point(56.4767, 53.8036)
    assert app.team.name == "водосеть"
    assert app.line_id == 10


def test_application_from_database_row_with_missing_location():
    app = application_from_row({"id": 2, "status": "new", "latitude": None, "longitude": "53.8", "team_id": None})

    assert app.point is None
    assert app.team is None
    assert app.line_id is None


def test_application_from_database_row_with_decimal_strings():
    app = application_from_row(
        {"id": 3, "status": "in_progress", "latitude": "56.48", "longitude": "53.81", "team_id": 2, "team_name": "канализация"}
    )

    assert app.point == Point(56.48, 53.81)
    assert app.team.team_id == 2


def test_layer_object_from_row():
    obj = layer_object_from_row(
        {
            "id": 5,
            "layer_type": "water",
            "object_type": "line",
            "geojson": {"type": "LineString", "coordinates": [[53.80, 56.47], [53.81, 56.48]]},
            "pipe_length": "120.25",
            "pipe_size": "",
        }
    )

    assert obj.pipe_length == 120.25
    assert obj.pipe_size is None
    assert obj.point is None
    assert obj.polyline.line_id == 5


def test_well_row_keeps_valves():
    obj = layer_object_from_row(
        {
            "id": 6,
            "object_type": "well",
            "geojson": {"type": "Point", "coordinates": [53.80, 56.47]},
            "valves": [{"id": 1, "status": "working"}],
        }
    )

    assert obj.point == Point(56.47, 53.80)
    assert obj.polyline is None
    assert obj.valves == ({"id": 1, "status": "working"},)
