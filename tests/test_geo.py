"""
Tests for GeoJSON conversion helpers
"""

from agrosat.geo import (
    to_geojson_point,
    from_geojson_point,
    to_geojson_polygon,
    from_geojson_polygon
)


class TestPoints:
    """Point conversion swaps lat/lon order"""

    def test_to_geojson_point(self):
        assert to_geojson_point(55.75, 37.61) == {"type": "Point", "coordinates": [37.61, 55.75]}

    def test_from_geojson_point(self):
        assert from_geojson_point({"type": "Point", "coordinates": [37.61, 55.75]}) == {"lat": 55.75, "lon": 37.61}

    def test_missing_point_is_origin(self):
        assert from_geojson_point(None) == {"lat": 0, "lon": 0}
        assert from_geojson_point({"type": "Point"}) == {"lat": 0, "lon": 0}


class TestPolygons:
    """Polygon conversion and ring closing"""

    def test_ring_is_closed(self):
        polygon = to_geojson_polygon([[50.0, 30.0], [50.0, 31.0], [51.0, 31.0]])

        ring = polygon["coordinates"][0]
        assert polygon["type"] == "Polygon"
        assert len(ring) == 4
        assert ring[0] == [30.0, 50.0]
        assert ring[-1] == ring[0]

    def test_closed_ring_not_duplicated(self):
        points = [[50.0, 30.0], [50.0, 31.0], [51.0, 31.0], [50.0, 30.0]]
        polygon = to_geojson_polygon(points)
        assert len(polygon["coordinates"][0]) == 4

    def test_too_few_points(self):
        assert to_geojson_polygon([[50.0, 30.0], [50.0, 31.0]]) is None
        assert to_geojson_polygon(None) is None
        assert to_geojson_polygon([]) is None

    def test_malformed_points(self):
        assert to_geojson_polygon([[50.0], [50.0, 31.0], [51.0, 31.0]]) is None
        assert to_geojson_polygon([["a", "b"], [50.0, 31.0], [51.0, 31.0]]) is None

    def test_from_geojson_polygon(self):
        polygon = {"type": "Polygon", "coordinates": [[[30.0, 50.0], [31.0, 50.0], [31.0, 51.0], [30.0, 50.0]]]}
        assert from_geojson_polygon(polygon) == [[50.0, 30.0], [50.0, 31.0], [51.0, 31.0], [50.0, 30.0]]

    def test_from_missing_polygon(self):
        assert from_geojson_polygon(None) == []
        assert from_geojson_polygon({"type": "Polygon", "coordinates": []}) == []
