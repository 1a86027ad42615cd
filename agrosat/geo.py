"""
Conversion between the dashboard's [lat, lon] coordinates and GeoJSON.

GeoJSON orders positions as [lon, lat]; the dashboard uses {lat, lon}
points and [[lat, lon], ...] rings.
"""

from typing import Any, Dict, List, Optional, Sequence

from agrosat.utils.logger import get_logger

logger = get_logger(__name__)


def to_geojson_point(lat: float, lon: float) -> Dict[str, Any]:
    return {"type": "Point", "coordinates": [lon, lat]}


def from_geojson_point(geojson: Optional[Dict[str, Any]]) -> Dict[str, float]:
    if not geojson or not geojson.get("coordinates"):
        return {"lat": 0, "lon": 0}
    coordinates = geojson["coordinates"]
    return {"lat": coordinates[1], "lon": coordinates[0]}


def to_geojson_polygon(points: Optional[Sequence[Sequence[float]]]) -> Optional[Dict[str, Any]]:
    """
    Build a GeoJSON Polygon from a [[lat, lon], ...] ring.

    Returns None for fewer than three points or malformed input. The ring
    is closed when its first and last positions differ.
    """
    if not points or not isinstance(points, (list, tuple)) or len(points) < 3:
        return None
    try:
        ring = [[float(p[1]), float(p[0])] for p in points]
    except (TypeError, ValueError, IndexError) as e:
        logger.warning(f"Error converting polygon: {e}")
        return None

    if ring[0] != ring[-1]:
        ring.append(list(ring[0]))

    return {"type": "Polygon", "coordinates": [ring]}


def from_geojson_polygon(geojson: Optional[Dict[str, Any]]) -> List[List[float]]:
    if not geojson or not geojson.get("coordinates") or not geojson["coordinates"][0]:
        return []
    return [[p[1], p[0]] for p in geojson["coordinates"][0]]
