"""Geometry construction and reprojection for region polygons."""

from functools import lru_cache
from typing import Any, List, Sequence, Tuple

from pyproj import Transformer
from shapely.geometry import Polygon
from shapely.ops import transform

GEOGRAPHIC_CRS = "EPSG:4326"  # lon/lat as delivered in GeoJSON
MAP_CRS = "EPSG:3857"  # Web Mercator, the map surface projection


@lru_cache(maxsize=None)
def get_transformer(source: str = GEOGRAPHIC_CRS, target: str = MAP_CRS) -> Transformer:
    """Cached lon/lat-ordered transformer between two CRSs."""
    return Transformer.from_crs(source, target, always_xy=True)


def polygon_rings(geometry_kind: str, coordinates: Sequence[Any]) -> List[Sequence[Any]]:
    """
    Get the rings that make up a region polygon.

    A LineString is treated as a degenerate polygon whose only ring is the
    line itself. This keeps regions usable when the source data stores an
    outline as a line.

    Args:
        geometry_kind: "Polygon" or "LineString"
        coordinates: GeoJSON coordinates for that kind

    Returns:
        List of rings (shell first, then holes); empty for other kinds
    """
    if geometry_kind == "Polygon":
        return list(coordinates)
    if geometry_kind == "LineString":
        return [coordinates]
    return []


def to_polygon(geometry_kind: str, coordinates: Sequence[Any]) -> Polygon:
    """Build a shapely polygon from GeoJSON coordinates (2D only).

    Raises:
        ValueError: If a ring has too few positions to form a polygon
        IndexError: If a position has fewer than two ordinates
    """
    rings = [[(p[0], p[1]) for p in ring] for ring in polygon_rings(geometry_kind, coordinates)]
    if not rings:
        return Polygon()
    return Polygon(rings[0], rings[1:])


def reproject(geometry, source: str = GEOGRAPHIC_CRS, target: str = MAP_CRS):
    """Reproject any shapely geometry between CRSs."""
    return transform(get_transformer(source, target).transform, geometry)


def project_point(lon: float, lat: float) -> Tuple[float, float]:
    """Project a lon/lat pair to map coordinates."""
    x, y = get_transformer().transform(lon, lat)
    return (x, y)


def get_centroid(geometry) -> Tuple[float, float]:
    """
    Get centroid coordinates for label placement.

    Args:
        geometry: shapely geometry

    Returns:
        (x, y) tuple, (0.0, 0.0) for empty geometries
    """
    if geometry.is_empty:
        return (0.0, 0.0)
    centroid = geometry.centroid
    return (centroid.x, centroid.y)
