from .schemas import (
    Row,
    GeoFeature,
    FeatureCollection,
    PanelOptions,
    PolygonGeometry,
    LineStringGeometry,
)

__all__ = [
    "Row",
    "GeoFeature",
    "FeatureCollection",
    "PanelOptions",
    "PolygonGeometry",
    "LineStringGeometry",
]
