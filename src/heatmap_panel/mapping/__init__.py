"""Heat overlay construction and the map surface contract.

Turns one entity's region values into colored, reprojected region polygons
and defines the surface the overlay is attached to.
"""

from .heat_layer import HeatLayer, StyledGeometry, build_overlay
from .layers import HoverInteraction, TileLayer
from .styles import (
    HOVER_LABEL_STYLE,
    HeatStyle,
    LabelStyle,
    format_number,
    percentage_to_hsl,
    style_for_value,
    value_to_hue,
)
from .surface import InMemoryMapSurface, MapSurface
from .geometry_utils import (
    get_centroid,
    get_transformer,
    project_point,
    reproject,
    to_polygon,
)

__all__ = [
    "HeatLayer",
    "StyledGeometry",
    "build_overlay",
    "HoverInteraction",
    "TileLayer",
    "HOVER_LABEL_STYLE",
    "HeatStyle",
    "LabelStyle",
    "format_number",
    "percentage_to_hsl",
    "style_for_value",
    "value_to_hue",
    "InMemoryMapSurface",
    "MapSurface",
    "get_centroid",
    "get_transformer",
    "project_point",
    "reproject",
    "to_polygon",
]
