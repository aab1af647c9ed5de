"""Layer and interaction descriptors handed to the map surface."""

from dataclasses import dataclass

from .styles import HOVER_LABEL_STYLE, LabelStyle

BASE_LAYER_Z_INDEX = 0
TILE_LAYER_Z_INDEX = 1
HEAT_LAYER_Z_INDEX = 2


# eq=False: layers are removed from the surface by identity, never by value
@dataclass(frozen=True, eq=False)
class TileLayer:
    """An XYZ raster tile layer."""

    url: str
    z_index: int = TILE_LAYER_Z_INDEX


@dataclass(frozen=True, eq=False)
class HoverInteraction:
    """Pointer-move selection that highlights a region and shows its value."""

    label_style: LabelStyle = HOVER_LABEL_STYLE
    geometry_kind: str = "Polygon"  # only polygons get the hover style
