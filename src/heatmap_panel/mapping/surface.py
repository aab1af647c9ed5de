"""Map surface contract and a headless implementation."""

from typing import Any, Dict, List, Optional, Protocol, Tuple, Union

from .heat_layer import HeatLayer
from .layers import HoverInteraction, TileLayer


Layer = Union[TileLayer, HeatLayer]
Coordinate = Tuple[float, float]  # map CRS (x, y)


# Surface protocol for swap-ability (headless today, any widget binding later)
class MapSurface(Protocol):
    def set_view(self, center: Coordinate, zoom: int) -> None: ...

    def add_layer(self, layer: Layer) -> None: ...

    def remove_layer(self, layer: Layer) -> None:
        """Remove a layer; removing a layer that is not attached is a no-op."""
        ...

    def add_interaction(self, interaction: HoverInteraction) -> None: ...

    def set_zoom(self, zoom: int) -> None: ...

    def animate(self, center: Coordinate, duration_ms: int) -> None: ...


class InMemoryMapSurface:
    """
    Map surface that keeps its layer list and view in memory.

    Every call is appended to ``calls`` as ``(method, argument)`` so a
    sequence of surface operations can be inspected afterwards.
    """

    def __init__(self):
        self.layers: List[Layer] = []
        self.interactions: List[HoverInteraction] = []
        self.center: Optional[Coordinate] = None
        self.zoom: Optional[int] = None
        self.calls: List[Tuple[str, Any]] = []

    def set_view(self, center: Coordinate, zoom: int) -> None:
        self.calls.append(("set_view", (center, zoom)))
        self.center = center
        self.zoom = zoom

    def add_layer(self, layer: Layer) -> None:
        self.calls.append(("add_layer", layer))
        self.layers.append(layer)
        self.layers.sort(key=lambda item: item.z_index)

    def remove_layer(self, layer: Layer) -> None:
        self.calls.append(("remove_layer", layer))
        if layer in self.layers:
            self.layers.remove(layer)

    def add_interaction(self, interaction: HoverInteraction) -> None:
        self.calls.append(("add_interaction", interaction))
        self.interactions.append(interaction)

    def set_zoom(self, zoom: int) -> None:
        self.calls.append(("set_zoom", zoom))
        self.zoom = zoom

    def animate(self, center: Coordinate, duration_ms: int) -> None:
        # No frames to render; the view lands on the target immediately
        self.calls.append(("animate", (center, duration_ms)))
        self.center = center

    @property
    def heat_layers(self) -> List[HeatLayer]:
        return [layer for layer in self.layers if isinstance(layer, HeatLayer)]

    @property
    def tile_layers(self) -> List[TileLayer]:
        return [layer for layer in self.layers if isinstance(layer, TileLayer)]

    def to_feature_collection(self) -> Dict[str, Any]:
        """
        Export the attached heat overlay as GeoJSON.

        Coordinates are in the map CRS (EPSG:3857).

        Returns:
            FeatureCollection dict (no features when no overlay is attached)
        """
        features = []
        for layer in self.heat_layers:
            features.extend(layer.to_geojson_features())
        return {
            "type": "FeatureCollection",
            "crs": {"type": "name", "properties": {"name": "EPSG:3857"}},
            "features": features,
        }
