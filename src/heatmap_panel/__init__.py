# src/heatmap_panel/__init__.py
from typing import Any, List, Optional, Sequence

from .mapping.surface import InMemoryMapSurface, MapSurface
from .models.schemas import FeatureCollection, PanelOptions, Row
from .orchestrator.sync_engine import NONE_OPTION, SelectionState, SyncEngine
from .utils.aggregator import AggregatedIndex, aggregate
from .mapping.heat_layer import build_overlay


class HeatmapPanel:
    """
    Public interface: a map panel with a per-entity heat overlay.
    """

    def __init__(self, surface: Optional[MapSurface] = None, base_tile_url: Optional[str] = None):
        self.surface = surface if surface is not None else InMemoryMapSurface()
        self._engine = SyncEngine(self.surface, base_tile_url=base_tile_url)

    def mount(
        self,
        series: Optional[Sequence[Any]] = None,
        options: Optional[PanelOptions] = None,
    ) -> SelectionState:
        return self._engine.mount(series, options)

    def update(self, **changes) -> SelectionState:
        """Apply a host update (``series=`` and/or ``options=``)."""
        return self._engine.update(**changes)

    def select(self, entity_id: str) -> SelectionState:
        return self._engine.select(entity_id)

    @property
    def current_entity_id(self) -> str:
        return self._engine.selection.current_entity_id

    @property
    def selection_options(self) -> List[str]:
        """Entries for the selection list, "None" first."""
        return self._engine.selection.options


__all__ = [
    "HeatmapPanel",
    "NONE_OPTION",
    "AggregatedIndex",
    "FeatureCollection",
    "PanelOptions",
    "Row",
    "aggregate",
    "build_overlay",
]
