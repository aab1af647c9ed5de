"""Keep the map overlay in step with the panel's data and options.

Decision logic lives in two pure functions, ``mount`` and ``reconcile``, which
turn (previous state, incoming inputs) into a new state plus a list of
commands. ``SyncEngine`` owns the map surface and the live layers and is the
only thing that executes those commands.

``reconcile`` evaluates four independent rules on every update, in order:

1. data series reference changed -> re-aggregate, maybe reset the selection,
   rebuild the overlay
2. selected entity changed -> rebuild the overlay
3. tile URL changed -> swap the auxiliary tile layer
4. zoom / center changed -> set zoom, animate to the new center
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from ..config.settings import settings
from ..mapping.geometry_utils import project_point
from ..mapping.heat_layer import HeatLayer, StyledGeometry, build_overlay
from ..mapping.layers import BASE_LAYER_Z_INDEX, HoverInteraction, TileLayer
from ..mapping.surface import MapSurface
from ..models.schemas import FeatureCollection, PanelOptions
from ..utils.aggregator import AggregatedIndex, aggregate
from ..utils.frames import rows_from_series

logger = logging.getLogger(__name__)

NONE_OPTION = "None"  # selection sentinel: no entity selected
CENTER_ANIMATION_MS = 2000


# =============================================================================
# State
# =============================================================================


@dataclass(frozen=True)
class SelectionState:
    current_entity_id: str = NONE_OPTION
    available_entity_ids: Tuple[str, ...] = ()

    @property
    def options(self) -> List[str]:
        """Entries for the selection list, sentinel first."""
        return [NONE_OPTION, *self.available_entity_ids]


@dataclass(frozen=True)
class PanelInputs:
    """What the host hands the panel on each update.

    ``series`` is compared by identity: a new reference means new data.
    """

    series: Optional[Sequence[Any]]
    options: PanelOptions = field(default_factory=PanelOptions)
    current_entity_id: str = NONE_OPTION


@dataclass(frozen=True)
class PanelState:
    inputs: PanelInputs
    selection: SelectionState
    index: AggregatedIndex


# =============================================================================
# Commands
# =============================================================================


@dataclass(frozen=True)
class SetView:
    center: Tuple[float, float]
    zoom: int


@dataclass(frozen=True)
class InstallBaseLayer:
    url: str


@dataclass(frozen=True)
class InstallHoverInteraction:
    pass


@dataclass(frozen=True)
class ReleaseOverlay:
    pass


@dataclass(frozen=True)
class InstallOverlay:
    entity_id: str
    geometries: Tuple[StyledGeometry, ...]


@dataclass(frozen=True)
class ReleaseTileLayer:
    pass


@dataclass(frozen=True)
class InstallTileLayer:
    url: str


@dataclass(frozen=True)
class SetZoom:
    zoom: int


@dataclass(frozen=True)
class AnimateCenter:
    center: Tuple[float, float]
    duration_ms: int = CENTER_ANIMATION_MS


Command = Union[
    SetView,
    InstallBaseLayer,
    InstallHoverInteraction,
    ReleaseOverlay,
    InstallOverlay,
    ReleaseTileLayer,
    InstallTileLayer,
    SetZoom,
    AnimateCenter,
]


@dataclass(frozen=True)
class Transition:
    state: PanelState
    commands: Tuple[Command, ...]


# =============================================================================
# Reducer
# =============================================================================


def _overlay_for(
    index: AggregatedIndex, entity_id: str, geojson: FeatureCollection
) -> Optional[InstallOverlay]:
    region_values = index.get(entity_id)
    if region_values is None:
        logger.debug(f"No data for entity {entity_id!r}; overlay not built")
        return None
    geometries = build_overlay(region_values, geojson.features)
    return InstallOverlay(entity_id=entity_id, geometries=tuple(geometries))


def _index_series(series: Sequence[Any]) -> AggregatedIndex:
    index = aggregate(rows_from_series(series))
    logger.info(f"Aggregated data for {len(index)} entities")
    return index


def mount(inputs: PanelInputs, base_tile_url: str) -> Transition:
    """
    Initial commands for a fresh map surface.

    The selection always starts at the sentinel, so no overlay is built yet;
    the available entity ids are published when data and a feature
    collection are both present.

    Args:
        inputs: First inputs from the host (its selection is ignored)
        base_tile_url: XYZ template for the base raster layer

    Returns:
        Transition with the initial state and setup commands
    """
    options = inputs.options
    commands: List[Command] = [
        SetView(center=project_point(options.center_lon, options.center_lat), zoom=options.zoom_level),
        InstallBaseLayer(url=base_tile_url),
    ]
    if options.tile_url:
        commands.append(InstallTileLayer(url=options.tile_url))

    index = AggregatedIndex()
    if inputs.series and options.geojson is not None:
        index = _index_series(inputs.series)

    commands.append(InstallHoverInteraction())

    state = PanelState(
        inputs=replace(inputs, current_entity_id=NONE_OPTION),
        selection=SelectionState(available_entity_ids=index.entity_ids),
        index=index,
    )
    return Transition(state=state, commands=tuple(commands))


def reconcile(previous: PanelState, incoming: PanelInputs) -> Transition:
    """
    Compare the previous state with new inputs and decide what to do.

    Pure: the only work done here is aggregation and overlay geometry
    construction, both side-effect free. Every overlay install is preceded by
    a release so at most one overlay can exist.

    Args:
        previous: State produced by the last mount/reconcile
        incoming: Inputs for this update cycle

    Returns:
        Transition with the new state and the commands to execute in order
    """
    commands: List[Command] = []
    options = incoming.options
    old_options = previous.inputs.options
    index = previous.index
    available = previous.selection.available_entity_ids
    current = incoming.current_entity_id

    # 1. Data series
    if incoming.series is not previous.inputs.series:
        commands.append(ReleaseOverlay())
        if not incoming.series:
            logger.info("Data series is empty; selection reset")
            index, available, current = AggregatedIndex(), (), NONE_OPTION
        elif options.geojson is not None:
            index = _index_series(incoming.series)
            available = index.entity_ids
            if current != NONE_OPTION:
                if current not in index:
                    logger.info(f"Entity {current!r} no longer present; selection reset")
                    current = NONE_OPTION
                else:
                    install = _overlay_for(index, current, options.geojson)
                    if install is not None:
                        commands.append(install)

    # 2. Selection, compared against what rule 1 resolved
    if current != previous.selection.current_entity_id:
        commands.append(ReleaseOverlay())
        if options.geojson is not None and current != NONE_OPTION:
            install = _overlay_for(index, current, options.geojson)
            if install is not None:
                commands.append(install)

    # 3. Auxiliary tile layer
    if options.tile_url != old_options.tile_url:
        commands.append(ReleaseTileLayer())
        if options.tile_url:
            commands.append(InstallTileLayer(url=options.tile_url))

    # 4. View
    if options.zoom_level != old_options.zoom_level:
        commands.append(SetZoom(zoom=options.zoom_level))
    if (options.center_lat, options.center_lon) != (old_options.center_lat, old_options.center_lon):
        commands.append(AnimateCenter(center=project_point(options.center_lon, options.center_lat)))

    state = PanelState(
        inputs=replace(incoming, current_entity_id=current),
        selection=SelectionState(current_entity_id=current, available_entity_ids=available),
        index=index,
    )
    return Transition(state=state, commands=tuple(commands))


# =============================================================================
# Owning context
# =============================================================================


_KEEP = object()


class SyncEngine:
    """
    Owns the map surface and the live layers.

    Holds at most one heat overlay and one auxiliary tile layer; nothing else
    mutates the surface.
    """

    def __init__(self, surface: MapSurface, base_tile_url: Optional[str] = None):
        """
        Initialize the engine.

        Args:
            surface: Map surface to drive
            base_tile_url: Base raster layer template (defaults to settings)
        """
        self.surface = surface
        self.base_tile_url = base_tile_url or settings.BASE_TILE_URL
        self.state: Optional[PanelState] = None
        self.base_layer: Optional[TileLayer] = None
        self.tile_layer: Optional[TileLayer] = None
        self.overlay: Optional[HeatLayer] = None

        self._handlers: Dict[type, Callable[[Any], None]] = {
            SetView: self._set_view,
            InstallBaseLayer: self._install_base_layer,
            InstallHoverInteraction: self._install_hover_interaction,
            ReleaseOverlay: self._release_overlay,
            InstallOverlay: self._install_overlay,
            ReleaseTileLayer: self._release_tile_layer,
            InstallTileLayer: self._install_tile_layer,
            SetZoom: self._set_zoom,
            AnimateCenter: self._animate_center,
        }

    @property
    def selection(self) -> SelectionState:
        if self.state is None:
            return SelectionState()
        return self.state.selection

    def mount(
        self, series: Optional[Sequence[Any]], options: Optional[PanelOptions] = None
    ) -> SelectionState:
        """Set up the surface for the first inputs."""
        if self.state is not None:
            raise RuntimeError("SyncEngine is already mounted")
        if options is None:
            options = settings.default_options()
        inputs = PanelInputs(series=series, options=options)
        return self._apply(mount(inputs, self.base_tile_url))

    def update(
        self, *, series: Any = _KEEP, options: Optional[PanelOptions] = None
    ) -> SelectionState:
        """
        Handle a host update.

        Args:
            series: New data series (omit to keep the current reference)
            options: New panel options (omit to keep the current ones)

        Returns:
            Selection state after the update
        """
        previous = self._require_state()
        incoming = replace(
            previous.inputs,
            series=previous.inputs.series if series is _KEEP else series,
            options=previous.inputs.options if options is None else options,
        )
        return self._apply(reconcile(previous, incoming))

    def select(self, entity_id: str) -> SelectionState:
        """Handle a selection-list change."""
        previous = self._require_state()
        incoming = replace(previous.inputs, current_entity_id=entity_id)
        return self._apply(reconcile(previous, incoming))

    def _require_state(self) -> PanelState:
        if self.state is None:
            raise RuntimeError("SyncEngine.mount() must be called before updates")
        return self.state

    def _apply(self, transition: Transition) -> SelectionState:
        for command in transition.commands:
            self._handlers[type(command)](command)
        self.state = transition.state
        return transition.state.selection

    # ── command handlers ─────────────────────────────────────────────

    def _set_view(self, command: SetView) -> None:
        self.surface.set_view(command.center, command.zoom)

    def _install_base_layer(self, command: InstallBaseLayer) -> None:
        self.base_layer = TileLayer(url=command.url, z_index=BASE_LAYER_Z_INDEX)
        self.surface.add_layer(self.base_layer)

    def _install_hover_interaction(self, command: InstallHoverInteraction) -> None:
        self.surface.add_interaction(HoverInteraction())

    def _release_overlay(self, command: Optional[ReleaseOverlay] = None) -> None:
        if self.overlay is not None:
            self.surface.remove_layer(self.overlay)
            self.overlay = None

    def _install_overlay(self, command: InstallOverlay) -> None:
        self._release_overlay()
        self.overlay = HeatLayer(entity_id=command.entity_id, geometries=command.geometries)
        self.surface.add_layer(self.overlay)
        logger.info(f"Heat overlay for {command.entity_id!r}: {len(command.geometries)} regions")

    def _release_tile_layer(self, command: Optional[ReleaseTileLayer] = None) -> None:
        if self.tile_layer is not None:
            self.surface.remove_layer(self.tile_layer)
            self.tile_layer = None

    def _install_tile_layer(self, command: InstallTileLayer) -> None:
        self._release_tile_layer()
        self.tile_layer = TileLayer(url=command.url)
        self.surface.add_layer(self.tile_layer)

    def _set_zoom(self, command: SetZoom) -> None:
        self.surface.set_zoom(command.zoom)

    def _animate_center(self, command: AnimateCenter) -> None:
        self.surface.animate(command.center, command.duration_ms)
