# src/heatmap_panel/models/schemas.py
import logging
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)

# Region ids end up as integer keys, so NaN/inf can never be valid
RegionId = Annotated[float, Field(allow_inf_nan=False)]
Position = List[float]


def id_text(raw: Any) -> str:
    """Render a raw id as text; integral floats lose their fraction (``10.0`` -> ``"10"``)."""
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw)


class Row(BaseModel):
    """One ingested record: an entity and its per-region values.

    ``region_ids`` and ``values`` are parallel arrays. Index ``i`` of one pairs
    with index ``i`` of the other; callers must supply equal lengths.

    Accepts both the flat shape and the wire shape delivered by the data feed::

        {"hash_id": "abc", "grid": {"polygon": [1, 2], "color": [0.1, 0.9]}}
    """

    model_config = ConfigDict(frozen=True)

    entity_id: str = Field(validation_alias=AliasChoices("entity_id", "hash_id"))
    region_ids: List[RegionId] = []
    values: List[Optional[float]] = []  # null values pair through and are never drawn

    @model_validator(mode="before")
    @classmethod
    def _flatten_grid(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("grid"), dict):
            grid = data["grid"]
            data = {
                **data,
                "region_ids": grid.get("polygon", []),
                "values": grid.get("color", []),
            }
        return data

    @field_validator("entity_id", mode="before")
    @classmethod
    def _stringify_entity_id(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return id_text(value)
        return value


class PolygonGeometry(BaseModel):
    type: Literal["Polygon"]
    coordinates: List[List[Position]]


class LineStringGeometry(BaseModel):
    type: Literal["LineString"]
    coordinates: List[Position]


class GeoFeature(BaseModel):
    """A static region geometry keyed by ``properties.id``."""

    type: str = "Feature"
    properties: Dict[str, Any] = {}
    geometry: Union[PolygonGeometry, LineStringGeometry] = Field(discriminator="type")

    @field_validator("properties", mode="before")
    @classmethod
    def _null_properties(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def id(self) -> Optional[str]:
        raw = (self.properties or {}).get("id")
        if raw is None or raw == "":
            return None
        return id_text(raw)

    @property
    def geometry_kind(self) -> Literal["Polygon", "LineString"]:
        return self.geometry.type

    @property
    def coordinates(self) -> list:
        return self.geometry.coordinates


class FeatureCollection(BaseModel):
    type: str = "FeatureCollection"
    features: List[GeoFeature] = []

    @classmethod
    def from_geojson(cls, data: Dict[str, Any]) -> "FeatureCollection":
        """
        Build a collection from raw GeoJSON, keeping only usable features.

        Features with an unsupported geometry type or malformed coordinates
        are dropped with a warning instead of failing the whole collection.

        Args:
            data: GeoJSON FeatureCollection dict

        Returns:
            FeatureCollection with the valid Polygon/LineString features
        """
        features = []
        for i, raw in enumerate(data.get("features") or []):
            try:
                features.append(GeoFeature.model_validate(raw))
            except ValidationError as e:
                logger.warning(
                    f"Skipping feature {i}: {e.error_count()} validation error(s)"
                )
        return cls(type=data.get("type", "FeatureCollection"), features=features)


class PanelOptions(BaseModel):
    """Host-supplied panel configuration."""

    model_config = ConfigDict(frozen=True)

    center_lat: float = 48.1239
    center_lon: float = 11.60857
    tile_url: str = ""  # empty string disables the overlay tile layer
    zoom_level: int = 18
    geojson: Optional[FeatureCollection] = None

    @field_validator("geojson", mode="before")
    @classmethod
    def _parse_geojson(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return FeatureCollection.from_geojson(value)
        return value
