"""Build the colored heat overlay for one entity's region values."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from shapely.errors import GEOSException
from shapely.geometry import Polygon, mapping

from ..models.schemas import GeoFeature
from .geometry_utils import get_centroid, reproject, to_polygon
from .layers import HEAT_LAYER_Z_INDEX
from .styles import HeatStyle, style_for_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StyledGeometry:
    """A region polygon in map coordinates with its heat styling."""

    region_id: str
    geometry: Polygon
    value: float
    style: HeatStyle

    @property
    def color(self) -> str:
        return self.style.fill_color

    @property
    def label(self) -> str:
        return self.style.label

    def to_geojson_feature(self) -> Dict[str, Any]:
        properties = self.style.to_simplestyle()
        properties.update(
            {
                "id": self.region_id,
                "value": self.value,
                "label_anchor": list(get_centroid(self.geometry)),
            }
        )
        return {
            "type": "Feature",
            "properties": properties,
            "geometry": mapping(self.geometry),
        }


def build_overlay(
    region_values: Mapping[str, Optional[float]], features: Sequence[GeoFeature]
) -> List[StyledGeometry]:
    """
    Build styled, reprojected polygons for every feature with a value.

    Regions without a matching feature and features without a value are left
    out, as are regions whose value is null. A feature whose coordinates
    cannot form a polygon (e.g. a ring of fewer than four positions) is
    skipped rather than drawn degenerate.

    Args:
        region_values: region key -> normalized value for one entity
        features: Static region features in lon/lat

    Returns:
        Styled geometries in feature order
    """
    styled = []

    for feature in features:
        region_id = feature.id
        if region_id is None or region_id not in region_values:
            continue

        value = region_values[region_id]
        if value is None:
            continue

        try:
            polygon = reproject(to_polygon(feature.geometry_kind, feature.coordinates))
        except (ValueError, IndexError, GEOSException) as e:
            logger.warning(
                f"Skipping region {region_id}: geometry cannot form a valid polygon, "
                f"region is not drawn ({e})"
            )
            continue

        styled.append(
            StyledGeometry(
                region_id=region_id,
                geometry=polygon,
                value=value,
                style=style_for_value(value),
            )
        )

    logger.debug(f"Built {len(styled)} heat regions from {len(region_values)} values")
    return styled


@dataclass(frozen=True, eq=False)
class HeatLayer:
    """The rendered overlay for the selected entity."""

    entity_id: str
    geometries: Tuple[StyledGeometry, ...]
    z_index: int = HEAT_LAYER_Z_INDEX

    def to_geojson_features(self) -> List[Dict[str, Any]]:
        return [g.to_geojson_feature() for g in self.geometries]
