# src/heatmap_panel/config/settings.py
import json
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.schemas import FeatureCollection, PanelOptions

# .env is at repo root
# This file: <repo>/src/heatmap_panel/config/settings.py (4 levels deep)
_ENV_FILE = Path(__file__).parent.parent.parent.parent / ".env"


class PanelSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_prefix="HEATMAP_",
        extra="ignore",  # Ignore extra environment variables
    )

    # Panel option defaults (used when the host supplies no options)
    DEFAULT_CENTER_LAT: float = Field(default=48.1239, description="Initial view latitude")
    DEFAULT_CENTER_LON: float = Field(default=11.60857, description="Initial view longitude")
    DEFAULT_TILE_URL: str = Field(
        default="", description="Optional XYZ overlay tile source; empty disables it"
    )
    DEFAULT_ZOOM_LEVEL: int = Field(default=18, description="Initial zoom level")
    GEOJSON_PATH: Optional[str] = Field(
        default=None, description="Region feature collection loaded into default options"
    )

    # Base raster layer shown beneath every other layer
    BASE_TILE_URL: str = Field(
        default="https://{1-4}.basemaps.cartocdn.com/rastertiles/voyager/{z}/{x}/{y}{r}.png",
        description="XYZ template for the base map",
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    def load_geojson(self) -> Optional[FeatureCollection]:
        """Read the feature collection named by GEOJSON_PATH, if any."""
        if not self.GEOJSON_PATH:
            return None
        with open(self.GEOJSON_PATH) as f:
            return FeatureCollection.from_geojson(json.load(f))

    def default_options(self) -> PanelOptions:
        """Build panel options from the configured defaults."""
        return PanelOptions(
            center_lat=self.DEFAULT_CENTER_LAT,
            center_lon=self.DEFAULT_CENTER_LON,
            tile_url=self.DEFAULT_TILE_URL,
            zoom_level=self.DEFAULT_ZOOM_LEVEL,
            geojson=self.load_geojson(),
        )


settings = PanelSettings()


def get_settings() -> PanelSettings:
    """Get the settings instance."""
    return settings
