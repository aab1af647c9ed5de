"""Render a heat overlay to GeoJSON from cached rows and region features (no map widget)."""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add src to path so heatmap_panel is importable without installing
sys.path.insert(0, str(Path(__file__).parent / "src"))

from heatmap_panel import HeatmapPanel, NONE_OPTION
from heatmap_panel.config.settings import settings
from heatmap_panel.mapping.surface import InMemoryMapSurface
from heatmap_panel.models.schemas import FeatureCollection
from heatmap_panel.utils.frames import series_from_rows

logger = logging.getLogger(__name__)


def parse_arguments():
    parser = argparse.ArgumentParser(
        description="Build the heat overlay for one entity and write it as GeoJSON"
    )
    parser.add_argument("rows", type=Path, help="JSON file with a list of data rows")
    parser.add_argument(
        "--geojson",
        "-g",
        type=Path,
        default=None,
        help="Region FeatureCollection (default: HEATMAP_GEOJSON_PATH)",
    )
    parser.add_argument(
        "--entity", "-e", type=str, default=None, help="Entity id to render"
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=Path("heat_overlay.geojson"),
        help="Output GeoJSON path (default: heat_overlay.geojson)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )
    return parser.parse_args()


def main() -> int:
    args = parse_arguments()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not args.rows.exists():
        print(f"❌ {args.rows} not found")
        return 1

    options = settings.default_options()
    if args.geojson:
        if not args.geojson.exists():
            print(f"❌ {args.geojson} not found")
            return 1
        with open(args.geojson) as f:
            geojson = FeatureCollection.from_geojson(json.load(f))
        options = options.model_copy(update={"geojson": geojson})

    if options.geojson is None:
        print("❌ No region features: pass --geojson or set HEATMAP_GEOJSON_PATH")
        return 1

    with open(args.rows) as f:
        rows = json.load(f)

    surface = InMemoryMapSurface()
    panel = HeatmapPanel(surface)
    selection = panel.mount(series_from_rows(rows), options)

    print(f"📦 Rows: {len(rows)}")
    print(f"🗺️ Region features: {len(options.geojson.features)}")
    print(f"👥 Entities: {len(selection.available_entity_ids)}")

    if not args.entity:
        for entity_id in selection.available_entity_ids:
            print(f"   {entity_id}")
        print("\nPass --entity to render one of them")
        return 0

    selection = panel.select(args.entity)
    if selection.current_entity_id == NONE_OPTION or not surface.heat_layers:
        print(f"❌ Entity {args.entity!r} has no data")
        return 1

    collection = surface.to_feature_collection()
    with open(args.output, "w") as f:
        json.dump(collection, f, indent=2)

    print(f"\n✅ Wrote {len(collection['features'])} regions to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
