"""Aggregate flat data rows into a per-entity region/value index.

The index is keyed first by entity id, then by region key. A region key is the
decimal string of the floor of the numeric region id (``2.7`` -> ``"2"``,
``-0.5`` -> ``"-1"``), so it always names an integer region, never an
arbitrary identifier.
"""

import math
from collections.abc import Mapping
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Optional, Tuple

from ..models.schemas import Row

RegionValueMap = Mapping  # region key -> value (None when the feed sent null), read-only


def region_key(region_id: float) -> str:
    """Normalize a numeric region id to its integer string key."""
    return str(math.floor(region_id))


class AggregatedIndex(Mapping):
    """Read-only ``entity_id -> region key -> value`` container.

    Iteration order is the order entities were first seen in the input rows.
    """

    def __init__(self, entries: Optional[Dict[str, Dict[str, Optional[float]]]] = None):
        self._entries = {
            entity_id: MappingProxyType(dict(region_values))
            for entity_id, region_values in (entries or {}).items()
        }

    def __getitem__(self, entity_id: str) -> RegionValueMap:
        return self._entries[entity_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"AggregatedIndex({len(self)} entities)"

    @property
    def entity_ids(self) -> Tuple[str, ...]:
        return tuple(self._entries)


def aggregate(rows: Iterable[Row]) -> AggregatedIndex:
    """
    Build the entity/region index from rows.

    Only the first row seen for an entity id populates its region map; later
    rows for the same id are skipped entirely. Within a row, region ids and
    values are paired by position and any excess elements of the longer
    array are dropped. Null values are kept so the region stays claimed by
    this row.

    Args:
        rows: Rows in arrival order

    Returns:
        AggregatedIndex (empty for empty input)
    """
    per_id: Dict[str, Dict[str, Optional[float]]] = {}

    for row in rows:
        if row.entity_id in per_id:
            continue
        per_id[row.entity_id] = {
            region_key(region_id): value
            for region_id, value in zip(row.region_ids, row.values)
        }

    return AggregatedIndex(per_id)
