from .aggregator import AggregatedIndex, RegionValueMap, aggregate, region_key
from .frames import rows_from_series, series_from_rows

__all__ = [
    "AggregatedIndex",
    "RegionValueMap",
    "aggregate",
    "region_key",
    "rows_from_series",
    "series_from_rows",
]
