"""Extract rows from the host data series."""

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from ..models.schemas import Row

logger = logging.getLogger(__name__)


def _get(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _first_field_values(frame: Any) -> List[Any]:
    """Return the raw values buffer of a frame's first field."""
    fields = _get(frame, "fields")
    if not fields:
        logger.warning("Data frame has no fields; no rows extracted")
        return []

    values = _get(fields[0], "values")
    # Host vectors wrap their items in a ``buffer`` attribute
    if isinstance(values, Mapping) or hasattr(values, "buffer"):
        values = _get(values, "buffer")

    return list(values or [])


def _placeholder_row(item: Any) -> Optional[Row]:
    """Empty row for a rejected item whose entity id can still be read."""
    if not isinstance(item, Mapping):
        return None
    raw_id = item.get("entity_id", item.get("hash_id"))
    if raw_id is None:
        return None
    try:
        return Row(entity_id=raw_id)
    except ValidationError:
        return None


def rows_from_series(series: Optional[Sequence[Any]]) -> List[Row]:
    """
    Parse the rows carried by the first frame of a data series.

    Rows that fail validation are skipped with a warning. When the entity id
    of a rejected row is still readable, an empty row for that id takes its
    place so a later row cannot claim the entity.

    Args:
        series: Host data series (list of frames), may be None or empty

    Returns:
        Parsed rows in buffer order
    """
    if not series:
        return []

    rows = []
    skipped = 0
    for i, item in enumerate(_first_field_values(series[0])):
        if isinstance(item, Row):
            rows.append(item)
            continue
        try:
            rows.append(Row.model_validate(item))
        except ValidationError as e:
            skipped += 1
            logger.warning(f"Skipping malformed row {i}: {e.error_count()} validation error(s)")
            placeholder = _placeholder_row(item)
            if placeholder is not None:
                rows.append(placeholder)

    logger.debug(f"Extracted {len(rows)} rows ({skipped} skipped)")
    return rows


def series_from_rows(rows: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Wrap raw row dicts in the single-frame series shape the host delivers."""
    return [{"fields": [{"values": {"buffer": list(rows)}}]}]
