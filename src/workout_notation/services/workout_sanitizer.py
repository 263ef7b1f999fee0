"""Shared utilities for sanitizing structured-editor input.

Volume row edits arrive as loosely typed values from UI fields ("12",
"", "abc", -5, NaN). Everything is coerced and clamped here before the
reconciler touches a set, so out-of-range input never propagates as NaN,
negative counts or zero-length rows.
"""

import logging
from typing import Any, Dict, Mapping, Union

from workout_notation.models import VolumeRowUpdate
from workout_notation.utils import clamp, to_float

logger = logging.getLogger(__name__)

TOTAL_SETS_RANGE = (1, 15)
REPS_RANGE = (1, 999)
WEIGHT_RANGE = (0, 9999)
DURATION_RANGE = (0.1, 999)  # minutes
DISTANCE_RANGE = (0.1, 999)

# completion sets have no row, so a row can never become one
_ROW_TYPES = {"sets-reps", "sets-reps-weight", "duration", "distance"}
_WEIGHT_UNITS = {"kg", "lb"}
_DISTANCE_UNITS = {"km", "mi", "m"}

# camelCase keys sent by the UI
_ALIASES = {
    "totalSets": "total_sets",
    "weightUnit": "weight_unit",
    "distanceUnit": "distance_unit",
}

_NUMERIC_BOUNDS = {
    "total_sets": TOTAL_SETS_RANGE,
    "reps": REPS_RANGE,
    "weight": WEIGHT_RANGE,
    "duration": DURATION_RANGE,
    "distance": DISTANCE_RANGE,
}
_INTEGER_FIELDS = {"total_sets", "reps"}


def sanitize_volume_row_updates(
    updates: Union[Mapping[str, Any], VolumeRowUpdate, None],
) -> Dict[str, Any]:
    """Coerce and clamp a partial volume row edit.

    - total_sets clamped to [1, 15], reps to [1, 999] (both rounded to int)
    - weight clamped to [0, 9999]
    - duration (minutes) and distance clamped to [0.1, 999]
    - non-numeric, NaN or infinite values are dropped, as are unknown or
      non-row volume types ("completion") and unknown units

    Args:
        updates: Raw field updates (dict from the UI or a VolumeRowUpdate)

    Returns:
        Dict of sanitized updates keyed by snake_case field name
    """
    if updates is None:
        return {}
    if isinstance(updates, VolumeRowUpdate):
        raw = updates.model_dump(exclude_none=True)
    else:
        raw = {_ALIASES.get(key, key): value for key, value in updates.items()}

    sanitized: Dict[str, Any] = {}

    for field, (low, high) in _NUMERIC_BOUNDS.items():
        if field not in raw:
            continue
        value = to_float(raw[field])
        if value is None:
            logger.debug(f"Dropping non-numeric {field} update: {raw[field]!r}")
            continue
        value = clamp(value, low, high)
        if field in _INTEGER_FIELDS:
            value = int(clamp(round(value), low, high))
        sanitized[field] = value

    volume_type = raw.get("type")
    if volume_type in _ROW_TYPES:
        sanitized["type"] = volume_type

    weight_unit = raw.get("weight_unit")
    if weight_unit in _WEIGHT_UNITS:
        sanitized["weight_unit"] = weight_unit

    distance_unit = raw.get("distance_unit")
    if distance_unit in _DISTANCE_UNITS:
        sanitized["distance_unit"] = distance_unit

    return sanitized
