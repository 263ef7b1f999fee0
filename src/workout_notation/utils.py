"""Utility functions."""
import math
import uuid
from typing import Any, Optional


def to_int(s: Optional[str]) -> Optional[int]:
    """Convert string to int, returning None if conversion fails."""
    try:
        return int(s) if s is not None else None
    except Exception:
        return None


def to_float(value: Any) -> Optional[float]:
    """Convert a raw UI/text value to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def format_number(value: float) -> str:
    """Render 10.0 as '10' and 22.5 as '22.5'."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def new_volume_row_id() -> str:
    """Generate an opaque grouping key for a volume row."""
    return f"volume-{uuid.uuid4().hex[:12]}"


def new_exercise_id() -> str:
    """Generate an id for an exercise created from text."""
    return f"exercise_{uuid.uuid4().hex[:12]}"
