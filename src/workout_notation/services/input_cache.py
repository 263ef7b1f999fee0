"""Uncommitted field edits from the structured editor.

While a field is being edited its raw text wins over the value derived from
the workout, until the edit is committed (blur) or discarded.
"""

import logging
from typing import Callable, Dict, Literal, NamedTuple, Optional

from workout_notation.utils import format_number, to_float

logger = logging.getLogger(__name__)

EditScope = Literal["set", "row"]


class EditKey(NamedTuple):
    exercise_id: str
    index: int  # set index for scope="set", row index for scope="row"
    field: str
    scope: EditScope = "set"


OnUpdate = Callable[[EditKey, float], None]


class LocalEditCache:
    """Map of EditKey -> raw input string."""

    def __init__(self):
        self._values: Dict[EditKey, str] = {}

    def __contains__(self, key: EditKey) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def display_value(self, key: EditKey, derived: Optional[float]) -> str:
        """Raw local edit if one is pending, otherwise the derived value."""
        if key in self._values:
            return self._values[key]
        if derived is None:
            return ""
        return format_number(derived)

    def edit(self, key: EditKey, raw: str, on_update: Optional[OnUpdate] = None) -> None:
        """Record a keystroke; forward it only if it is a positive number."""
        self._values[key] = raw
        value = to_float(raw)
        if value is not None and value > 0 and on_update is not None:
            on_update(key, value)

    def commit(self, key: EditKey, default: float, on_update: Optional[OnUpdate] = None) -> float:
        """
        Settle a field on blur.

        Invalid or non-positive input reverts to default, which is forwarded.
        The local entry is then dropped so the derived value shows again.

        Returns:
            The value now in effect
        """
        raw = self._values.pop(key, None)
        value = to_float(raw)
        if value is None or value <= 0:
            logger.debug(f"Reverting {key} from {raw!r} to {default}")
            if on_update is not None:
                on_update(key, default)
            return default
        return value

    def discard(self, key: EditKey) -> None:
        self._values.pop(key, None)

    def clear(self) -> None:
        self._values.clear()
