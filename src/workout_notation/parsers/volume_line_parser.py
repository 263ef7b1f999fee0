"""
Volume Line Parser

Classifies a single notation line as a volume spec and extracts its data:

- sets:      "5x10", "5x10x10kg ++++ +++"
- distance:  "10km + + + +", "400m", "3.1mi"
- time:      "1h30m", "45min ++", "2h"

Anything else is a cue and is reported as unmatched, never as an error.
"""

import re
import logging
from typing import Optional

from .base import BaseNotationParser
from .models import VolumeLineMatch

logger = logging.getLogger(__name__)


class VolumeLineParser(BaseNotationParser):
    """Parser for one trimmed line of workout notation"""

    SETS_PATTERN = re.compile(
        r'^(?P<sets>\d+)\s*[x×]\s*(?P<reps>\d+)'  # Sets x Reps
        r'(?:\s*[x×]\s*(?P<weight>' + BaseNotationParser.NUMBER + r'\s*(?:kg|lb)))?'  # Optional weight
        + BaseNotationParser.TAIL + r'$',
        re.IGNORECASE
    )

    DISTANCE_PATTERN = re.compile(
        r'^(?P<value>' + BaseNotationParser.NUMBER + r')\s*(?P<unit>km|mi|m)'
        + BaseNotationParser.TAIL + r'$',
        re.IGNORECASE
    )

    # 'min' is tried before 'm' so "15min" is minutes, not "15m" + "in".
    # The only whitespace between hours and minutes belongs to the minutes
    # group, so a failing line is rejected in linear time.
    TIME_PATTERN = re.compile(
        r'^(?:(?P<hours>\d+)\s*h)?(?:\s*(?P<minutes>\d+)\s*(?:min|m))?'
        + BaseNotationParser.TAIL + r'$',
        re.IGNORECASE
    )

    def parse_line(self, line: str) -> VolumeLineMatch:
        """Classify a line, trying sets, distance, then time."""
        line = (line or "").strip()
        if not line:
            return VolumeLineMatch(matched=False, raw=line)

        for attempt in (self._match_sets, self._match_distance, self._match_time):
            result = attempt(line)
            if result is not None:
                return result

        return VolumeLineMatch(matched=False, raw=line)

    def _match_sets(self, line: str) -> Optional[VolumeLineMatch]:
        match = self.SETS_PATTERN.match(line)
        if not match:
            return None

        weight, weight_value, weight_unit = self.parse_weight(
            match.group('weight').lower() if match.group('weight') else None
        )

        return VolumeLineMatch(
            matched=True,
            kind="sets",
            raw=line,
            sets_planned=int(match.group('sets')),
            reps=int(match.group('reps')),
            weight=weight,
            weight_value=weight_value,
            weight_unit=weight_unit,
            plus_count=self.count_plus(match.group('tail')),
        )

    def _match_distance(self, line: str) -> Optional[VolumeLineMatch]:
        match = self.DISTANCE_PATTERN.match(line)
        if not match:
            return None

        return VolumeLineMatch(
            matched=True,
            kind="distance",
            raw=line,
            value=float(match.group('value')),
            unit=match.group('unit').lower(),
            plus_count=self.count_plus(match.group('tail')),
        )

    def _match_time(self, line: str) -> Optional[VolumeLineMatch]:
        match = self.TIME_PATTERN.match(line)
        if not match:
            return None

        hours = int(match.group('hours')) if match.group('hours') else None
        minutes = int(match.group('minutes')) if match.group('minutes') else None
        if hours is None and minutes is None:
            # Only '+' and whitespace: not a volume spec
            return None

        time_value = ""
        if hours is not None:
            time_value += f"{hours}h"
        if minutes is not None:
            time_value += f"{minutes}m"

        return VolumeLineMatch(
            matched=True,
            kind="time",
            raw=line,
            hours=hours,
            minutes=minutes,
            time_value=time_value,
            duration_seconds=self.time_to_seconds(hours, minutes),
            plus_count=self.count_plus(match.group('tail')),
        )


_default_parser = VolumeLineParser()


def parse_volume_line(line: str) -> VolumeLineMatch:
    """Module-level convenience wrapper around VolumeLineParser.parse_line."""
    return _default_parser.parse_line(line)
