"""
Base Parser

Shared regex patterns and helpers for the notation parsers.
"""

import re
import logging
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


class BaseNotationParser:
    """Base class holding the notation's lexical patterns"""

    NUMBER = r'[0-9]+(?:\.[0-9]+)?'

    # Tail after a volume spec: only '+' and whitespace
    TAIL = r'(?P<tail>[+\s]*)'

    # "- Bench Press", "-- Plank +", "- Squat #id:exercise_1"
    HEADER_PATTERN = re.compile(r'^-+\s+(?P<header>.*)$')
    ID_TOKEN_PATTERN = re.compile(r'\s*#id:(?P<id>\S+)\s*$')
    HEADER_DONE_PATTERN = re.compile(r'\s*\+\s*$')

    WEIGHT_PATTERN = re.compile(r'^(?P<value>[0-9]+(?:\.[0-9]+)?)\s*(?P<unit>kg|lb)$')

    def __init__(self):
        self.warnings: List[str] = []

    @staticmethod
    def count_plus(tail: Optional[str]) -> int:
        """Count '+' characters, ignoring any interleaved whitespace."""
        if not tail:
            return 0
        return tail.count('+')

    def parse_weight(self, weight_str: Optional[str]) -> Tuple[Optional[str], Optional[float], Optional[str]]:
        """
        Parse a weight like '10kg' or '22.5 lb'.

        Returns:
            Tuple of (normalized_weight, value, unit)
        """
        if not weight_str:
            return None, None, None

        compact = "".join(weight_str.split())
        match = self.WEIGHT_PATTERN.match(compact)
        if not match:
            return None, None, None
        return compact, float(match.group('value')), match.group('unit')

    @staticmethod
    def time_to_seconds(hours: Optional[int], minutes: Optional[int]) -> int:
        return (hours or 0) * 3600 + (minutes or 0) * 60

    def split_header(self, header: str) -> Tuple[str, bool, Optional[str]]:
        """
        Split a raw header into (name, done_marker, token_id).

        The identity token is stripped first, then a trailing '+'.
        """
        token_id = None
        token_match = self.ID_TOKEN_PATTERN.search(header)
        if token_match:
            token_id = token_match.group('id')
            header = header[:token_match.start()]

        done = False
        if self.HEADER_DONE_PATTERN.search(header):
            done = True
            header = self.HEADER_DONE_PATTERN.sub('', header)

        return self.normalize_exercise_name(header), done, token_id

    def normalize_exercise_name(self, name: str) -> str:
        """Collapse internal whitespace"""
        return " ".join(name.split())

    def add_warning(self, warning: str):
        """Add a warning message"""
        self.warnings.append(warning)
        logger.warning(f"Parser warning: {warning}")
