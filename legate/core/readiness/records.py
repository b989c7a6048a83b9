"""Helpers for reading loosely-shaped estate records.

Rows arrive either from Supabase (snake_case columns) or from legacy
document-store exports (camelCase fields), so lookups accept both.
"""

import math
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Optional

from dateutil import parser as dateutil_parser


def record_value(record: Any, *names: str) -> Any:
    """Return the first present, non-None field among `names`."""
    for name in names:
        if isinstance(record, Mapping):
            value = record.get(name)
        else:
            value = getattr(record, name, None)
        if value is not None:
            return value
    return None


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a datetime or ISO string into an aware UTC datetime; None if invalid."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = dateutil_parser.isoparse(value)
        except (ValueError, OverflowError):
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (not banker's rounding)."""
    return int(math.floor(value + 0.5))
