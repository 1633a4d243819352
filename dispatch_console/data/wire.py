"""
Wire helpers shared by the logistics API records.

Timestamps travel as ISO-8601 strings and absence is ``null``; inside the
console they are timezone-aware ``datetime`` values in UTC.
"""

from datetime import datetime, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp from the API.

    ``None`` stays ``None``. A trailing ``Z`` is accepted and naive values are
    taken to be UTC. Empty strings are not a valid encoding of absence and
    raise ValueError.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            raise ValueError("Empty timestamp; absence must be null")
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def optional_int(value: Any) -> Optional[int]:
    if value is None or value == '':
        return None
    return int(value)
