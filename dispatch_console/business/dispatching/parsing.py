"""
Boundary parsing for console input

Form fields and query strings arrive as loose text. They are parsed here into
the closed status enum and checked integer ids before they reach the state
machine; anything malformed raises ValidationError.
"""

from datetime import datetime
from typing import Any, Optional, Tuple

from dispatch_console.business.dispatching.errors import ValidationError
from dispatch_console.data.api.client import MAX_PAGE_LIMIT, clamp_page
from dispatch_console.data.dispatching import DispatchStatus
from dispatch_console.data.wire import parse_datetime

TIMESTAMP_FIELDS = ('dispatch_time', 'arrival_time')


def parse_status(value: Any, field: str = 'status') -> DispatchStatus:
    if isinstance(value, DispatchStatus):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    try:
        return DispatchStatus(value.strip().lower())
    except ValueError:
        options = ', '.join(s.value for s in DispatchStatus)
        raise ValidationError(f"Unknown {field} '{value}'. Expected one of: {options}", field=field)


def parse_id(value: Any, field: str = 'id') -> int:
    """Parse a positive integer id from an int or a decimal string."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a positive integer", field=field)
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.strip().isdecimal():
        # not isdigit(): superscripts like '²' pass it but int() rejects them
        parsed = int(value.strip())
    else:
        raise ValidationError(f"{field} must be a positive integer", field=field)
    if parsed <= 0:
        raise ValidationError(f"{field} must be greater than 0", field=field)
    return parsed


def parse_timestamp(value: Any, field: str) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return parse_datetime(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an ISO-8601 timestamp", field=field)


def parse_timestamp_field(value: Any) -> str:
    if value not in TIMESTAMP_FIELDS:
        raise ValidationError(
            f"field must be one of: {', '.join(TIMESTAMP_FIELDS)}",
            field='field',
        )
    return value


def _parse_int(value: Any, field: str, default: int) -> int:
    if value is None or value == '':
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer", field=field)


def parse_page(skip: Any = None, limit: Any = None) -> Tuple[int, int]:
    page = clamp_page(_parse_int(skip, 'skip', 0), _parse_int(limit, 'limit', MAX_PAGE_LIMIT))
    return page['skip'], page['limit']
