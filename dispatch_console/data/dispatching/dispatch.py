from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from dispatch_console.data.wire import format_datetime, optional_int, parse_datetime


class DispatchStatus(str, Enum):
    """Dispatch status tokens exactly as the logistics API transmits them."""
    PENDING = 'pending'
    DISPATCHED = 'dispatched'
    IN_TRANSIT = 'in_transit'
    ARRIVED = 'arrived'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Dispatch:
    """
    Assignment and execution record for delivering a single booking.

    Records are immutable; status changes produce a new value via
    ``with_changes`` so nothing is mutated before the API confirms it.
    """
    dispatch_id: int
    booking_id: int
    status: DispatchStatus = DispatchStatus.PENDING
    dispatch_time: Optional[datetime] = None
    arrival_time: Optional[datetime] = None
    assigned_driver: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> 'Dispatch':
        return cls(
            dispatch_id=int(payload['dispatch_id']),
            booking_id=int(payload['booking_id']),
            status=DispatchStatus(payload['status']),
            dispatch_time=parse_datetime(payload.get('dispatch_time')),
            arrival_time=parse_datetime(payload.get('arrival_time')),
            assigned_driver=optional_int(payload.get('assigned_driver')),
            created_at=parse_datetime(payload.get('created_at')),
            updated_at=parse_datetime(payload.get('updated_at')),
        )

    def to_api(self) -> Dict[str, Any]:
        return {
            'dispatch_id': self.dispatch_id,
            'booking_id': self.booking_id,
            'assigned_driver': self.assigned_driver,
            'dispatch_time': format_datetime(self.dispatch_time),
            'arrival_time': format_datetime(self.arrival_time),
            'status': self.status.value,
            'created_at': format_datetime(self.created_at),
            'updated_at': format_datetime(self.updated_at),
        }

    def with_changes(self, **changes) -> 'Dispatch':
        return replace(self, **changes)
