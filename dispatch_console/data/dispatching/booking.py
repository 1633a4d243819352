from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from dispatch_console.data.wire import format_datetime, optional_int, parse_datetime


class ServiceType(str, Enum):
    CARGO = 'cargo'
    PASSENGER = 'passenger'
    PUBLIC = 'public'


class BookingStatus(str, Enum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


@dataclass(frozen=True)
class Booking:
    """Customer transport request; read-only from the console's side."""
    booking_id: int
    source: str
    destination: str
    service_type: ServiceType
    price: float
    booking_status: BookingStatus
    user_id: Optional[int] = None
    truck_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> 'Booking':
        return cls(
            booking_id=int(payload['booking_id']),
            source=payload.get('source', ''),
            destination=payload.get('destination', ''),
            service_type=ServiceType(payload['service_type']),
            price=float(payload.get('price') or 0),
            booking_status=BookingStatus(payload['booking_status']),
            user_id=optional_int(payload.get('user_id')),
            truck_id=optional_int(payload.get('truck_id')),
            created_at=parse_datetime(payload.get('created_at')),
            updated_at=parse_datetime(payload.get('updated_at')),
        )

    def to_api(self) -> Dict[str, Any]:
        return {
            'booking_id': self.booking_id,
            'source': self.source,
            'destination': self.destination,
            'service_type': self.service_type.value,
            'price': self.price,
            'user_id': self.user_id,
            'truck_id': self.truck_id,
            'booking_status': self.booking_status.value,
            'created_at': format_datetime(self.created_at),
            'updated_at': format_datetime(self.updated_at),
        }
