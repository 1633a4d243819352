from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from dispatch_console.data.wire import format_datetime, optional_int, parse_datetime


@dataclass(frozen=True)
class Driver:
    """
    Fleet driver as returned by the logistics API.

    ``id`` is the record id used in API paths and in ``Dispatch.assigned_driver``;
    ``employee_id`` is the human-facing identifier shown in the console.
    """
    id: int
    employee_id: str
    is_available: bool
    status: str = ''
    user_id: Optional[int] = None
    license_number: str = ''
    license_type: str = ''
    license_expiry: Optional[str] = None
    experience_years: int = 0
    rating: float = 0.0
    total_trips: int = 0
    assigned_truck_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> 'Driver':
        return cls(
            id=int(payload['id']),
            employee_id=str(payload.get('employee_id', '')),
            is_available=bool(payload.get('is_available', False)),
            status=payload.get('status') or '',
            user_id=optional_int(payload.get('user_id')),
            license_number=payload.get('license_number') or '',
            license_type=payload.get('license_type') or '',
            license_expiry=payload.get('license_expiry'),
            experience_years=int(payload.get('experience_years') or 0),
            rating=float(payload.get('rating') or 0),
            total_trips=int(payload.get('total_trips') or 0),
            assigned_truck_id=optional_int(payload.get('assigned_truck_id')),
            created_at=parse_datetime(payload.get('created_at')),
            updated_at=parse_datetime(payload.get('updated_at')),
        )

    def to_api(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'employee_id': self.employee_id,
            'user_id': self.user_id,
            'license_number': self.license_number,
            'license_type': self.license_type,
            'license_expiry': self.license_expiry,
            'experience_years': self.experience_years,
            'rating': self.rating,
            'total_trips': self.total_trips,
            'is_available': self.is_available,
            'status': self.status,
            'assigned_truck_id': self.assigned_truck_id,
            'created_at': format_datetime(self.created_at),
            'updated_at': format_datetime(self.updated_at),
        }
