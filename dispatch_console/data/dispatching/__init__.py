"""
Dispatching records (wire models for the logistics API)

- Dispatch: assignment/execution record for one booking
- Booking: customer transport request (read-only here)
- Driver: fleet driver joined into detail views (read-only here)
"""

from dispatch_console.data.dispatching.dispatch import Dispatch, DispatchStatus
from dispatch_console.data.dispatching.booking import Booking, BookingStatus, ServiceType
from dispatch_console.data.dispatching.driver import Driver

__all__ = [
    'Dispatch',
    'DispatchStatus',
    'Booking',
    'BookingStatus',
    'ServiceType',
    'Driver',
]
