"""
Policy classes for dispatch business rules

Policies are composable validation rules that enforce business invariants.
They raise domain exceptions when violations are detected.
"""

from dispatch_console.business.dispatching.policies.booking_existence import BookingExistencePolicy
from dispatch_console.business.dispatching.policies.driver_assignment import DriverAssignmentPolicy
from dispatch_console.business.dispatching.policies.dispatch_timestamps import DispatchTimestampConsistencyPolicy

__all__ = [
    'BookingExistencePolicy',
    'DriverAssignmentPolicy',
    'DispatchTimestampConsistencyPolicy',
]
