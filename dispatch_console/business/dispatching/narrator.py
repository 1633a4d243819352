"""
DispatchNarrator - Message composer for dispatch lifecycle events

Keeps user-facing wording (error messages, action labels) and log lines out
of the transition logic so every surface says the same thing.
"""

from typing import Iterable, Optional


STATUS_LABELS = {
    'pending': 'Pending',
    'dispatched': 'Dispatched',
    'in_transit': 'In Transit',
    'arrived': 'Arrived',
    'completed': 'Completed',
    'cancelled': 'Cancelled',
}

# Button labels offered for moving *into* a status
ACTION_LABELS = {
    'dispatched': 'Dispatch',
    'in_transit': 'Start Transit',
    'arrived': 'Mark Arrived',
    'completed': 'Complete',
    'cancelled': 'Cancel Dispatch',
}


def _token(status) -> str:
    return getattr(status, 'value', status)


class DispatchNarrator:
    """Composes messages for dispatch lifecycle events."""

    @staticmethod
    def status_label(status) -> str:
        return STATUS_LABELS.get(_token(status), str(_token(status)))

    @staticmethod
    def action_label(target_status) -> str:
        return ACTION_LABELS.get(_token(target_status), DispatchNarrator.status_label(target_status))

    @staticmethod
    def already_terminal(dispatch_id: Optional[int], status) -> str:
        label = DispatchNarrator.status_label(status).lower()
        if dispatch_id is None:
            return f"This dispatch is finished ({label}) and can no longer be changed."
        return f"Dispatch #{dispatch_id} is finished ({label}) and can no longer be changed."

    @staticmethod
    def invalid_transition(from_status, to_status, allowed: Iterable) -> str:
        options = ', '.join(sorted(DispatchNarrator.status_label(s) for s in allowed)) or 'none'
        return (
            f"Cannot move a dispatch from {DispatchNarrator.status_label(from_status)} "
            f"to {DispatchNarrator.status_label(to_status)}. Allowed next steps: {options}."
        )

    @staticmethod
    def status_changed(dispatch_id: int, from_status, to_status) -> str:
        return (
            f"Dispatch #{dispatch_id} status changed: "
            f"{DispatchNarrator.status_label(from_status)} → {DispatchNarrator.status_label(to_status)}"
        )

    @staticmethod
    def dispatch_created(dispatch_id: int, booking_id: int) -> str:
        return f"Dispatch #{dispatch_id} created for booking #{booking_id}"

    @staticmethod
    def booking_not_found(booking_id: int) -> str:
        return f"Booking #{booking_id} was not found. Please supply a valid booking ID."

    @staticmethod
    def duplicate_dispatch(booking_id: int) -> str:
        return (
            f"A dispatch already exists for booking #{booking_id}. "
            "Please use the existing dispatch or cancel it first."
        )

    @staticmethod
    def driver_assigned(dispatch_id: int, driver_id: int) -> str:
        return f"Driver #{driver_id} assigned to dispatch #{dispatch_id}"

    @staticmethod
    def timestamp_recorded(dispatch_id: int, field: str, value) -> str:
        return f"Dispatch #{dispatch_id} {field.replace('_', ' ')} recorded: {value.isoformat()}"
