"""
Read models for dispatch tables and detail panels

Every surface derives its action controls from
DispatchStateMachine.compute_allowed_transitions; nothing here keeps its own
copy of the transition table.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from dispatch_console.business.dispatching.errors import IncompleteJoin
from dispatch_console.business.dispatching.narrator import DispatchNarrator
from dispatch_console.business.dispatching.state_machine import DispatchStateMachine
from dispatch_console.data.dispatching import Booking, Dispatch, DispatchStatus, Driver


def build_actions(status) -> List[Dict[str, str]]:
    """Action buttons for a status: forward step first, cancellation last."""
    allowed = DispatchStateMachine.compute_allowed_transitions(status)
    ordered = sorted(
        allowed,
        key=lambda s: (s == DispatchStatus.CANCELLED, s.value),
    )
    return [
        {'status': target.value, 'label': DispatchNarrator.action_label(target)}
        for target in ordered
    ]


@dataclass(frozen=True)
class DispatchRow:
    """One dispatch table row."""
    dispatch: Dispatch
    actions: List[Dict[str, str]] = field(default_factory=list)

    @classmethod
    def from_dispatch(cls, dispatch: Dispatch) -> 'DispatchRow':
        return cls(dispatch=dispatch, actions=build_actions(dispatch.status))

    @property
    def can_cancel(self) -> bool:
        return any(a['status'] == DispatchStatus.CANCELLED.value for a in self.actions)

    @property
    def is_terminal(self) -> bool:
        return not self.actions

    def to_dict(self) -> Dict[str, Any]:
        data = self.dispatch.to_api()
        data['status_label'] = DispatchNarrator.status_label(self.dispatch.status)
        data['allowed_actions'] = self.actions
        data['can_cancel'] = self.can_cancel
        data['is_terminal'] = self.is_terminal
        return data


@dataclass(frozen=True)
class DispatchWithDetails:
    """Joined read model for the dispatch detail panel."""
    dispatch: Dispatch
    booking: Booking
    driver: Driver
    actions: List[Dict[str, str]] = field(default_factory=list)

    @property
    def allowed_transitions(self) -> List[str]:
        return [a['status'] for a in self.actions]

    @property
    def can_cancel(self) -> bool:
        return DispatchStatus.CANCELLED.value in self.allowed_transitions

    @property
    def next_action(self) -> Optional[Dict[str, str]]:
        forward = DispatchStateMachine.forward_transition(self.dispatch.status)
        if forward is None:
            return None
        return {'status': forward.value, 'label': DispatchNarrator.action_label(forward)}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'dispatch': DispatchRow(self.dispatch, self.actions).to_dict(),
            'booking': self.booking.to_api(),
            'driver': self.driver.to_api(),
            'allowed_actions': self.actions,
            'next_action': self.next_action,
            'can_cancel': self.can_cancel,
        }


def assemble_dispatch_view(
    dispatch: Optional[Dispatch],
    booking: Optional[Booking],
    driver: Optional[Driver],
) -> DispatchWithDetails:
    """
    Join an already-fetched dispatch, booking and driver.

    Raises:
        IncompleteJoin: If any of the three is missing
    """
    parts = {'dispatch': dispatch, 'booking': booking, 'driver': driver}
    missing = [name for name, value in parts.items() if value is None]
    if missing:
        raise IncompleteJoin(
            f"Dispatch details are incomplete (missing {', '.join(missing)}). Please retry.",
            missing=missing,
        )
    return DispatchWithDetails(
        dispatch=dispatch,
        booking=booking,
        driver=driver,
        actions=build_actions(dispatch.status),
    )


def summarize_statuses(dispatches: Iterable[Dispatch]) -> Dict[str, int]:
    """Per-status counts for driver-scoped tables; every status is present."""
    counts = {status.value: 0 for status in DispatchStatus}
    for dispatch in dispatches:
        counts[dispatch.status.value] += 1
    return counts
