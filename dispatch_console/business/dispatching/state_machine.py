"""
State machine for the dispatch lifecycle

Encodes valid transitions and the timestamp each transition records.
Keeps "what is allowed" separate from "how persistence occurs": nothing here
talks to the logistics API.
"""

from datetime import datetime
from typing import Dict, FrozenSet, Optional

from dispatch_console.business.dispatching.errors import (
    AlreadyTerminal,
    DispatchTimestampError,
    InvalidTransition,
)
from dispatch_console.business.dispatching.narrator import DispatchNarrator
from dispatch_console.business.dispatching.parsing import parse_status
from dispatch_console.data.dispatching import Dispatch, DispatchStatus
from dispatch_console.data.wire import utcnow


class DispatchStateMachine:
    """
    State machine for Dispatch.status.

    Forward path: pending → dispatched → in_transit → arrived → completed.
    Any non-terminal state may be cancelled. Unlike the booking workflow the
    dispatch never moves backwards and never "transitions" to its own state,
    so a retried request is rejected instead of applied twice.
    """

    PENDING = DispatchStatus.PENDING
    DISPATCHED = DispatchStatus.DISPATCHED
    IN_TRANSIT = DispatchStatus.IN_TRANSIT
    ARRIVED = DispatchStatus.ARRIVED
    COMPLETED = DispatchStatus.COMPLETED
    CANCELLED = DispatchStatus.CANCELLED

    # Terminal states (cannot transition from these)
    TERMINAL_STATES: FrozenSet[DispatchStatus] = frozenset({COMPLETED, CANCELLED})

    # Valid transitions: from_status -> set of allowed to_status values
    TRANSITIONS: Dict[DispatchStatus, FrozenSet[DispatchStatus]] = {
        PENDING: frozenset({DISPATCHED, CANCELLED}),
        DISPATCHED: frozenset({IN_TRANSIT, CANCELLED}),
        IN_TRANSIT: frozenset({ARRIVED, CANCELLED}),
        ARRIVED: frozenset({COMPLETED, CANCELLED}),
        COMPLETED: frozenset(),
        CANCELLED: frozenset(),
    }

    # Timestamp set the first time the dispatch enters the state
    TIMESTAMP_FIELDS: Dict[DispatchStatus, str] = {
        DISPATCHED: 'dispatch_time',
        ARRIVED: 'arrival_time',
    }

    PROGRESSION = (PENDING, DISPATCHED, IN_TRANSIT, ARRIVED, COMPLETED)

    @classmethod
    def is_terminal(cls, status) -> bool:
        return parse_status(status) in cls.TERMINAL_STATES

    @classmethod
    def compute_allowed_transitions(cls, current_status) -> FrozenSet[DispatchStatus]:
        """Get set of allowed target statuses from the current status"""
        return cls.TRANSITIONS[parse_status(current_status)]

    @classmethod
    def can_transition(cls, from_status, to_status) -> bool:
        return parse_status(to_status) in cls.compute_allowed_transitions(from_status)

    @classmethod
    def forward_transition(cls, current_status) -> Optional[DispatchStatus]:
        """The single non-cancelling next step, or None for terminal states."""
        forward = cls.compute_allowed_transitions(current_status) - {cls.CANCELLED}
        return next(iter(forward), None)

    @classmethod
    def validate_transition(cls, dispatch: Dispatch, target_status) -> DispatchStatus:
        """
        Validate a proposed status change.

        Raises:
            AlreadyTerminal: If the dispatch is completed or cancelled
            InvalidTransition: If the target is not reachable from the current status
        """
        target = parse_status(target_status)
        current = dispatch.status

        if current in cls.TERMINAL_STATES:
            raise AlreadyTerminal(
                DispatchNarrator.already_terminal(dispatch.dispatch_id, current),
                current_status=current,
                target_status=target,
            )

        if not cls.can_transition(current, target):
            allowed = cls.TRANSITIONS[current]
            raise InvalidTransition(
                DispatchNarrator.invalid_transition(current, target, allowed),
                current_status=current,
                target_status=target,
                allowed=allowed,
            )
        return target

    @classmethod
    def apply_transition(
        cls,
        dispatch: Dispatch,
        target_status,
        dispatch_time: Optional[datetime] = None,
        arrival_time: Optional[datetime] = None,
    ) -> Dispatch:
        """
        Compute the dispatch after moving to target_status.

        Entering ``dispatched`` sets dispatch_time and entering ``arrived`` sets
        arrival_time, using the explicit value if one is given and the current
        UTC time otherwise. A timestamp that is already set is kept. Explicit
        timestamps for other states are ignored. No I/O happens here.

        Returns:
            Dispatch: a new value; the input is left untouched
        """
        target = cls.validate_transition(dispatch, target_status)

        changes = {'status': target}
        field = cls.TIMESTAMP_FIELDS.get(target)
        if field and getattr(dispatch, field) is None:
            explicit = dispatch_time if field == 'dispatch_time' else arrival_time
            changes[field] = explicit or utcnow()

        return dispatch.with_changes(**changes)

    @classmethod
    def cancel(cls, dispatch: Dispatch) -> Dispatch:
        return cls.apply_transition(dispatch, cls.CANCELLED)

    @classmethod
    def has_passed_through(cls, current_status, status) -> bool:
        """Whether the forward path has reached ``status`` (cancelled counts as unknown history)."""
        current = parse_status(current_status)
        if current not in cls.PROGRESSION:
            return False
        return cls.PROGRESSION.index(current) >= cls.PROGRESSION.index(parse_status(status))

    @classmethod
    def record_timestamp(cls, dispatch: Dispatch, field: str, when: Optional[datetime] = None) -> Dispatch:
        """
        Backfill a missing dispatch_time or arrival_time.

        Raises:
            AlreadyTerminal: If the dispatch is completed or cancelled
            DispatchTimestampError: If the owning state has not been reached yet
                or the timestamp is already recorded
        """
        if dispatch.status in cls.TERMINAL_STATES:
            raise AlreadyTerminal(
                DispatchNarrator.already_terminal(dispatch.dispatch_id, dispatch.status),
                current_status=dispatch.status,
            )

        owners = {name: status for status, name in cls.TIMESTAMP_FIELDS.items()}
        if field not in owners:
            raise DispatchTimestampError(f"Unknown timestamp field '{field}'")

        owner = owners[field]
        if not cls.has_passed_through(dispatch.status, owner):
            raise DispatchTimestampError(
                f"Cannot record {field.replace('_', ' ')} before the dispatch is "
                f"{DispatchNarrator.status_label(owner)} "
                f"(currently {DispatchNarrator.status_label(dispatch.status)})."
            )
        if getattr(dispatch, field) is not None:
            raise DispatchTimestampError(
                f"{field.replace('_', ' ').capitalize()} is already recorded for dispatch #{dispatch.dispatch_id}."
            )

        return dispatch.with_changes(**{field: when or utcnow()})


compute_allowed_transitions = DispatchStateMachine.compute_allowed_transitions
apply_transition = DispatchStateMachine.apply_transition
cancel = DispatchStateMachine.cancel
