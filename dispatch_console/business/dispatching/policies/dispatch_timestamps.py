"""
Dispatch Timestamp Consistency Policy

Ensures dispatch_time / arrival_time agree with the status of a dispatch
returned by the logistics API.
"""

from dispatch_console.business.dispatching.errors import DispatchConsistencyError
from dispatch_console.business.dispatching.state_machine import DispatchStateMachine
from dispatch_console.data.dispatching import Dispatch, DispatchStatus


class DispatchTimestampConsistencyPolicy:
    """
    Enforces timestamp consistency with status.

    Rules:
    1. dispatch_time may only be set once the dispatch has reached "dispatched"
    2. arrival_time may only be set once the dispatch has reached "arrived"
    3. A freshly created dispatch is "pending" with neither timestamp

    Cancelled dispatches are not checked against rules 1-2 because their
    history is not known.
    """

    @classmethod
    def validate(cls, dispatch: Dispatch) -> None:
        """
        Raises:
            DispatchConsistencyError: If a timestamp is set ahead of the status
        """
        if dispatch.status == DispatchStatus.CANCELLED:
            return

        if dispatch.dispatch_time is not None and not DispatchStateMachine.has_passed_through(
            dispatch.status, DispatchStatus.DISPATCHED
        ):
            raise DispatchConsistencyError(
                f"Dispatch #{dispatch.dispatch_id} has a dispatch time but is still '{dispatch.status.value}'."
            )

        if dispatch.arrival_time is not None and not DispatchStateMachine.has_passed_through(
            dispatch.status, DispatchStatus.ARRIVED
        ):
            raise DispatchConsistencyError(
                f"Dispatch #{dispatch.dispatch_id} has an arrival time but is still '{dispatch.status.value}'."
            )

    @classmethod
    def validate_created(cls, dispatch: Dispatch, booking_id: int) -> None:
        if dispatch.booking_id != booking_id:
            raise DispatchConsistencyError(
                f"Created dispatch #{dispatch.dispatch_id} references booking #{dispatch.booking_id}, "
                f"expected #{booking_id}."
            )
        if dispatch.status != DispatchStatus.PENDING or dispatch.dispatch_time or dispatch.arrival_time:
            raise DispatchConsistencyError(
                f"Created dispatch #{dispatch.dispatch_id} must start as pending without timestamps."
            )
