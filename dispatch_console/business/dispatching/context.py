"""
DispatchContext - Domain facade for a single dispatch

Holds the dispatch as last returned by the logistics API and exposes an
intention-revealing interface for lifecycle operations. Every mutation
re-fetches the dispatch, validates against that fresh status, submits one
request, and replaces the held record with the server's response.
"""

from datetime import datetime
from typing import FrozenSet, Optional

from dispatch_console.business.dispatching.errors import (
    DispatchConsistencyError,
    DispatchNotFound,
    DuplicateDispatchError,
)
from dispatch_console.business.dispatching.narrator import DispatchNarrator
from dispatch_console.business.dispatching.parsing import parse_id, parse_status, parse_timestamp_field
from dispatch_console.business.dispatching.policies import (
    BookingExistencePolicy,
    DispatchTimestampConsistencyPolicy,
    DriverAssignmentPolicy,
)
from dispatch_console.business.dispatching.state_machine import DispatchStateMachine
from dispatch_console.business.dispatching.views import DispatchWithDetails, assemble_dispatch_view
from dispatch_console.data.api import ApiNotFound, ApiRequestRejected, LogisticsApiClient
from dispatch_console.data.dispatching import Booking, Dispatch, DispatchStatus, Driver
from dispatch_console.logger import get_logger

logger = get_logger("dispatch_console.dispatching")


def fetch_booking(api: LogisticsApiClient, booking_id: int) -> Optional[Booking]:
    """Booking lookup that treats 404 as absence."""
    try:
        return api.get_booking(booking_id)
    except ApiNotFound:
        return None


def fetch_driver(api: LogisticsApiClient, driver_id: int) -> Optional[Driver]:
    """Driver lookup that treats 404 as absence."""
    try:
        return api.get_driver(driver_id)
    except ApiNotFound:
        return None


def _is_duplicate_rejection(error: ApiRequestRejected) -> bool:
    return error.status_code in (400, 409) and 'already exists' in error.message.lower()


class DispatchContext:
    """
    Domain facade for one dispatch.

    Pattern: Domain Facade / Aggregate Controller
    """

    def __init__(self, api: LogisticsApiClient, dispatch: Optional[Dispatch] = None, dispatch_id: Optional[int] = None):
        self.api = api
        self._dispatch = dispatch
        self._dispatch_id = dispatch.dispatch_id if dispatch is not None else dispatch_id

    # ========== Factories ==========

    @classmethod
    def load(cls, api: LogisticsApiClient, dispatch_id) -> 'DispatchContext':
        """
        Load context for a dispatch id.

        Raises:
            DispatchNotFound: If the API has no such dispatch
        """
        dispatch_id = parse_id(dispatch_id, 'dispatch_id')
        return cls(api, cls._fetch(api, dispatch_id))

    @classmethod
    def for_update(cls, api: LogisticsApiClient, dispatch_id) -> 'DispatchContext':
        """
        Context for a dispatch id without fetching it.

        Lifecycle operations fetch the dispatch themselves before validating,
        so a request that only mutates costs one read.
        """
        return cls(api, dispatch_id=parse_id(dispatch_id, 'dispatch_id'))

    @classmethod
    def for_booking(cls, api: LogisticsApiClient, booking_id) -> 'DispatchContext':
        """
        Load the (single) dispatch of a booking.

        Raises:
            DispatchNotFound: If the booking has no dispatch
        """
        booking_id = parse_id(booking_id, 'booking_id')
        try:
            dispatch = api.get_dispatch_by_booking(booking_id)
        except ApiNotFound:
            raise DispatchNotFound(f"No dispatch exists for booking #{booking_id}.")
        return cls(api, dispatch)

    @classmethod
    def create(cls, api: LogisticsApiClient, booking_id) -> 'DispatchContext':
        """
        Create a dispatch for an existing booking.

        The booking is looked up first; creation is never attempted for a
        booking that does not exist. One-dispatch-per-booking is enforced by
        the backend and surfaced as DuplicateDispatchError.

        Raises:
            BookingNotFound: If the booking does not exist
            DuplicateDispatchError: If the backend already holds a dispatch for it
            DispatchConsistencyError: If the created record is not a fresh pending dispatch
        """
        booking_id = parse_id(booking_id, 'booking_id')
        BookingExistencePolicy.check(fetch_booking(api, booking_id), booking_id)

        try:
            dispatch = api.create_dispatch(booking_id)
        except ApiRequestRejected as e:
            if _is_duplicate_rejection(e):
                raise DuplicateDispatchError(DispatchNarrator.duplicate_dispatch(booking_id)) from e
            raise

        DispatchTimestampConsistencyPolicy.validate_created(dispatch, booking_id)
        logger.info(DispatchNarrator.dispatch_created(dispatch.dispatch_id, booking_id))
        return cls(api, dispatch)

    @staticmethod
    def _fetch(api: LogisticsApiClient, dispatch_id: int) -> Dispatch:
        try:
            return api.get_dispatch(dispatch_id)
        except ApiNotFound:
            raise DispatchNotFound(f"Dispatch #{dispatch_id} was not found.")

    # ========== Read Model Helpers ==========

    @property
    def dispatch(self) -> Dispatch:
        if self._dispatch is None:
            self._dispatch = self._fetch(self.api, self._dispatch_id)
        return self._dispatch

    @property
    def dispatch_id(self) -> int:
        return self._dispatch_id

    @property
    def allowed_transitions(self) -> FrozenSet[DispatchStatus]:
        return DispatchStateMachine.compute_allowed_transitions(self.dispatch.status)

    @property
    def is_terminal(self) -> bool:
        return DispatchStateMachine.is_terminal(self.dispatch.status)

    def refresh(self) -> 'DispatchContext':
        self._dispatch = self._fetch(self.api, self.dispatch_id)
        return self

    def load_details(self) -> DispatchWithDetails:
        """
        Fetch booking and driver and join them with the dispatch.

        Raises:
            IncompleteJoin: If the booking or driver cannot be fetched, or no driver is assigned
        """
        booking = fetch_booking(self.api, self.dispatch.booking_id)
        driver = None
        if self.dispatch.assigned_driver is not None:
            driver = fetch_driver(self.api, self.dispatch.assigned_driver)
        return assemble_dispatch_view(self.dispatch, booking, driver)

    # ========== Lifecycle Operations ==========

    def transition(
        self,
        target_status,
        dispatch_time: Optional[datetime] = None,
        arrival_time: Optional[datetime] = None,
    ) -> 'DispatchContext':
        """
        Move the dispatch to target_status.

        Validation runs against a freshly fetched dispatch, so a transition
        that another actor already made (or a retried request) is rejected
        with AlreadyTerminal / InvalidTransition before anything is sent.

        Returns:
            DispatchContext: self for chaining, holding the server's record
        """
        target = parse_status(target_status)
        fresh = self._fetch(self.api, self.dispatch_id)
        proposed = DispatchStateMachine.apply_transition(
            fresh, target, dispatch_time=dispatch_time, arrival_time=arrival_time
        )

        updated = self.api.update_dispatch_status(
            fresh.dispatch_id,
            target,
            dispatch_time=proposed.dispatch_time if proposed.dispatch_time != fresh.dispatch_time else None,
            arrival_time=proposed.arrival_time if proposed.arrival_time != fresh.arrival_time else None,
        )
        self._accept(updated, expected_status=target)
        logger.info(DispatchNarrator.status_changed(fresh.dispatch_id, fresh.status, target))
        return self

    def cancel(self) -> 'DispatchContext':
        """Cancel the dispatch (allowed from every non-terminal status)."""
        return self.transition(DispatchStatus.CANCELLED)

    def assign_driver(self, driver_id) -> 'DispatchContext':
        """
        Assign a driver to an open dispatch.

        Raises:
            AlreadyTerminal: If the dispatch is completed or cancelled
            DriverUnavailable: If the driver does not exist or is not available
        """
        driver_id = parse_id(driver_id, 'driver_id')
        fresh = self._fetch(self.api, self.dispatch_id)
        DriverAssignmentPolicy.check(fresh, fetch_driver(self.api, driver_id), driver_id)

        updated = self.api.assign_driver(fresh.dispatch_id, driver_id)
        if updated.assigned_driver != driver_id:
            raise DispatchConsistencyError(
                f"Dispatch #{fresh.dispatch_id} was not assigned to driver #{driver_id} by the API."
            )
        self._accept(updated, expected_status=fresh.status)
        logger.info(DispatchNarrator.driver_assigned(fresh.dispatch_id, driver_id))
        return self

    def record_timestamp(self, field: str, when: Optional[datetime] = None) -> 'DispatchContext':
        """
        Backfill a missing dispatch_time / arrival_time.

        Raises:
            AlreadyTerminal: If the dispatch is completed or cancelled
            DispatchTimestampError: If the timestamp cannot be recorded in the current status
        """
        field = parse_timestamp_field(field)
        fresh = self._fetch(self.api, self.dispatch_id)
        proposed = DispatchStateMachine.record_timestamp(fresh, field, when)

        updated = self.api.update_dispatch(fresh.dispatch_id, {field: getattr(proposed, field)})
        self._accept(updated, expected_status=fresh.status)
        logger.info(DispatchNarrator.timestamp_recorded(fresh.dispatch_id, field, getattr(proposed, field)))
        return self

    def _accept(self, updated: Dispatch, expected_status: DispatchStatus) -> None:
        """Adopt the server's record after checking it reflects the request."""
        if updated.dispatch_id != self.dispatch_id:
            raise DispatchConsistencyError(
                f"API answered with dispatch #{updated.dispatch_id} for dispatch #{self.dispatch_id}."
            )
        if updated.status != expected_status:
            raise DispatchConsistencyError(
                f"API reports dispatch #{updated.dispatch_id} as '{updated.status.value}', "
                f"expected '{expected_status.value}'."
            )
        DispatchTimestampConsistencyPolicy.validate(updated)
        self._dispatch = updated


def create_dispatch(api: LogisticsApiClient, booking_id) -> Dispatch:
    return DispatchContext.create(api, booking_id).dispatch


def get_dispatch_by_booking_id(api: LogisticsApiClient, booking_id) -> Dispatch:
    return DispatchContext.for_booking(api, booking_id).dispatch
