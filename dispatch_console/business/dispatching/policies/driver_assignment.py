"""
Driver Assignment Policy

Only open dispatches take a driver, and only an available driver can be taken.
"""

from typing import Optional

from dispatch_console.business.dispatching.errors import AlreadyTerminal, DriverUnavailable
from dispatch_console.business.dispatching.narrator import DispatchNarrator
from dispatch_console.business.dispatching.state_machine import DispatchStateMachine
from dispatch_console.data.dispatching import Dispatch, Driver


class DriverAssignmentPolicy:

    @classmethod
    def check(cls, dispatch: Dispatch, driver: Optional[Driver], driver_id: int) -> Driver:
        """
        Raises:
            AlreadyTerminal: If the dispatch is completed or cancelled
            DriverUnavailable: If the driver does not exist or is not available
        """
        if DispatchStateMachine.is_terminal(dispatch.status):
            raise AlreadyTerminal(
                DispatchNarrator.already_terminal(dispatch.dispatch_id, dispatch.status),
                current_status=dispatch.status,
            )

        if driver is None:
            raise DriverUnavailable(f"Driver #{driver_id} was not found.")

        # Re-assigning the driver already on the dispatch is allowed even though
        # the API reports them as busy.
        if dispatch.assigned_driver == driver.id:
            return driver

        if not driver.is_available:
            raise DriverUnavailable(
                f"Driver #{driver.id} ({driver.employee_id}) is not available for assignment."
            )
        return driver
