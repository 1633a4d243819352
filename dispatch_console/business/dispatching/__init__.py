"""
Dispatching business layer.

Main entry point: DispatchContext (domain facade)

- DispatchContext: fresh-fetch / validate / persist facade for one dispatch
- DispatchStateMachine: status transitions and timestamp side effects
- Policies: booking existence, driver assignment, timestamp consistency
- Views: read models whose actions come from the state machine
- DispatchNarrator: user-facing messages and log lines
"""

from dispatch_console.business.dispatching.context import (
    DispatchContext,
    create_dispatch,
    get_dispatch_by_booking_id,
)
from dispatch_console.business.dispatching.state_machine import (
    DispatchStateMachine,
    apply_transition,
    cancel,
    compute_allowed_transitions,
)
from dispatch_console.business.dispatching.views import (
    DispatchRow,
    DispatchWithDetails,
    assemble_dispatch_view,
    summarize_statuses,
)
from dispatch_console.business.dispatching.errors import (
    DispatchDomainError,
    ValidationError,
    DispatchNotFound,
    DispatchTransitionError,
    InvalidTransition,
    AlreadyTerminal,
    DispatchPolicyViolation,
    BookingNotFound,
    DriverUnavailable,
    DispatchTimestampError,
    DispatchConsistencyError,
    IncompleteJoin,
    DispatchConflictError,
    DuplicateDispatchError,
)

__all__ = [
    'DispatchContext',
    'create_dispatch',
    'get_dispatch_by_booking_id',
    'DispatchStateMachine',
    'apply_transition',
    'cancel',
    'compute_allowed_transitions',
    'DispatchRow',
    'DispatchWithDetails',
    'assemble_dispatch_view',
    'summarize_statuses',
    'DispatchDomainError',
    'ValidationError',
    'DispatchNotFound',
    'DispatchTransitionError',
    'InvalidTransition',
    'AlreadyTerminal',
    'DispatchPolicyViolation',
    'BookingNotFound',
    'DriverUnavailable',
    'DispatchTimestampError',
    'DispatchConsistencyError',
    'IncompleteJoin',
    'DispatchConflictError',
    'DuplicateDispatchError',
]
