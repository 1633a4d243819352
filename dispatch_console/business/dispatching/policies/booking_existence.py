"""
Booking Existence Policy

A dispatch cannot exist without a valid booking.
"""

from typing import Optional

from dispatch_console.business.dispatching.errors import BookingNotFound
from dispatch_console.business.dispatching.narrator import DispatchNarrator
from dispatch_console.data.dispatching import Booking


class BookingExistencePolicy:
    """Guards dispatch creation against missing bookings."""

    @classmethod
    def check(cls, booking: Optional[Booking], booking_id: int) -> Booking:
        """
        Raises:
            BookingNotFound: If no booking was found for booking_id
        """
        if booking is None or booking.booking_id != booking_id:
            raise BookingNotFound(DispatchNarrator.booking_not_found(booking_id), booking_id=booking_id)
        return booking
