"""
Booking services.

Creating a booking re-checks premium access at call time, with lazy expiry
applied, so a lapsed subscription is refused even if no webhook has
downgraded the user yet.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING
from typing import Any

from moorings.billing.entitlements import require_premium_access
from moorings.billing.errors import NotFoundError
from moorings.bookings.models import Booking

if TYPE_CHECKING:
    from moorings.users.models import User

logger = logging.getLogger(__name__)


def create_booking(
    user: User,
    data: dict[str, Any],
    now: datetime | None = None,
) -> Booking:
    require_premium_access(user, now)

    data = dict(data)
    if not data.get("number_of_nights"):
        data["number_of_nights"] = (data["check_out_date"] - data["check_in_date"]).days

    booking = Booking.objects.create(user=user, **data)
    logger.info(
        "Booking %s created by user_id=%s at location_id=%s",
        booking.pk,
        user.pk,
        booking.location_id,
    )
    return booking


def update_booking_status(booking_id: int, status: str) -> Booking:
    updated = Booking.objects.filter(pk=booking_id).update(status=status)
    if not updated:
        raise NotFoundError("Booking not found", code="booking_not_found")
    booking = Booking.objects.get(pk=booking_id)
    logger.info("Booking %s status set to %s", booking_id, status)
    return booking
