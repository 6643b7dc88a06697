"""
Booking lifecycle rules.

Pure functions only: pricing, the status transition table and the listing
predicates. The service applies them against the store.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ...config import PLATFORM_FEE_RATE
from ...shared.timestamps import start_of_day, utcnow

PENDING = "pending"
CONFIRMED = "confirmed"
IN_PROGRESS = "in_progress"
COMPLETED = "completed"
CANCELLED = "cancelled"

BOOKING_STATUSES = (PENDING, CONFIRMED, IN_PROGRESS, COMPLETED, CANCELLED)
ACTIVE_STATUSES = (PENDING, CONFIRMED, IN_PROGRESS)

# action -> (allowed source statuses, target status)
TRANSITIONS = {
    "confirm": ((PENDING,), CONFIRMED),
    "start": ((PENDING, CONFIRMED), IN_PROGRESS),
    "complete": ((IN_PROGRESS,), COMPLETED),
    "cancel": ((PENDING, CONFIRMED), CANCELLED),
}

LISTING_TABS = ("all", "upcoming", "ongoing", "past", "cancelled")

CENT = Decimal("0.01")


class InvalidTransition(ValueError):
    """Raised when an action is not allowed from the booking's current status"""

    def __init__(self, current: str, action: str):
        self.current = current
        self.action = action
        super().__init__(f"Cannot {action} a booking that is {current}")


def next_status(current: str, action: str) -> str:
    if action not in TRANSITIONS:
        raise InvalidTransition(current, action)
    sources, target = TRANSITIONS[action]
    if current not in sources:
        raise InvalidTransition(current, action)
    return target


def round_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_pricing(price) -> tuple[Decimal, Decimal]:
    """
    Platform fee and total for a service price, both rounded half-up to cents.
    200.00 -> (10.00, 210.00)
    """
    amount = Decimal(str(price))
    rate = Decimal(PLATFORM_FEE_RATE)
    fee = (amount * rate).quantize(CENT, rounding=ROUND_HALF_UP)
    total = (amount * (1 + rate)).quantize(CENT, rounding=ROUND_HALF_UP)
    return fee, total


def tab_criteria(tab: str, now: Optional[datetime] = None) -> tuple[Optional[tuple], Optional[datetime]]:
    """
    Status set and earliest booking date for a listing tab.
    ``None`` means the listing is not restricted on that field.
    """
    if tab == "upcoming":
        return ACTIVE_STATUSES, start_of_day(now or utcnow())
    if tab == "ongoing":
        return (IN_PROGRESS,), None
    if tab == "past":
        return (COMPLETED,), None
    if tab == "cancelled":
        return (CANCELLED,), None
    if tab == "all":
        return None, None
    raise ValueError(f"Unknown tab '{tab}'. Allowed: {', '.join(LISTING_TABS)}")
