"""
Booking status transition table.

PENDING → ON_THE_WAY → DELIVERED is the happy path. A pending parcel can be
cancelled by its sender and a parcel on the way can come back as returned.
Delivered, returned and cancelled parcels are terminal.
"""

from typing import Dict, FrozenSet

from backend.parcelpro.core.exceptions import InvalidTransitionError
from backend.parcelpro.models.enums import BookingStatus

ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.ON_THE_WAY, BookingStatus.CANCELLED}),
    BookingStatus.ON_THE_WAY: frozenset({BookingStatus.DELIVERED, BookingStatus.RETURNED}),
    BookingStatus.DELIVERED: frozenset(),
    BookingStatus.RETURNED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


def can_transition(current: BookingStatus, target: BookingStatus, strict: bool = True) -> bool:
    if not strict:
        return True
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(current: BookingStatus, target: BookingStatus, strict: bool = True) -> None:
    """
    Raise InvalidTransitionError unless ``current`` may move to ``target``.

    With ``strict=False`` any overwrite is accepted.
    """
    if not can_transition(current, target, strict):
        raise InvalidTransitionError(current.value, target.value)
