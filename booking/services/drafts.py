"""
Booking drafts: the proposal a customer builds on the draft screen and
carries to the pay screen before anything is written to the database.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from django.conf import settings
from django.core.cache import cache as default_cache
from django.utils import timezone

from booking.exceptions import (
    BookingConflictError,
    BookingValidationError,
    NotFoundError,
    SessionExpiredError,
)
from booking.models import Booking
from booking.services.availability import is_available
from car.models import Car

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingDraft:
    car_id: int
    start_date: date
    end_date: date
    total_price: Decimal
    days: int


def propose(car_id, start_date: date, end_date: date, today: date | None = None) -> BookingDraft:
    """
    Validate a requested rental and price it.

    Checks run in a fixed order and stop at the first failure: the car
    exists, the car is offered for rent, no confirmed booking overlaps,
    the end date follows the start date, the start date is not in the past.
    """
    try:
        car = Car.objects.get(pk=car_id)
    except Car.DoesNotExist:
        raise BookingValidationError("The selected car does not exist.", field="car")

    if not car.is_available:
        raise BookingValidationError(
            "The selected car is not available for rent.", field="car"
        )

    if not is_available(car.id, start_date, end_date):
        raise BookingValidationError(
            "This car is already booked for the selected dates. "
            "Please choose different dates."
        )

    if end_date <= start_date:
        raise BookingValidationError(
            "End date must be after start date.", field="end_date"
        )

    today = today or timezone.localdate()
    if start_date < today:
        raise BookingValidationError(
            "Start date cannot be in the past.", field="start_date"
        )

    days = (end_date - start_date).days
    return BookingDraft(
        car_id=car.id,
        start_date=start_date,
        end_date=end_date,
        total_price=car.daily_price * days,
        days=days,
    )


def materialize(draft: BookingDraft, user) -> Booking:
    """Persist a draft as a Pending booking after re-checking the car."""
    try:
        car = Car.objects.get(pk=draft.car_id)
    except Car.DoesNotExist:
        raise NotFoundError("Car", draft.car_id)

    if not car.is_available:
        raise BookingConflictError(car.id, "Car is no longer available.")

    if not is_available(car.id, draft.start_date, draft.end_date):
        logger.warning(
            f"Car {car.id} was confirmed for {draft.start_date}..{draft.end_date} "
            f"by someone else before user {user.pk} checked out"
        )
        raise BookingConflictError(
            car.id,
            "This car has been booked by someone else. Please choose another car.",
        )

    booking = Booking.objects.create(
        user=user,
        car=car,
        start_date=draft.start_date,
        end_date=draft.end_date,
        total_price=draft.total_price,
        status=Booking.BookingStatus.PENDING,
    )
    logger.info(f"Created pending Booking {booking.id} for user {user.pk}")
    return booking


class DraftStore:
    """Single draft slot per session key, kept in the cache with a TTL."""

    key_prefix = "booking-draft"

    def __init__(self, cache=None, ttl: int | None = None) -> None:
        self.cache = cache if cache is not None else default_cache
        self.ttl = ttl if ttl is not None else settings.BOOKING_DRAFT_TTL

    def _key(self, session_key: str) -> str:
        return f"{self.key_prefix}:{session_key}"

    def save(self, session_key: str, draft: BookingDraft) -> None:
        self.cache.set(self._key(session_key), draft, timeout=self.ttl)

    def load(self, session_key: str) -> BookingDraft:
        draft = self.cache.get(self._key(session_key))
        if draft is None:
            raise SessionExpiredError()
        return draft

    def discard(self, session_key: str) -> None:
        self.cache.delete(self._key(session_key))

    def materialize(self, session_key: str, user) -> Booking:
        """Turn the session's draft into a booking; the slot is emptied either way."""
        draft = self.load(session_key)
        try:
            return materialize(draft, user)
        finally:
            self.discard(session_key)
