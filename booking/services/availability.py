"""
Date-range availability of cars.

Ranges are half-open ``[start, end)``: a booking ending on the 5th and one
starting on the 5th do not overlap. Only Confirmed bookings occupy a car;
bookings still waiting for payment never block other customers. These checks
are advisory, the confirm transition in ``booking.services.lifecycle`` repeats
the overlap test under a lock.
"""
from datetime import date, timedelta

from django.utils import timezone

from booking.models import Booking


def overlapping_bookings(car_id, start_date: date, end_date: date, exclude_id=None):
    queryset = Booking.objects.filter(
        car_id=car_id,
        status=Booking.BookingStatus.CONFIRMED,
        start_date__lt=end_date,
        end_date__gt=start_date,
    )
    if exclude_id is not None:
        queryset = queryset.exclude(pk=exclude_id)
    return queryset


def is_available(car_id, start_date: date, end_date: date) -> bool:
    return not overlapping_bookings(car_id, start_date, end_date).exists()


def min_start_date(car_id, today: date | None = None) -> date:
    """Earliest start date after the last running confirmed booking."""
    today = today or timezone.localdate()
    latest = (
        Booking.objects.filter(
            car_id=car_id,
            status=Booking.BookingStatus.CONFIRMED,
            end_date__gte=today,
        )
        .order_by("-end_date")
        .first()
    )
    if latest is None:
        return today
    return latest.end_date


def booked_dates(car_id, date_from: date, date_to: date) -> set[date]:
    """Days in ``[date_from, date_to]`` occupied by confirmed bookings."""
    bookings = overlapping_bookings(
        car_id, date_from, date_to + timedelta(days=1)
    ).only("start_date", "end_date")

    days = set()
    for booking in bookings:
        current = booking.start_date
        while current < booking.end_date:
            days.add(current)
            current += timedelta(days=1)
    return days
