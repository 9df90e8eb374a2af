"""
Status transitions of a booking.

Payment drives Pending -> Confirmed and Pending -> Cancelled. Administrators
put Approved / Rejected over any status through a separate channel that
never touches payments.
"""
import logging

from django.db import transaction

from booking.exceptions import BookingConflictError, BookingValidationError, NotFoundError
from booking.models import Booking
from booking.services.availability import overlapping_bookings
from car.models import Car
from payment.models import Payment

logger = logging.getLogger(__name__)

ADMIN_LABELS = (Booking.BookingStatus.APPROVED, Booking.BookingStatus.REJECTED)


def _get_booking(booking_id, for_update=False) -> Booking:
    queryset = Booking.objects.all()
    if for_update:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(pk=booking_id)
    except Booking.DoesNotExist:
        raise NotFoundError("Booking", booking_id)


def confirm(booking_id) -> Booking:
    """
    Pending -> Confirmed after a verified payment.

    A booking cancelled because its checkout was abandoned is reinstated when
    a payment for it turns out paid after all, provided its dates are free.

    The car row is locked first so that confirmations for the same car run
    one at a time; the overlap test and the status write commit together or
    not at all.
    """
    car_id = _get_booking(booking_id).car_id

    with transaction.atomic():
        Car.objects.select_for_update().get(pk=car_id)
        booking = _get_booking(booking_id, for_update=True)

        if booking.status == Booking.BookingStatus.CONFIRMED:
            return booking
        elif booking.status in (
            Booking.BookingStatus.APPROVED,
            Booking.BookingStatus.REJECTED,
        ):
            logger.warning(
                f"Booking {booking.id} is {booking.status}, payment does not confirm it"
            )
            return booking
        elif booking.status == Booking.BookingStatus.CANCELLED:
            if not booking.payments.filter(status=Payment.PaymentStatus.PAID).exists():
                logger.warning(f"Booking {booking.id} is Cancelled and unpaid")
                return booking
            logger.info(
                f"Booking {booking.id} was paid after its checkout was abandoned, "
                f"reinstating it"
            )
        elif booking.status != Booking.BookingStatus.PENDING:
            raise ValueError(f"Unknown booking status {booking.status!r}")

        conflicts = overlapping_bookings(
            booking.car_id,
            booking.start_date,
            booking.end_date,
            exclude_id=booking.id,
        )
        if conflicts.exists():
            logger.warning(
                f"Booking {booking.id} overlaps confirmed bookings "
                f"{list(conflicts.values_list('id', flat=True))} on car {booking.car_id}"
            )
            if booking.status == Booking.BookingStatus.CANCELLED:
                logger.error(
                    f"Booking {booking.id} is paid but its dates are taken, "
                    f"the payment needs a refund"
                )
                raise BookingConflictError(
                    booking.car_id,
                    "The car was booked by someone else before your payment "
                    "arrived. The payment will be refunded.",
                )
            raise BookingConflictError(booking.car_id)

        booking.status = Booking.BookingStatus.CONFIRMED
        booking.save(update_fields=["status"])

    logger.info(f"Confirmed Booking {booking.id}")
    return booking


def cancel(booking_id) -> Booking:
    """
    Pending -> Cancelled when checkout was abandoned.

    A booking with a paid payment, or with another checkout still open,
    stays as is.
    """
    with transaction.atomic():
        booking = _get_booking(booking_id, for_update=True)

        if booking.status != Booking.BookingStatus.PENDING:
            return booking

        if booking.payments.filter(
            status__in=(Payment.PaymentStatus.PAID, Payment.PaymentStatus.PENDING)
        ).exists():
            logger.info(f"Booking {booking.id} has a live payment, left {booking.status}")
            return booking

        booking.status = Booking.BookingStatus.CANCELLED
        booking.save(update_fields=["status"])

    logger.info(f"Cancelled Booking {booking.id}")
    return booking


def set_admin_label(booking_id, label) -> Booking:
    if label not in ADMIN_LABELS:
        raise BookingValidationError(
            "Administrators can only approve or reject a booking.", field="status"
        )

    booking = _get_booking(booking_id)
    booking.status = label
    booking.save(update_fields=["status"])

    logger.info(f"Booking {booking.id} marked {label} by administrator")
    return booking
