import logging

from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from booking.models import Booking
from notifications.tasks import send_telegram_notification

logger = logging.getLogger(__name__)

STATUS_HEADLINES = {
    Booking.BookingStatus.CONFIRMED: "✅ Booking confirmed",
    Booking.BookingStatus.CANCELLED: "❌ Booking cancelled",
    Booking.BookingStatus.APPROVED: "👍 Booking approved",
    Booking.BookingStatus.REJECTED: "🚫 Booking rejected",
}


def booking_message(headline: str, booking: Booking) -> str:
    return (
        f"{headline}\n"
        f"Booking ID: {booking.id}\n"
        f"Customer: {booking.user.email}\n"
        f"Car: {booking.car}\n"
        f"Dates: {booking.start_date} - {booking.end_date}\n"
        f"Total: ${booking.total_price}"
    )


@receiver(post_save, sender=Booking)
def booking_notification(sender, instance, created, update_fields=None, **kwargs):
    if created:
        headline = "🆕 New booking awaiting payment"
    elif update_fields and "status" in update_fields:
        headline = STATUS_HEADLINES.get(instance.status)
        if headline is None:
            return
    else:
        return

    message = booking_message(headline, instance)
    transaction.on_commit(lambda: send_telegram_notification.delay(message))
    logger.info(f"Queued {instance.status} notification for Booking {instance.id}")
