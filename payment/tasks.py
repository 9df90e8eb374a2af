from celery import shared_task

from booking.models import Booking
from notifications.tasks import send_telegram_notification
from payment.models import Payment


@shared_task
def notify_successful_payment_telegram(booking_id):
    """Send detailed notification to Telegram about successful payment"""
    try:
        booking = Booking.objects.select_related("car", "user").get(id=booking_id)
        payment = booking.payments.get(status=Payment.PaymentStatus.PAID)
    except (Booking.DoesNotExist, Payment.DoesNotExist):
        return f"Could not find booking or payment for booking_id {booking_id}"

    card = f" (card •••• {payment.card_last4})" if payment.card_last4 else ""
    message = (
        f"✅ Payment Successful\n"
        f"Booking ID: {booking.id}\n"
        f"Customer: {booking.user.email}\n"
        f"Car: {booking.car}\n"
        f"Dates: {booking.start_date} - {booking.end_date}\n"
        f"Amount Paid: ${payment.amount}{card}"
    )
    send_telegram_notification.delay(message)
    return "Successfully triggered success notification."
