import logging
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.db import transaction

from booking.exceptions import BookingConflictError, BookingValidationError, NotFoundError
from booking.models import Booking
from booking.services import lifecycle
from booking.services.availability import is_available
from payment.models import Payment
from payment.services.stripe_service import to_cents
from payment.tasks import notify_successful_payment_telegram

logger = logging.getLogger(__name__)

WEBHOOK_EVENTS = (
    "checkout.session.completed",
    "checkout.session.async_payment_succeeded",
    "checkout.session.async_payment_failed",
    "checkout.session.expired",
)


@dataclass
class CheckoutHandle:
    payment: Payment
    redirect_url: str


@dataclass
class ReconciliationResult:
    payment: Payment
    booking: Booking
    provider_status: str
    paid: bool


class PaymentService:
    """
    Drives checkout with the payment provider and applies its verdict to
    local payments and bookings.

    A payment becomes Paid only after the provider itself reports the
    checkout session as paid; redirects and webhooks merely tell us which
    session to look up.
    """

    def __init__(self, provider, currency: str | None = None) -> None:
        self.provider = provider
        self.currency = currency or settings.STRIPE_CURRENCY

    def initiate_checkout(self, booking_id, amount: Decimal) -> CheckoutHandle:
        try:
            booking = Booking.objects.get(pk=booking_id)
        except Booking.DoesNotExist:
            raise NotFoundError("Booking", booking_id)

        if booking.status != Booking.BookingStatus.PENDING:
            raise BookingValidationError(
                "Only pending bookings can be paid.", field="booking"
            )
        if Decimal(amount) != booking.total_price:
            raise BookingValidationError(
                "Amount must match the booking total price.", field="amount"
            )
        if not is_available(booking.car_id, booking.start_date, booking.end_date):
            raise BookingConflictError(
                booking.car_id,
                "These dates have been booked by someone else. Please choose other dates.",
            )

        payment = Payment.objects.create(
            booking=booking,
            amount=booking.total_price,
            status=Payment.PaymentStatus.PENDING,
        )

        try:
            session = self.provider.create_checkout_session(
                amount_cents=to_cents(payment.amount),
                currency=self.currency,
                metadata={
                    "payment_id": str(payment.id),
                    "booking_id": str(booking.id),
                },
                name=f"Car booking #{booking.id}",
            )
        except Exception:
            logger.warning(
                f"Checkout session for Booking {booking.id} failed, "
                f"removing Payment {payment.id}"
            )
            payment.delete()
            raise

        payment.session_id = session.session_id
        payment.session_url = session.url
        payment.save(update_fields=["session_id", "session_url"])

        logger.info(f"Created Payment {payment.id} for Booking {booking.id}")
        return CheckoutHandle(payment=payment, redirect_url=session.url)

    def reconcile(self, session_id: str) -> ReconciliationResult:
        if not session_id:
            raise NotFoundError("Payment", session_id)
        try:
            payment = Payment.objects.get(session_id=session_id)
        except Payment.DoesNotExist:
            raise NotFoundError("Payment", session_id)

        if payment.status == Payment.PaymentStatus.PAID:
            booking = lifecycle.confirm(payment.booking_id)
            return ReconciliationResult(payment, booking, "paid", True)

        session_status = self.provider.get_session_status(session_id)

        if session_status.is_paid:
            card_last4 = self._card_last4(session_status.payment_reference)
            payment = self._mark_paid(
                payment.id, session_status.payment_reference, card_last4
            )
            if payment.status != Payment.PaymentStatus.PAID:
                return ReconciliationResult(
                    payment, payment.booking, session_status.status, False
                )
            booking = lifecycle.confirm(payment.booking_id)
            return ReconciliationResult(payment, booking, session_status.status, True)

        if session_status.status == "expired":
            payment = self._close(payment.id, Payment.PaymentStatus.FAILED)
            booking = lifecycle.cancel(payment.booking_id)
            return ReconciliationResult(payment, booking, session_status.status, False)

        logger.info(
            f"Payment {payment.id} not paid yet, provider status {session_status.status!r}"
        )
        return ReconciliationResult(
            payment, payment.booking, session_status.status, False
        )

    def cancel(self, payment_id) -> Payment:
        """Customer left the checkout page; a non-pending payment is left untouched."""
        try:
            payment = Payment.objects.get(pk=payment_id)
        except Payment.DoesNotExist:
            raise NotFoundError("Payment", payment_id)

        if payment.status != Payment.PaymentStatus.PENDING:
            return payment

        payment = self._close(payment.id, Payment.PaymentStatus.CANCELLED)
        if payment.status == Payment.PaymentStatus.CANCELLED:
            lifecycle.cancel(payment.booking_id)
        return payment

    def handle_webhook_event(self, event) -> ReconciliationResult | None:
        if event["type"] not in WEBHOOK_EVENTS:
            return None
        return self.reconcile(event["data"]["object"]["id"])

    def _card_last4(self, payment_reference: str | None) -> str:
        if not payment_reference:
            return ""
        try:
            return self.provider.get_payment_instrument_summary(payment_reference) or ""
        except Exception as e:
            logger.warning(f"Card details for {payment_reference} unavailable: {e}")
            return ""

    def _mark_paid(self, payment_id, payment_reference, card_last4) -> Payment:
        with transaction.atomic():
            payment = Payment.objects.select_for_update().get(pk=payment_id)

            if payment.status == Payment.PaymentStatus.PAID:
                return payment

            already_paid = (
                Payment.objects.filter(
                    booking_id=payment.booking_id,
                    status=Payment.PaymentStatus.PAID,
                )
                .exclude(pk=payment.pk)
                .exists()
            )
            if already_paid:
                logger.error(
                    f"Booking {payment.booking_id} is already paid, Payment "
                    f"{payment.id} ({payment_reference}) needs a refund"
                )
                return payment

            payment.status = Payment.PaymentStatus.PAID
            update_fields = ["status"]
            if payment_reference and not payment.transaction_id:
                payment.transaction_id = payment_reference
                update_fields.append("transaction_id")
            if card_last4:
                payment.card_last4 = card_last4
                update_fields.append("card_last4")
            payment.save(update_fields=update_fields)

            booking_id = payment.booking_id
            transaction.on_commit(
                lambda: notify_successful_payment_telegram.delay(booking_id)
            )

        logger.info(f"Payment {payment.id} paid, transaction {payment.transaction_id}")
        return payment

    def _close(self, payment_id, new_status) -> Payment:
        with transaction.atomic():
            payment = Payment.objects.select_for_update().get(pk=payment_id)
            if payment.status != Payment.PaymentStatus.PENDING:
                return payment
            payment.status = new_status
            payment.save(update_fields=["status"])

        logger.info(f"Payment {payment.id} {new_status}")
        return payment
