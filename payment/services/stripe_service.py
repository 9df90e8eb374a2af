"""
Stripe Checkout behind a small provider interface.

The rest of the code only sees ``CheckoutSession`` and ``SessionStatus``;
Stripe objects and errors stay in this module. The secret key is passed on
every request instead of being assigned to ``stripe.api_key``.
"""
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

import stripe
from django.conf import settings

from payment.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    url: str


@dataclass(frozen=True)
class SessionStatus:
    status: str
    payment_reference: str | None = None

    @property
    def is_paid(self) -> bool:
        return self.status == "paid"


def to_cents(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class StripePaymentProvider:
    def __init__(
            self,
            api_key: str,
            success_url: str,
            cancel_url: str,
            currency: str = "usd",
            webhook_secret: str = "",
    ) -> None:
        self.api_key = api_key
        self.success_url = success_url
        self.cancel_url = cancel_url
        self.currency = currency
        self.webhook_secret = webhook_secret

    def _credentials(self) -> dict:
        if not self.api_key:
            raise ExternalServiceError("Stripe secret key is not configured.")
        return {"api_key": self.api_key}

    def create_checkout_session(
            self,
            amount_cents: int,
            currency: str,
            metadata: dict,
            name: str = "Car Booking Payment",
    ) -> CheckoutSession:
        credentials = self._credentials()
        cancel_url = self.cancel_url.replace(
            "{payment_id}", str(metadata.get("payment_id", ""))
        )
        try:
            session = stripe.checkout.Session.create(
                mode="payment",
                payment_method_types=["card"],
                line_items=[
                    {
                        "price_data": {
                            "currency": currency,
                            "product_data": {
                                "name": name,
                            },
                            "unit_amount": amount_cents,
                        },
                        "quantity": 1,
                    }
                ],
                success_url=self.success_url,
                cancel_url=cancel_url,
                metadata=metadata,
                **credentials,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout session creation failed: {e}")
            raise ExternalServiceError(f"Stripe error: {e.user_message or e}") from e

        return CheckoutSession(session_id=session.id, url=session.url)

    def get_session_status(self, session_id: str) -> SessionStatus:
        credentials = self._credentials()
        try:
            session = stripe.checkout.Session.retrieve(session_id, **credentials)
        except stripe.StripeError as e:
            logger.error(f"Stripe session {session_id} lookup failed: {e}")
            raise ExternalServiceError(
                f"Payment verification failed: {e.user_message or e}"
            ) from e

        if session.status == "expired":
            return SessionStatus(status="expired")

        return SessionStatus(
            status=session.payment_status,
            payment_reference=session.payment_intent,
        )

    def get_payment_instrument_summary(self, payment_reference: str) -> str | None:
        """Last four card digits of a payment intent, if Stripe has them."""
        credentials = self._credentials()
        try:
            intent = stripe.PaymentIntent.retrieve(
                payment_reference,
                expand=["payment_method"],
                **credentials,
            )
        except stripe.StripeError as e:
            raise ExternalServiceError(str(e)) from e

        payment_method = intent.payment_method
        card = getattr(payment_method, "card", None)
        if card is None:
            return None
        return card.last4

    def construct_event(self, payload: bytes, signature: str | None):
        return stripe.Webhook.construct_event(payload, signature, self.webhook_secret)


def get_payment_provider() -> StripePaymentProvider:
    return StripePaymentProvider(
        api_key=settings.STRIPE_SECRET_KEY,
        success_url=settings.PAYMENT_SUCCESS_URL,
        cancel_url=settings.PAYMENT_CANCEL_URL,
        currency=settings.STRIPE_CURRENCY,
        webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
    )
