from datetime import date
from decimal import Decimal

from django.test import TestCase

from booking.exceptions import BookingConflictError, BookingValidationError, NotFoundError
from booking.models import Booking
from booking.services.drafts import materialize, propose
from booking.tests.helpers import create_booking, create_car, create_customer
from payment.exceptions import ExternalServiceError
from payment.models import Payment
from payment.services.payment_service import PaymentService
from payment.tests.fakes import FakeProvider

TODAY = date(2024, 5, 20)


class PaymentServiceTestCase(TestCase):
    def setUp(self):
        self.user = create_customer()
        self.other_user = create_customer(email="other@test.com")
        self.car = create_car()
        self.booking = create_booking(
            self.car,
            self.user,
            date(2024, 6, 5),
            date(2024, 6, 7),
            Booking.BookingStatus.PENDING,
        )
        self.provider = FakeProvider()

    def service(self, **provider_options):
        if provider_options:
            self.provider = FakeProvider(**provider_options)
        return PaymentService(self.provider)

    def open_checkout(self, service):
        return service.initiate_checkout(self.booking.id, self.booking.total_price)

    def confirm_for_other_customer(self, start_date, end_date):
        return create_booking(self.car, self.other_user, start_date, end_date)


class InitiateCheckoutTests(PaymentServiceTestCase):
    def test_creates_pending_payment(self):
        handle = self.service().initiate_checkout(self.booking.id, Decimal("100.00"))

        payment = Payment.objects.get(booking=self.booking)
        self.assertEqual(handle.payment, payment)
        self.assertEqual(handle.redirect_url, "https://checkout.stripe.test/cs_test_1")
        self.assertEqual(payment.status, Payment.PaymentStatus.PENDING)
        self.assertEqual(payment.amount, Decimal("100.00"))
        self.assertEqual(payment.session_id, "cs_test_1")

        request = self.provider.created[0]
        self.assertEqual(request["amount_cents"], 10000)
        self.assertEqual(request["currency"], "usd")
        self.assertEqual(
            request["metadata"],
            {"payment_id": str(payment.id), "booking_id": str(self.booking.id)},
        )

    def test_rolls_back_payment_when_provider_fails(self):
        with self.assertRaises(ExternalServiceError):
            self.open_checkout(self.service(fail_create=True))

        self.assertFalse(Payment.objects.exists())

    def test_requires_matching_amount(self):
        with self.assertRaises(BookingValidationError) as ctx:
            self.service().initiate_checkout(self.booking.id, Decimal("99.99"))

        self.assertEqual(ctx.exception.field, "amount")
        self.assertFalse(Payment.objects.exists())
        self.assertEqual(self.provider.created, [])

    def test_only_for_pending_bookings(self):
        confirmed = create_booking(self.car, self.user, date(2024, 7, 1), date(2024, 7, 3))

        with self.assertRaises(BookingValidationError):
            self.service().initiate_checkout(confirmed.id, confirmed.total_price)

    def test_refuses_dates_confirmed_by_someone_else(self):
        self.confirm_for_other_customer(date(2024, 6, 6), date(2024, 6, 9))

        with self.assertRaises(BookingConflictError):
            self.open_checkout(self.service())

        self.assertFalse(Payment.objects.exists())
        self.assertEqual(self.provider.created, [])

    def test_unknown_booking(self):
        with self.assertRaises(NotFoundError):
            self.service().initiate_checkout(4040, Decimal("10.00"))


class ReconcileTests(PaymentServiceTestCase):
    def test_paid_session_confirms_booking(self):
        service = self.service()
        handle = self.open_checkout(service)

        result = service.reconcile(handle.payment.session_id)

        self.assertTrue(result.paid)
        self.assertEqual(result.provider_status, "paid")
        payment = Payment.objects.get(pk=handle.payment.pk)
        self.assertEqual(payment.status, Payment.PaymentStatus.PAID)
        self.assertEqual(payment.transaction_id, "pi_test_123")
        self.assertEqual(payment.card_last4, "4242")
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.BookingStatus.CONFIRMED)

    def test_reconcile_twice_is_idempotent(self):
        service = self.service()
        handle = self.open_checkout(service)

        first = service.reconcile(handle.payment.session_id)
        second = service.reconcile(handle.payment.session_id)

        self.assertEqual(
            (first.paid, first.provider_status), (second.paid, second.provider_status)
        )
        self.assertEqual(second.booking.status, Booking.BookingStatus.CONFIRMED)
        self.assertEqual(Payment.objects.filter(status=Payment.PaymentStatus.PAID).count(), 1)
        self.assertEqual(
            Booking.objects.filter(status=Booking.BookingStatus.CONFIRMED).count(), 1
        )
        self.assertEqual(len(self.provider.status_calls), 1)

    def test_never_reassigns_transaction_reference(self):
        service = self.service()
        handle = self.open_checkout(service)
        service.reconcile(handle.payment.session_id)

        self.provider.payment_reference = "pi_test_other"
        service.reconcile(handle.payment.session_id)

        handle.payment.refresh_from_db()
        self.assertEqual(handle.payment.transaction_id, "pi_test_123")

    def test_unpaid_session_changes_nothing(self):
        service = self.service(status="unpaid")
        handle = self.open_checkout(service)

        result = service.reconcile(handle.payment.session_id)

        self.assertFalse(result.paid)
        self.assertEqual(result.provider_status, "unpaid")
        handle.payment.refresh_from_db()
        self.booking.refresh_from_db()
        self.assertEqual(handle.payment.status, Payment.PaymentStatus.PENDING)
        self.assertEqual(self.booking.status, Booking.BookingStatus.PENDING)

    def test_expired_session_fails_payment_and_cancels_booking(self):
        service = self.service(status="expired")
        handle = self.open_checkout(service)

        result = service.reconcile(handle.payment.session_id)

        self.assertFalse(result.paid)
        self.assertEqual(result.payment.status, Payment.PaymentStatus.FAILED)
        self.assertEqual(result.booking.status, Booking.BookingStatus.CANCELLED)

    def test_provider_error_never_marks_paid(self):
        service = self.service(fail_status=True)
        handle = self.open_checkout(service)

        with self.assertRaises(ExternalServiceError):
            service.reconcile(handle.payment.session_id)

        handle.payment.refresh_from_db()
        self.assertEqual(handle.payment.status, Payment.PaymentStatus.PENDING)

    def test_survives_card_detail_failure(self):
        service = self.service(fail_card=True)
        handle = self.open_checkout(service)

        result = service.reconcile(handle.payment.session_id)

        self.assertTrue(result.paid)
        self.assertEqual(result.payment.card_last4, "")
        self.assertEqual(result.booking.status, Booking.BookingStatus.CONFIRMED)

    def test_unknown_session(self):
        service = self.service()

        with self.assertRaises(NotFoundError):
            service.reconcile("cs_unknown")

        self.assertEqual(self.provider.status_calls, [])

    def test_reports_conflict_when_dates_were_taken(self):
        service = self.service()
        handle = self.open_checkout(service)
        self.confirm_for_other_customer(date(2024, 6, 6), date(2024, 6, 9))

        with self.assertRaises(BookingConflictError):
            service.reconcile(handle.payment.session_id)

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.BookingStatus.PENDING)


class AbandonedCheckoutTests(PaymentServiceTestCase):
    def test_cancel_pending_payment_cancels_booking(self):
        service = self.service()
        handle = self.open_checkout(service)

        payment = service.cancel(handle.payment.id)

        self.assertEqual(payment.status, Payment.PaymentStatus.CANCELLED)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.BookingStatus.CANCELLED)

    def test_cancel_paid_payment_is_a_no_op(self):
        service = self.service()
        handle = self.open_checkout(service)
        service.reconcile(handle.payment.session_id)

        payment = service.cancel(handle.payment.id)

        self.assertEqual(payment.status, Payment.PaymentStatus.PAID)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.BookingStatus.CONFIRMED)

    def test_cancel_unknown_payment(self):
        with self.assertRaises(NotFoundError):
            self.service().cancel(777)

    def test_cancelling_one_checkout_keeps_booking_for_the_other(self):
        service = self.service()
        abandoned = self.open_checkout(service)
        second = self.open_checkout(service)

        service.cancel(abandoned.payment.id)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.BookingStatus.PENDING)

        result = service.reconcile(second.payment.session_id)

        self.assertTrue(result.paid)
        self.assertEqual(result.payment.status, Payment.PaymentStatus.PAID)
        self.assertEqual(result.booking.status, Booking.BookingStatus.CONFIRMED)

    def test_payment_arriving_after_cancel_reinstates_booking(self):
        service = self.service()
        handle = self.open_checkout(service)
        service.cancel(handle.payment.id)

        result = service.reconcile(handle.payment.session_id)

        self.assertTrue(result.paid)
        self.assertEqual(result.payment.status, Payment.PaymentStatus.PAID)
        self.assertEqual(result.booking.status, Booking.BookingStatus.CONFIRMED)

    def test_payment_arriving_after_cancel_for_taken_dates(self):
        service = self.service()
        handle = self.open_checkout(service)
        service.cancel(handle.payment.id)
        self.confirm_for_other_customer(date(2024, 6, 6), date(2024, 6, 9))

        with self.assertRaises(BookingConflictError):
            service.reconcile(handle.payment.session_id)

        handle.payment.refresh_from_db()
        self.booking.refresh_from_db()
        self.assertEqual(handle.payment.status, Payment.PaymentStatus.PAID)
        self.assertEqual(self.booking.status, Booking.BookingStatus.CANCELLED)


class WebhookTests(PaymentServiceTestCase):
    def test_event_reconciles_session(self):
        service = self.service()
        handle = self.open_checkout(service)
        event = {
            "type": "checkout.session.completed",
            "data": {"object": {"id": handle.payment.session_id}},
        }

        result = service.handle_webhook_event(event)

        self.assertTrue(result.paid)
        self.assertEqual(self.provider.status_calls, [handle.payment.session_id])

    def test_ignores_unrelated_events(self):
        event = {"type": "customer.created", "data": {"object": {"id": "cus_1"}}}

        self.assertIsNone(self.service().handle_webhook_event(event))


class RentalFlowTests(PaymentServiceTestCase):
    def test_full_rental_flow(self):
        self.booking.delete()
        self.confirm_for_other_customer(date(2024, 6, 1), date(2024, 6, 5))
        service = self.service()

        draft = propose(self.car.id, date(2024, 6, 5), date(2024, 6, 7), today=TODAY)
        booking = materialize(draft, self.user)
        handle = service.initiate_checkout(booking.id, draft.total_price)
        result = service.reconcile(handle.payment.session_id)

        self.assertEqual(booking.total_price, Decimal("100.00"))
        self.assertTrue(result.paid)
        self.assertEqual(result.booking.status, Booking.BookingStatus.CONFIRMED)
        self.assertEqual(
            Booking.objects.filter(
                car=self.car, status=Booking.BookingStatus.CONFIRMED
            ).count(),
            2,
        )
