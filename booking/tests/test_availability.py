from datetime import date
from decimal import Decimal

from django.test import TestCase

from booking.models import Booking
from booking.services.availability import (
    booked_dates,
    is_available,
    min_start_date,
    overlapping_bookings,
)
from booking.tests.helpers import create_booking, create_car, create_customer


class AvailabilityTests(TestCase):
    def setUp(self):
        self.user = create_customer()
        self.car = create_car()

    def book(self, start_date, end_date, booking_status=Booking.BookingStatus.CONFIRMED):
        return create_booking(self.car, self.user, start_date, end_date, booking_status)

    def test_overlapping_range_is_not_available(self):
        self.book(date(2024, 6, 1), date(2024, 6, 5))

        self.assertFalse(is_available(self.car.id, date(2024, 6, 3), date(2024, 6, 7)))
        self.assertFalse(is_available(self.car.id, date(2024, 5, 28), date(2024, 6, 2)))
        self.assertFalse(is_available(self.car.id, date(2024, 6, 2), date(2024, 6, 3)))

    def test_back_to_back_ranges_do_not_conflict(self):
        self.book(date(2024, 6, 1), date(2024, 6, 5))

        self.assertTrue(is_available(self.car.id, date(2024, 6, 5), date(2024, 6, 7)))
        self.assertTrue(is_available(self.car.id, date(2024, 5, 28), date(2024, 6, 1)))

    def test_only_confirmed_bookings_block(self):
        for booking_status in (
            Booking.BookingStatus.PENDING,
            Booking.BookingStatus.CANCELLED,
            Booking.BookingStatus.APPROVED,
            Booking.BookingStatus.REJECTED,
        ):
            with self.subTest(status=booking_status):
                self.book(date(2024, 6, 1), date(2024, 6, 5), booking_status)

                self.assertTrue(
                    is_available(self.car.id, date(2024, 6, 1), date(2024, 6, 5))
                )

    def test_bookings_of_other_cars_are_ignored(self):
        other_car = create_car(
            brand="Skoda",
            model="Octavia",
            plate_number="KA0001AA",
            daily_price=Decimal("40.00"),
        )
        create_booking(other_car, self.user, date(2024, 6, 1), date(2024, 6, 5))

        self.assertTrue(is_available(self.car.id, date(2024, 6, 1), date(2024, 6, 5)))

    def test_overlapping_bookings_can_exclude_a_booking(self):
        booking = self.book(date(2024, 6, 1), date(2024, 6, 5))

        self.assertTrue(
            overlapping_bookings(self.car.id, booking.start_date, booking.end_date).exists()
        )
        self.assertFalse(
            overlapping_bookings(
                self.car.id, booking.start_date, booking.end_date, exclude_id=booking.id
            ).exists()
        )

    def test_min_start_date_follows_latest_confirmed_booking(self):
        self.book(date(2024, 6, 1), date(2024, 6, 5))
        self.book(date(2024, 6, 10), date(2024, 6, 12))
        self.book(date(2024, 6, 20), date(2024, 6, 25), Booking.BookingStatus.PENDING)

        self.assertEqual(
            min_start_date(self.car.id, today=date(2024, 6, 2)), date(2024, 6, 12)
        )

    def test_min_start_date_is_today_without_bookings(self):
        self.assertEqual(
            min_start_date(self.car.id, today=date(2024, 6, 2)), date(2024, 6, 2)
        )

    def test_booked_dates_lists_occupied_days(self):
        self.book(date(2024, 6, 1), date(2024, 6, 4))

        days = booked_dates(self.car.id, date(2024, 6, 2), date(2024, 6, 10))

        self.assertEqual(days, {date(2024, 6, 1), date(2024, 6, 2), date(2024, 6, 3)})
