from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model

from booking.models import Booking
from car.models import Car


def create_customer(**params):
    defaults = {
        "email": "driver@test.com",
        "password": "testpass123",
    }
    defaults.update(params)
    return get_user_model().objects.create_user(**defaults)


def create_car(**params):
    defaults = {
        "brand": "Toyota",
        "model": "Corolla",
        "year": 2022,
        "plate_number": "AA1234BB",
        "daily_price": Decimal("50.00"),
    }
    defaults.update(params)
    return Car.objects.create(**defaults)


def create_booking(
        car,
        user,
        start_date=date(2024, 6, 1),
        end_date=date(2024, 6, 5),
        booking_status=Booking.BookingStatus.CONFIRMED,
):
    return Booking.objects.create(
        car=car,
        user=user,
        start_date=start_date,
        end_date=end_date,
        total_price=car.daily_price * (end_date - start_date).days,
        status=booking_status,
    )
