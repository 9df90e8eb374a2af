from rest_framework import serializers

from booking.models import Booking
from car.serializers import CarSerializer
from payment.serializers import PaymentSerializer


class BookingReadSerializer(serializers.ModelSerializer):
    car_name = serializers.CharField(source="car.__str__", read_only=True)
    user_email = serializers.EmailField(source="user.email", read_only=True)
    days = serializers.IntegerField(read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)

    class Meta:
        model = Booking
        fields = (
            "id",
            "car",
            "car_name",
            "user",
            "user_email",
            "start_date",
            "end_date",
            "days",
            "total_price",
            "status",
            "created_at",
            "payments",
        )


class BookingDraftRequestSerializer(serializers.Serializer):
    """Input of the draft screen; business rules are checked by the draft service."""

    car = serializers.IntegerField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()


class BookingDraftSerializer(serializers.Serializer):
    car = serializers.IntegerField(source="car_id")
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    days = serializers.IntegerField()
    total_price = serializers.DecimalField(max_digits=10, decimal_places=2)


class DraftScreenSerializer(serializers.Serializer):
    car = CarSerializer()
    min_start_date = serializers.DateField()


class CheckoutSerializer(serializers.Serializer):
    booking = BookingReadSerializer(source="payment.booking")
    payment_id = serializers.IntegerField(source="payment.id")
    checkout_url = serializers.URLField(source="redirect_url")
