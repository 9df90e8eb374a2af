from rest_framework import serializers

from payment.models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = (
            "id",
            "booking",
            "status",
            "method",
            "amount",
            "session_url",
            "transaction_id",
            "card_last4",
            "created_at",
        )
        read_only_fields = fields


class CheckoutRequestSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False
    )


class ReconciliationSerializer(serializers.Serializer):
    paid = serializers.BooleanField()
    provider_status = serializers.CharField()
    payment = PaymentSerializer()
    booking_id = serializers.IntegerField(source="booking.id")
    booking_status = serializers.CharField(source="booking.status")
