from django.db import models
from django.db.models import ForeignKey, Q

from booking.models import Booking


class Payment(models.Model):
    class PaymentStatus(models.TextChoices):
        PENDING = "Pending"
        PAID = "Paid"
        CANCELLED = "Cancelled"
        FAILED = "Failed"

    class PaymentMethod(models.TextChoices):
        STRIPE = "Stripe"

    status = models.CharField(
        choices=PaymentStatus,
        max_length=20,
        default=PaymentStatus.PENDING,
    )
    method = models.CharField(
        choices=PaymentMethod,
        max_length=20,
        default=PaymentMethod.STRIPE,
    )
    booking = ForeignKey(Booking, related_name="payments",
                         on_delete=models.CASCADE)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    session_id = models.CharField(max_length=255, blank=True, db_index=True)
    session_url = models.URLField(max_length=1024, blank=True)
    transaction_id = models.CharField(max_length=255, blank=True)
    card_last4 = models.CharField(max_length=4, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at",)
        constraints = [
            models.UniqueConstraint(
                fields=["booking"],
                condition=Q(status="Paid"),
                name="one_paid_payment_per_booking",
            ),
        ]

    def __str__(self):
        return f"Payment #{self.pk} {self.amount} ({self.status})"
