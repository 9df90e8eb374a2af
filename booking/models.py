from django.conf import settings
from django.db import models
from django.db.models import F, ForeignKey, Q

from car.models import Car


class Booking(models.Model):
    class BookingStatus(models.TextChoices):
        PENDING = "Pending"
        CONFIRMED = "Confirmed"
        APPROVED = "Approved"
        REJECTED = "Rejected"
        CANCELLED = "Cancelled"

    car = ForeignKey(Car, on_delete=models.PROTECT, related_name="bookings")
    user = ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE,
                      related_name="bookings")
    start_date = models.DateField()
    end_date = models.DateField()
    total_price = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(
        choices=BookingStatus,
        max_length=20,
        default=BookingStatus.PENDING,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at",)
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__gt=F("start_date")),
                name="end_date_after_start_date",
            ),
        ]

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"Booking #{self.pk} {self.car} {self.start_date}..{self.end_date}"
