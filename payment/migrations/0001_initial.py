import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("booking", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=[("Pending", "Pending"), ("Paid", "Paid"), ("Cancelled", "Cancelled"), ("Failed", "Failed")], default="Pending", max_length=20)),
                ("method", models.CharField(choices=[("Stripe", "Stripe")], default="Stripe", max_length=20)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("session_id", models.CharField(blank=True, db_index=True, max_length=255)),
                ("session_url", models.URLField(blank=True, max_length=1024)),
                ("transaction_id", models.CharField(blank=True, max_length=255)),
                ("card_last4", models.CharField(blank=True, max_length=4)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("booking", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="payments", to="booking.booking")),
            ],
            options={
                "ordering": ("-created_at",),
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("status", "Paid")), fields=("booking",), name="one_paid_payment_per_booking"),
                ],
            },
        ),
    ]
