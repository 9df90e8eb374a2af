from django.contrib import admin

from payment.models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "booking",
        "amount",
        "method",
        "status",
        "card_last4",
        "created_at",
    )
    list_filter = ("status", "method")
    search_fields = ("session_id", "transaction_id", "booking__user__email")
    readonly_fields = ("session_id", "session_url", "transaction_id", "card_last4")
