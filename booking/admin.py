from django.contrib import admin

from booking.models import Booking
from booking.services import lifecycle


@admin.action(description="Approve selected bookings")
def approve_bookings(modeladmin, request, queryset):
    for booking in queryset:
        lifecycle.set_admin_label(booking.id, Booking.BookingStatus.APPROVED)


@admin.action(description="Reject selected bookings")
def reject_bookings(modeladmin, request, queryset):
    for booking in queryset:
        lifecycle.set_admin_label(booking.id, Booking.BookingStatus.REJECTED)


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "car",
        "user",
        "start_date",
        "end_date",
        "total_price",
        "status",
        "created_at",
    )

    list_filter = (
        "status",
        "start_date",
        "end_date",
        "car",
    )

    search_fields = (
        "user__email",
        "car__plate_number",
    )

    readonly_fields = ("status", "total_price")
    actions = (approve_bookings, reject_bookings)
    ordering = ("-start_date",)
