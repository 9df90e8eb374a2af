import django_filters

from booking.models import Booking


class BookingFilter(django_filters.FilterSet):
    from_date = django_filters.DateFilter(
        field_name="start_date", lookup_expr="gte"
    )
    to_date = django_filters.DateFilter(
        field_name="end_date", lookup_expr="lte"
    )

    category = django_filters.NumberFilter(field_name="car__category")

    class Meta:
        model = Booking
        fields = ["user", "car", "status"]
