from datetime import timedelta

from django.utils.dateparse import parse_date
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.viewsets import ModelViewSet

from booking.services.availability import booked_dates
from car.models import Car, Category
from car.permissions import IsAdminOrReadOnly
from car.serializers import CarCalendarSerializer, CarSerializer, CategorySerializer

MAX_CALENDAR_DAYS = 366


class CategoryViewSet(ModelViewSet):
    queryset = Category.objects.all().order_by("name")
    serializer_class = CategorySerializer
    permission_classes = (IsAdminOrReadOnly,)


class CarViewSet(ModelViewSet):
    queryset = Car.objects.select_related("category").order_by("id")
    serializer_class = CarSerializer
    permission_classes = (IsAdminOrReadOnly,)

    filterset_fields = ("category", "is_available", "brand")

    def get_serializer_class(self):
        if self.action == "get_calendar":
            return CarCalendarSerializer
        return CarSerializer

    @extend_schema(
        request=None,
        parameters=[
            OpenApiParameter(
                name="date_from",
                type=OpenApiTypes.DATE,
                location=OpenApiParameter.QUERY,
                description="First day of the window (YYYY-MM-DD)",
                required=True,
            ),
            OpenApiParameter(
                name="date_to",
                type=OpenApiTypes.DATE,
                location=OpenApiParameter.QUERY,
                description="Last day of the window, inclusive (YYYY-MM-DD)",
                required=True,
            ),
        ],
        responses={
            200: CarCalendarSerializer(many=True),
            400: {
                "description": "Bad Request",
                "examples": [
                    {"detail": "date_from and date_to are required"},
                    {"detail": "date_from must be before date_to"},
                    {"detail": "The window can span at most 366 days"},
                ],
            },
        },
        description=(
                "Get the availability calendar of a car for a date window.\n\n"
                "Only Confirmed (paid) bookings occupy days; bookings awaiting "
                "payment do not."
        ),
    )
    @action(methods=["GET"], detail=True, url_path="calendar", filter_backends=[])
    def get_calendar(self, request, pk=None):
        car = self.get_object()

        date_from_str = request.query_params.get("date_from")
        date_to_str = request.query_params.get("date_to")

        if not date_from_str or not date_to_str:
            return Response(
                {"detail": "date_from and date_to are required"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        date_from = parse_date(date_from_str)
        date_to = parse_date(date_to_str)

        if not date_from or not date_to:
            return Response(
                {"detail": "Invalid date format. Use YYYY-MM-DD."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        if date_from > date_to:
            return Response(
                {"detail": "date_from must be before date_to"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        if (date_to - date_from).days >= MAX_CALENDAR_DAYS:
            return Response(
                {"detail": f"The window can span at most {MAX_CALENDAR_DAYS} days"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        occupied = booked_dates(car.id, date_from, date_to)

        calendar = []
        current_date = date_from
        while current_date <= date_to:
            calendar.append({
                "date": current_date,
                "available": current_date not in occupied,
            })
            current_date += timedelta(days=1)

        serializer = CarCalendarSerializer(calendar, many=True)
        return Response(serializer.data)
