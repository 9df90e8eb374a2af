import logging

from django.shortcuts import get_object_or_404
from django.urls import reverse
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiTypes,
    extend_schema,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from booking.api_errors import HANDLED_ERRORS, error_response
from booking.exceptions import BookingConflictError
from booking.filters import BookingFilter
from booking.models import Booking
from booking.serializers import (
    BookingDraftRequestSerializer,
    BookingDraftSerializer,
    BookingReadSerializer,
    CheckoutSerializer,
    DraftScreenSerializer,
)
from booking.services import lifecycle
from booking.services.availability import is_available, min_start_date
from booking.services.drafts import DraftStore, propose
from car.models import Car
from payment.serializers import CheckoutRequestSerializer
from payment.services.payment_service import PaymentService
from payment.services.stripe_service import get_payment_provider

logger = logging.getLogger(__name__)


def draft_session_key(request) -> str:
    return f"user-{request.user.pk}"


class DraftScreenView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: DraftScreenSerializer})
    def get(self, request, car_id):
        """Data for the booking form of one car."""
        car = get_object_or_404(Car.objects.select_related("category"), pk=car_id)

        if not car.is_available:
            return Response(
                {"detail": "This car is not available for rent."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        serializer = DraftScreenSerializer(
            {"car": car, "min_start_date": min_start_date(car.id)}
        )
        return Response(serializer.data)


class DraftView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=BookingDraftRequestSerializer,
        responses={201: BookingDraftSerializer},
        description=(
            "Validate dates for a car and keep the priced draft for the pay "
            "screen. Nothing is reserved yet; the `Location` header points "
            "to the pay screen."
        ),
    )
    def post(self, request):
        serializer = BookingDraftRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            draft = propose(
                car_id=serializer.validated_data["car"],
                start_date=serializer.validated_data["start_date"],
                end_date=serializer.validated_data["end_date"],
            )
        except HANDLED_ERRORS as e:
            return error_response(e)

        DraftStore().save(draft_session_key(request), draft)

        return Response(
            BookingDraftSerializer(draft).data,
            status=status.HTTP_201_CREATED,
            headers={"Location": reverse("booking:draft-current")},
        )


class CurrentDraftView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: BookingDraftSerializer})
    def get(self, request):
        """Pay screen: the draft of this session, checked against the car once more."""
        store = DraftStore()
        session_key = draft_session_key(request)

        try:
            draft = store.load(session_key)
        except HANDLED_ERRORS as e:
            return error_response(e)

        car = Car.objects.filter(pk=draft.car_id).first()
        if (
            car is None
            or not car.is_available
            or not is_available(car.id, draft.start_date, draft.end_date)
        ):
            store.discard(session_key)
            return error_response(
                BookingConflictError(
                    draft.car_id,
                    "This car has been booked by someone else. Please choose another car.",
                )
            )

        return Response(BookingDraftSerializer(draft).data)


class DraftCheckoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={201: CheckoutSerializer})
    def post(self, request):
        """Create the pending booking from the draft and open Stripe checkout."""
        try:
            booking = DraftStore().materialize(draft_session_key(request), request.user)
        except HANDLED_ERRORS as e:
            return error_response(e)

        try:
            handle = PaymentService(get_payment_provider()).initiate_checkout(
                booking.id, booking.total_price
            )
        except HANDLED_ERRORS as e:
            response = error_response(e)
            response.data["booking"] = booking.id
            return response

        return Response(
            CheckoutSerializer(handle).data,
            status=status.HTTP_201_CREATED,
            headers={"Location": handle.redirect_url},
        )


class BookingViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = BookingReadSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingFilter

    def get_queryset(self):
        queryset = Booking.objects.select_related("car", "user").prefetch_related(
            "payments"
        )

        if self.request.user.is_staff:
            return queryset

        return queryset.filter(user=self.request.user)

    @extend_schema(
        summary="List bookings",
        description=(
            "Retrieve a list of bookings.\n\n"
            "- Customers see only their own bookings.\n"
            "- Staff users see all bookings.\n"
            "- Supports filtering by user, car, status, date range and car category."
        ),
        parameters=[
            OpenApiParameter(
                name="user",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                description="Filter by user ID (staff only)",
                required=False,
            ),
            OpenApiParameter(
                name="car",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                description="Filter by car ID",
                required=False,
            ),
            OpenApiParameter(
                name="status",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                description="Booking status (Pending, Confirmed, Approved, Rejected, Cancelled)",
                required=False,
            ),
            OpenApiParameter(
                name="from_date",
                type=OpenApiTypes.DATE,
                location=OpenApiParameter.QUERY,
                description="Filter bookings starting on or after this date",
                required=False,
            ),
            OpenApiParameter(
                name="to_date",
                type=OpenApiTypes.DATE,
                location=OpenApiParameter.QUERY,
                description="Filter bookings ending on or before this date",
                required=False,
            ),
            OpenApiParameter(
                name="category",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                description="Filter by car category ID",
                required=False,
            ),
        ],
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(request=CheckoutRequestSerializer, responses={201: CheckoutSerializer})
    @action(detail=True, methods=["post"], url_path="pay")
    def pay(self, request, pk=None):
        booking = self.get_object()
        serializer = CheckoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        amount = serializer.validated_data.get("amount", booking.total_price)

        try:
            handle = PaymentService(get_payment_provider()).initiate_checkout(
                booking.id, amount
            )
        except HANDLED_ERRORS as e:
            return error_response(e)

        return Response(
            CheckoutSerializer(handle).data,
            status=status.HTTP_201_CREATED,
            headers={"Location": handle.redirect_url},
        )

    @extend_schema(request=None)
    @action(detail=True, methods=["post"], url_path="approve",
            permission_classes=[IsAdminUser])
    def approve(self, request, pk=None):
        booking = lifecycle.set_admin_label(
            self.get_object().id, Booking.BookingStatus.APPROVED
        )
        return Response(BookingReadSerializer(booking).data, status=status.HTTP_200_OK)

    @extend_schema(request=None)
    @action(detail=True, methods=["post"], url_path="reject",
            permission_classes=[IsAdminUser])
    def reject(self, request, pk=None):
        booking = lifecycle.set_admin_label(
            self.get_object().id, Booking.BookingStatus.REJECTED
        )
        return Response(BookingReadSerializer(booking).data, status=status.HTTP_200_OK)
