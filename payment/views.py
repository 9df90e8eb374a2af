import logging

import stripe
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from booking.api_errors import HANDLED_ERRORS, error_response
from payment.models import Payment
from payment.serializers import PaymentSerializer, ReconciliationSerializer
from payment.services.payment_service import PaymentService
from payment.services.stripe_service import get_payment_provider

logger = logging.getLogger(__name__)


def user_payments(user):
    queryset = Payment.objects.select_related("booking")
    if user.is_staff:
        return queryset
    return queryset.filter(booking__user=user)


class PaymentListView(generics.ListAPIView):
    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return user_payments(self.request.user).order_by("-id")


@method_decorator(csrf_exempt, name="dispatch")
class StripeWebhook(APIView):
    authentication_classes = []
    permission_classes = []

    @extend_schema(exclude=True)
    def post(self, request, *args, **kwargs):
        provider = get_payment_provider()
        payload = request.body
        sig_header = request.META.get("HTTP_STRIPE_SIGNATURE")

        try:
            event = provider.construct_event(payload, sig_header)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning(f"Rejected Stripe webhook: {e}")
            return Response(status=status.HTTP_400_BAD_REQUEST)

        try:
            PaymentService(provider).handle_webhook_event(event)
        except HANDLED_ERRORS as e:
            return error_response(e)

        return Response(status=status.HTTP_200_OK)


class PaymentSuccessView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="session_id",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                description="Checkout session id issued by Stripe",
                required=True,
            ),
        ],
        responses={200: ReconciliationSerializer},
        description=(
            "Landing point after Stripe checkout. The session is looked up at "
            "Stripe before anything is marked as paid; an unpaid session is "
            "reported with `paid: false`."
        ),
    )
    def get(self, request):
        session_id = request.query_params.get("session_id")
        if not session_id:
            return Response(
                {"detail": "Invalid payment session. Please complete payment through Stripe."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        if not user_payments(request.user).filter(session_id=session_id).exists():
            return Response(
                {"detail": "Payment record not found."},
                status=status.HTTP_404_NOT_FOUND,
            )

        try:
            result = PaymentService(get_payment_provider()).reconcile(session_id)
        except HANDLED_ERRORS as e:
            return error_response(e)

        return Response(ReconciliationSerializer(result).data)


class PaymentCancelView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=None,
        parameters=[
            OpenApiParameter(
                name="payment_id",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                description="Local payment id the checkout was opened for",
                required=True,
            ),
        ],
        responses={200: PaymentSerializer},
    )
    def get(self, request):
        return self.cancel(request)

    @extend_schema(request=None, responses={200: PaymentSerializer})
    def post(self, request):
        return self.cancel(request)

    def cancel(self, request):
        payment_id = request.query_params.get("payment_id") or request.data.get("payment_id")
        try:
            payment = user_payments(request.user).get(pk=int(payment_id))
        except (TypeError, ValueError):
            return Response(
                {"detail": "payment_id is required"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except Payment.DoesNotExist:
            return Response(
                {"detail": "Payment not found"},
                status=status.HTTP_404_NOT_FOUND,
            )

        payment = PaymentService(get_payment_provider()).cancel(payment.id)
        return Response(PaymentSerializer(payment).data, status=status.HTTP_200_OK)
