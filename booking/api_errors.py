from rest_framework import status
from rest_framework.response import Response

from booking.exceptions import (
    BookingConflictError,
    BookingValidationError,
    NotFoundError,
    SessionExpiredError,
)
from payment.exceptions import ExternalServiceError


def error_response(exc: Exception) -> Response:
    """Map a booking or payment error to the response the client sees."""
    if isinstance(exc, BookingValidationError):
        return Response(exc.as_dict(), status=status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, BookingConflictError):
        return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
    if isinstance(exc, SessionExpiredError):
        return Response({"detail": str(exc)}, status=status.HTTP_410_GONE)
    if isinstance(exc, NotFoundError):
        return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, ExternalServiceError):
        return Response({"detail": str(exc)}, status=status.HTTP_502_BAD_GATEWAY)
    raise exc


HANDLED_ERRORS = (
    BookingValidationError,
    BookingConflictError,
    SessionExpiredError,
    NotFoundError,
    ExternalServiceError,
)
