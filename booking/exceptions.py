from typing import Optional


class BookingError(Exception):
    """Base class for booking flow errors"""


class BookingValidationError(BookingError):
    """Thrown when a requested booking is invalid; nothing has been written"""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def as_dict(self) -> dict:
        return {self.field or "non_field_errors": [self.message]}


class BookingConflictError(BookingError):
    """Thrown when the car is already confirmed for an overlapping range"""

    def __init__(
            self,
            car_id: Optional[int] = None,
            message: Optional[str] = None
    ) -> None:
        if message is None:
            message = (
                f"Car {car_id} is already booked for the selected dates."
                if car_id else "The car is already booked for the selected dates."
            )
        super().__init__(message)
        self.car_id = car_id


class SessionExpiredError(BookingError):
    """Thrown when the booking draft for a session is gone"""

    def __init__(self, message: str = "Session expired. Please start over.") -> None:
        super().__init__(message)


class NotFoundError(BookingError):
    """Thrown when a booking, payment or car does not exist"""

    def __init__(self, entity: str, pk) -> None:
        super().__init__(f"{entity} {pk} not found")
        self.entity = entity
        self.pk = pk
