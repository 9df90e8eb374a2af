from typing import Optional


class ExternalServiceError(Exception):
    """Thrown when the payment provider is unreachable or rejects a request"""

    def __init__(
            self,
            message: Optional[str] = None,
            provider: str = "Stripe"
    ) -> None:
        if message is None:
            message = f"{provider} request failed."
        super().__init__(message)
        self.provider = provider
