"""Error types raised while validating, sending or decoding person records."""


class ABMError(Exception):
    """Base error for the ABM workflow.

    ``user_message`` is what gets shown in the notification; the exception
    text itself may carry more technical detail for the logs.
    """

    default_user_message = "No se pudo realizar la operación."

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message)
        self.user_message = user_message or self.default_user_message


class ValidationError(ABMError):
    """Form data rejected locally, before any request is sent."""

    def __init__(self, message: str):
        super().__init__(message, user_message=message)


class TransportError(ABMError):
    """Non-success HTTP status, timeout or network failure."""

    def __init__(self, message: str, status_code: int | None = None, user_message: str | None = None):
        super().__init__(message, user_message=user_message)
        self.status_code = status_code


class DecodeError(ABMError):
    """Response body was not the JSON shape the operation expects."""
