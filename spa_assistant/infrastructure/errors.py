"""Infrastructure layer: errors raised when talking to the spa API."""
from typing import Optional

DEFAULT_VALIDATION_MESSAGE = (
    "There is something wrong with your request. "
    "Can you double-check and make the request again?"
)


class SpaApiError(Exception):
    """The spa API could not be reached or answered with an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SpaApiValidationError(SpaApiError):
    """400 from the spa API; message is safe to show to the user as-is."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or DEFAULT_VALIDATION_MESSAGE, status_code=400)


class SpaApiTimeoutError(SpaApiError):
    """The spa API did not answer within the configured timeout."""
