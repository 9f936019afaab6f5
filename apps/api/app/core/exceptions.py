"""Signup error taxonomy.

Each error carries the message that is safe to show to the caller and the
HTTP status it maps to. Server-side failures share one generic message so no
internal detail reaches the client.
"""

GENERIC_ERROR_MESSAGE = "Internal server error. Please try again later."


class SignupError(Exception):
    """Base class for failures on the signup path."""

    status_code: int = 500
    default_message: str = GENERIC_ERROR_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(SignupError):
    """The request body was rejected by the validator."""

    status_code = 400
    default_message = "Invalid request body"


class RateLimitError(SignupError):
    """Too many submissions from one client address."""

    status_code = 429
    default_message = "Too many requests. Please try again later."


class StorageError(SignupError):
    """The signup could not be persisted."""


class LockTimeoutError(StorageError):
    """The store lock could not be acquired within the retry budget."""


class NotificationError(SignupError):
    """An email could not be sent. Logged, never surfaced to the caller."""
