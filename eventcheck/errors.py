class EventcheckError(Exception):
    """Base class for errors raised by the attendee console."""


class ValidationError(EventcheckError, ValueError):
    """Raised when an export selection or an edit draft is not acceptable."""


class DeliveryError(EventcheckError):
    """Raised when the email transport fails to deliver a message."""

    def __init__(self, message: str, recipient: str | None = None):
        super().__init__(message)
        self.message = message
        self.recipient = recipient


class PersistenceError(EventcheckError):
    """Raised when the attendee store cannot apply an update or delete."""


class ResendInProgressError(EventcheckError):
    """Raised when a resend is requested while another one is outstanding."""
