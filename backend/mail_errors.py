# mail_errors.py

RECIPIENT_NOT_SPECIFIED = "recipient not specified"
SUBJECT_NOT_SPECIFIED = "subject not specified"
BODY_NOT_SPECIFIED = "body not specified"
FAILED_TO_SEND = "failed to send"


class MailError(Exception):
    """Base class for errors raised by the send operation."""


class ValidationError(MailError, ValueError):
    """A mandatory field (recipient, subject, body) is missing or empty."""


class TransportError(MailError, RuntimeError):
    """The mail provider failed. The underlying cause is not exposed."""

    def __init__(self, message: str = FAILED_TO_SEND):
        super().__init__(message)
