# mailer.py
from typing import Any, Optional

from email_providers.base import EmailProvider, EmailRequest
from email_providers.factory import get_email_provider
from file_stores.base import FileStore
from file_stores.factory import get_file_store
from logging_config import get_logger
from mail_errors import (
    BODY_NOT_SPECIFIED,
    RECIPIENT_NOT_SPECIFIED,
    SUBJECT_NOT_SPECIFIED,
    TransportError,
    ValidationError,
)
from mail_options import OptionsInput, translate

logger = get_logger("mail_dispatch", component="mailer")


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and len(value) > 0


def validate_request(recipient: Any, subject: Any, body: Any) -> EmailRequest:
    """Check mandatory fields in order; the first missing one wins."""
    if not _is_text(recipient):
        raise ValidationError(RECIPIENT_NOT_SPECIFIED)
    if not _is_text(subject):
        raise ValidationError(SUBJECT_NOT_SPECIFIED)
    if not _is_text(body):
        raise ValidationError(BODY_NOT_SPECIFIED)
    return EmailRequest(recipient=recipient, subject=subject, body=body)


class EmailDispatcher:
    def __init__(self, provider: EmailProvider, file_store: FileStore):
        self.provider = provider
        self.file_store = file_store

    def send(self, recipient: str, subject: str, body: str, options: OptionsInput = None) -> None:
        """
        Validate, resolve options, and send exactly one email.

        Raises ValidationError before any external call if recipient, subject
        or body is missing. Any provider failure is raised as TransportError
        with the original cause withheld from the caller.
        """
        req = validate_request(recipient, subject, body)
        resolved = translate(options, self.file_store)

        try:
            result = self.provider.send_mail(req.recipient, req.subject, req.body, resolved)
        except Exception:
            logger.exception(
                "send_email_failed",
                extra={"recipient": req.recipient, "attachments": len(resolved.attachments or ())},
            )
            raise TransportError() from None

        logger.info(
            "send_email_succeeded",
            extra={
                "recipient": req.recipient,
                "provider": result.provider if result else None,
                "provider_msg_id": result.provider_msg_id if result else None,
                "attachments": len(resolved.attachments or ()),
            },
        )


_default_dispatcher: Optional[EmailDispatcher] = None


def get_dispatcher() -> EmailDispatcher:
    global _default_dispatcher
    if _default_dispatcher is None:
        _default_dispatcher = EmailDispatcher(get_email_provider(), get_file_store())
    return _default_dispatcher


def send_email(recipient: str, subject: str, body: str, options: OptionsInput = None) -> None:
    get_dispatcher().send(recipient, subject, body, options)
