import uuid
from dataclasses import dataclass
from typing import List, Optional

from email_providers.base import SendEmailResult
from mail_options import ResolvedOptions


@dataclass
class SentMail:
    recipient: str
    subject: str
    body: str
    options: ResolvedOptions


class InMemoryEmailProvider:
    """
    Records sends instead of delivering them. Set `fail_with` to simulate a transport error.

    For tests and stub runs only: `sent` keeps every mail for the life of the
    provider and is never trimmed. Call `clear()` to drop the history.
    """

    def __init__(self, fail_with: Optional[Exception] = None):
        self.sent: List[SentMail] = []
        self.fail_with = fail_with

    def clear(self) -> None:
        self.sent.clear()

    def send_mail(self, recipient: str, subject: str, body: str, options: ResolvedOptions) -> SendEmailResult:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(SentMail(recipient=recipient, subject=subject, body=body, options=options))
        return SendEmailResult(provider="memory", provider_msg_id=f"mem-{uuid.uuid4()}")
