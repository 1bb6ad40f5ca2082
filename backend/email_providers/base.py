from dataclasses import dataclass
from typing import Optional, Protocol

from mail_options import ResolvedOptions


@dataclass(frozen=True)
class EmailRequest:
    recipient: str
    subject: str
    body: str


@dataclass
class SendEmailResult:
    provider: str
    provider_msg_id: Optional[str]
    dry_run: bool = False


class EmailProvider(Protocol):
    def send_mail(
        self,
        recipient: str,
        subject: str,
        body: str,
        options: ResolvedOptions,
    ) -> SendEmailResult:
        ...
