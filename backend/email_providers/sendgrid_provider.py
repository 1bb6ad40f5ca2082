import base64
import os
import uuid
from typing import Optional

from python_http_client.exceptions import HTTPError
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Attachment, Disposition, Email, FileContent, FileName, FileType, Mail, To

from email_providers.base import SendEmailResult
from file_stores.base import Blob
from mail_options import ResolvedOptions


def _noreply_address(from_email: str) -> str:
    domain = from_email.rpartition("@")[2]
    return f"noreply@{domain}"


def build_attachment(blob: Blob) -> Attachment:
    return Attachment(
        FileContent(base64.b64encode(blob.content).decode("ascii")),
        FileName(blob.name),
        FileType(blob.content_type),
        Disposition("attachment"),
    )


class SendGridEmailProvider:
    def __init__(
        self,
        api_key: Optional[str] = None,
        from_email: Optional[str] = None,
        noreply_email: Optional[str] = None,
        client: Optional[SendGridAPIClient] = None,
    ):
        self.api_key = api_key or os.getenv("SENDGRID_API_KEY")
        if not self.api_key and client is None:
            raise RuntimeError("SENDGRID_API_KEY is not set")

        self.from_email = from_email or os.getenv("MAIL_FROM_EMAIL")
        if not self.from_email:
            raise RuntimeError("MAIL_FROM_EMAIL is not set")

        self.noreply_email = noreply_email or os.getenv("MAIL_NOREPLY_EMAIL") or _noreply_address(self.from_email)
        self.client = client or SendGridAPIClient(self.api_key)

    def build_mail(self, recipient: str, subject: str, body: str, options: ResolvedOptions) -> Mail:
        if options.no_reply:
            from_email = Email(self.noreply_email)
        else:
            from_email = Email(self.from_email, options.name)

        mail = Mail(
            from_email=from_email,
            to_emails=To(recipient),
            subject=subject,
            plain_text_content=body,
        )

        # add_attachment prepends, so feed it back to front
        for blob in reversed(options.attachments or ()):
            mail.add_attachment(build_attachment(blob))

        return mail

    def send_mail(self, recipient: str, subject: str, body: str, options: ResolvedOptions) -> SendEmailResult:
        dry_run = os.getenv("MAIL_DRY_RUN", "false").lower() == "true"
        test_email = os.getenv("MAIL_TEST_EMAIL")

        to_email = recipient
        if dry_run:
            if not test_email:
                raise RuntimeError("MAIL_TEST_EMAIL must be set when MAIL_DRY_RUN=true")
            to_email = test_email

        mail = self.build_mail(to_email, subject, body, options)

        # SendGrid doesn't always return a message id; fall back to a generated one.
        try:
            response = self.client.send(mail)
        except HTTPError as e:
            detail = e.body.decode("utf-8") if hasattr(e.body, "decode") else e.body
            raise RuntimeError(f"SendGrid error {e.status_code}: {detail}") from e

        msg_id = response.headers.get("X-Message-Id") or f"sg-fallback-{uuid.uuid4()}"
        return SendEmailResult(provider="sendgrid", provider_msg_id=msg_id, dry_run=dry_run)
