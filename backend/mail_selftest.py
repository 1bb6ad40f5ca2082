# mail_selftest.py
"""
Self-test harness for the send operation.

Runs against the configured backends (SendGrid + Supabase by default) or, with
``--stub``, against in-memory ones. Live runs send real mail, so a fixed delay
is inserted between sends to stay under the provider quota.
"""
from dotenv import load_dotenv
load_dotenv()

import os
import time
from typing import Callable, List, Optional, Tuple

import typer

from email_providers.factory import get_email_provider
from email_providers.memory_provider import InMemoryEmailProvider
from file_stores.base import MimeType
from file_stores.factory import get_file_store
from file_stores.memory_store import InMemoryFileStore
from logging_config import get_logger
from mail_errors import MailError, ValidationError
from mail_options import FILE_ID_LIST, NAME, NO_REPLY
from mailer import EmailDispatcher

logger = get_logger("mail_dispatch", component="selftest")

UNRESOLVABLE_FILE_ID = "testzzzzzz"
STUB_PDF_ID = "selftest/sample.pdf"
STUB_JPEG_ID = "selftest/sample.jpg"

app = typer.Typer(name="mail-selftest", add_completion=False)


class EmailContent:
    def __init__(self, recipient: str, default_title: str = "titleTest", default_body: str = "bodyTest"):
        self.recipient = recipient
        self.default_title = default_title
        self.default_body = default_body

    def get_email_content(self, title: Optional[str] = None, body: Optional[str] = None) -> Tuple[str, str, str]:
        return (
            self.recipient,
            self.default_title if title is None else title,
            self.default_body if body is None else body,
        )


def _passed(group: str) -> bool:
    logger.info("selftest_passed", extra={"group": group})
    return True


def _failed(group: str, case: str, error: Optional[Exception] = None) -> bool:
    logger.error("selftest_failed", extra={"group": group, "case": case, "error": repr(error) if error else None})
    return False


def run_title_body_tests(dispatcher: EmailDispatcher, content: EmailContent) -> bool:
    group = "title_body_recipient"
    recipient, title, body = content.get_email_content()

    bad_cases = []
    for bad in ("", None):
        bad_cases += [
            (recipient, title, bad),
            (recipient, bad, body),
            (bad, title, body),
        ]

    for case in bad_cases:
        try:
            dispatcher.send(*case)
        except ValidationError:
            continue
        except MailError as e:
            return _failed(group, f"rejected {case!r}", e)
        return _failed(group, f"accepted {case!r}")

    try:
        dispatcher.send(recipient, title, body)
    except MailError as e:
        return _failed(group, "well-formed send", e)

    return _passed(group)


def run_no_reply_and_name_tests(dispatcher: EmailDispatcher, content: EmailContent, delay: float = 1.0) -> bool:
    group = "no_reply_and_name"
    cases = [
        ({NO_REPLY: True}, "noreply as email sender"),
        ({NO_REPLY: False, NAME: "test-name"}, "test-name as email sender name"),
    ]

    for options, body in cases:
        try:
            dispatcher.send(*content.get_email_content(body=body), options)
        except MailError as e:
            return _failed(group, body, e)
        time.sleep(delay)

    return _passed(group)


def run_attachment_tests(
    dispatcher: EmailDispatcher,
    content: EmailContent,
    pdf_id: str,
    jpeg_id: str,
    delay: float = 1.0,
) -> bool:
    group = "attachments"
    pdf = (pdf_id, MimeType.PDF)
    jpeg = (jpeg_id, MimeType.JPEG)

    # An unresolvable file is skipped, the mail itself still goes out.
    cases: List[Tuple[str, list]] = [
        ("unresolvable", [(UNRESOLVABLE_FILE_ID, MimeType.PDF)]),
        ("pdf", [pdf]),
        ("pdf+jpeg", [pdf, jpeg]),
    ]

    for name, file_id_list in cases:
        try:
            dispatcher.send(*content.get_email_content(), {FILE_ID_LIST: file_id_list})
        except MailError as e:
            return _failed(group, name, e)
        time.sleep(delay)

    return _passed(group)


def run_email_tests(
    dispatcher: EmailDispatcher,
    content: EmailContent,
    pdf_id: str,
    jpeg_id: str,
    delay: float = 1.0,
) -> bool:
    """Run every group in order, stopping at the first failure."""
    groups: List[Callable[[], bool]] = [
        lambda: run_title_body_tests(dispatcher, content),
        lambda: run_no_reply_and_name_tests(dispatcher, content, delay),
        lambda: run_attachment_tests(dispatcher, content, pdf_id, jpeg_id, delay),
    ]
    return all(group() for group in groups)


def build_stub_dispatcher() -> Tuple[EmailDispatcher, InMemoryEmailProvider]:
    store = InMemoryFileStore({
        STUB_PDF_ID: b"%PDF-1.4\n%selftest\n",
        STUB_JPEG_ID: b"\xff\xd8\xff\xe0selftest",
    })
    provider = InMemoryEmailProvider()
    return EmailDispatcher(provider, store), provider


@app.command()
def run(
    stub: bool = typer.Option(False, "--stub", help="Use in-memory mail and file backends"),
    recipient: Optional[str] = typer.Option(None, "--recipient", "-r", help="Address that receives the test mails"),
    delay: Optional[float] = typer.Option(None, "--delay", help="Seconds to wait between sends"),
):
    """
    Send the self-test mails and exit non-zero if any group fails.
    """
    recipient = recipient or os.getenv("MAIL_TEST_RECIPIENT") or ("selftest@example.com" if stub else None)
    if not recipient:
        typer.echo("MAIL_TEST_RECIPIENT is not set and --recipient was not given", err=True)
        raise typer.Exit(code=2)

    if stub:
        dispatcher, _ = build_stub_dispatcher()
        pdf_id, jpeg_id = STUB_PDF_ID, STUB_JPEG_ID
        delay = 0.0 if delay is None else delay
    else:
        pdf_id = os.getenv("MAIL_TEST_PDF_ID", "")
        jpeg_id = os.getenv("MAIL_TEST_JPEG_ID", "")
        if not pdf_id or not jpeg_id:
            typer.echo("MAIL_TEST_PDF_ID and MAIL_TEST_JPEG_ID must both be set", err=True)
            raise typer.Exit(code=2)
        dispatcher = EmailDispatcher(get_email_provider(), get_file_store())
        delay = float(os.getenv("MAIL_TEST_DELAY_SECONDS", "1.0")) if delay is None else delay

    logger.info("selftest_started", extra={"stub": stub, "recipient": recipient, "delay": delay})
    ok = run_email_tests(dispatcher, EmailContent(recipient), pdf_id, jpeg_id, delay)
    raise typer.Exit(code=0 if ok else 1)


def main():
    app()


if __name__ == "__main__":
    main()
