"""
Unit tests for the email dispatcher.
Tests mandatory-field validation, the single send call, and transport error wrapping.
"""

import os
from unittest.mock import Mock, patch

import pytest

from email_providers.memory_provider import InMemoryEmailProvider
from file_stores.base import MimeType
from file_stores.memory_store import InMemoryFileStore
import mailer
from mail_errors import MailError, TransportError, ValidationError
from mail_options import ResolvedOptions
from mailer import EmailDispatcher, send_email, validate_request


@pytest.fixture
def provider():
    return InMemoryEmailProvider()


@pytest.fixture
def store():
    return InMemoryFileStore({"docs/report.pdf": b"%PDF-1.4"})


@pytest.fixture
def dispatcher(provider, store):
    return EmailDispatcher(provider, store)


class TestValidation:
    """Mandatory recipient, subject and body."""

    @pytest.mark.parametrize("bad", ["", None, 123])
    def test_missing_recipient(self, dispatcher, provider, bad):
        with pytest.raises(ValidationError) as exc_info:
            dispatcher.send(bad, "titleTest", "bodyTest")

        assert str(exc_info.value) == "recipient not specified"
        assert provider.sent == []

    @pytest.mark.parametrize("bad", ["", None])
    def test_missing_subject(self, dispatcher, provider, bad):
        with pytest.raises(ValidationError) as exc_info:
            dispatcher.send("a@example.com", bad, "bodyTest")

        assert str(exc_info.value) == "subject not specified"
        assert provider.sent == []

    @pytest.mark.parametrize("bad", ["", None])
    def test_missing_body(self, dispatcher, provider, bad):
        with pytest.raises(ValidationError) as exc_info:
            dispatcher.send("a@example.com", "titleTest", bad)

        assert str(exc_info.value) == "body not specified"
        assert provider.sent == []

    def test_first_violation_wins(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_request("", "", "")

        assert str(exc_info.value) == "recipient not specified"

    def test_validation_happens_before_file_lookups(self, dispatcher, store):
        with pytest.raises(ValidationError):
            dispatcher.send("a@example.com", "", "bodyTest", {"fileIdList": [("docs/report.pdf", MimeType.PDF)]})

        assert store.lookups == []

    def test_validation_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_request("a@example.com", "titleTest", "")


class TestSend:
    """Successful dispatch."""

    def test_send_with_no_options_makes_one_call(self, dispatcher, provider):
        dispatcher.send("a@example.com", "titleTest", "bodyTest")

        assert len(provider.sent) == 1
        sent = provider.sent[0]
        assert (sent.recipient, sent.subject, sent.body) == ("a@example.com", "titleTest", "bodyTest")
        assert sent.options == ResolvedOptions()
        assert sent.options.as_dict() == {}

    def test_send_passes_translated_options(self, dispatcher, provider):
        dispatcher.send(
            "a@example.com",
            "titleTest",
            "bodyTest",
            {"fileIdList": [("docs/report.pdf", MimeType.PDF)], "noReply": False, "name": "Reports"},
        )

        options = provider.sent[0].options
        assert options.name == "Reports"
        assert options.no_reply is False
        assert [b.name for b in options.attachments] == ["report.pdf"]

    def test_send_with_unresolvable_attachment_still_sends(self, dispatcher, provider):
        with patch("mail_options.logger"):
            dispatcher.send("a@example.com", "titleTest", "bodyTest", {"fileIdList": [("testzzzzzz", MimeType.PDF)]})

        assert len(provider.sent) == 1
        assert provider.sent[0].options.attachments is None

    def test_memory_provider_history_can_be_cleared(self, dispatcher, provider):
        dispatcher.send("a@example.com", "titleTest", "bodyTest")

        provider.clear()

        assert provider.sent == []

    def test_send_returns_none_and_logs_success(self, dispatcher):
        with patch("mailer.logger") as mock_logger:
            result = dispatcher.send("a@example.com", "titleTest", "bodyTest")

        assert result is None
        args, kwargs = mock_logger.info.call_args
        assert args[0] == "send_email_succeeded"
        assert kwargs["extra"]["provider"] == "memory"


class TestTransportFailure:
    """Provider failures are normalized into TransportError."""

    def test_provider_exception_becomes_transport_error(self, store):
        provider = InMemoryEmailProvider(fail_with=RuntimeError("SendGrid error 403: forbidden"))
        dispatcher = EmailDispatcher(provider, store)

        with patch("mailer.logger"):
            with pytest.raises(TransportError) as exc_info:
                dispatcher.send("a@example.com", "titleTest", "bodyTest")

        assert str(exc_info.value) == "failed to send"
        assert isinstance(exc_info.value, MailError)

    def test_cause_is_not_exposed(self, store):
        provider = Mock()
        provider.send_mail.side_effect = ConnectionError("network unreachable")
        dispatcher = EmailDispatcher(provider, store)

        with patch("mailer.logger"):
            with pytest.raises(TransportError) as exc_info:
                dispatcher.send("a@example.com", "titleTest", "bodyTest")

        assert exc_info.value.__cause__ is None
        assert exc_info.value.__suppress_context__ is True
        assert "network unreachable" not in str(exc_info.value)

    def test_cause_is_logged(self, store):
        provider = Mock()
        provider.send_mail.side_effect = ConnectionError("network unreachable")
        dispatcher = EmailDispatcher(provider, store)

        with patch("mailer.logger") as mock_logger:
            with pytest.raises(TransportError):
                dispatcher.send("a@example.com", "titleTest", "bodyTest")

        mock_logger.exception.assert_called_once()
        assert mock_logger.exception.call_args[0][0] == "send_email_failed"

    def test_provider_called_exactly_once_on_failure(self, store):
        provider = Mock()
        provider.send_mail.side_effect = TimeoutError()
        dispatcher = EmailDispatcher(provider, store)

        with patch("mailer.logger"):
            with pytest.raises(TransportError):
                dispatcher.send("a@example.com", "titleTest", "bodyTest")

        assert provider.send_mail.call_count == 1


class TestSendEmail:
    """Module-level convenience using the env-configured dispatcher."""

    def test_send_email_uses_configured_backends(self):
        with patch.dict(os.environ, {"EMAIL_PROVIDER": "memory", "FILE_STORE": "memory"}):
            with patch.object(mailer, "_default_dispatcher", None):
                send_email("a@example.com", "titleTest", "bodyTest")
                dispatcher = mailer.get_dispatcher()

                assert isinstance(dispatcher.provider, InMemoryEmailProvider)
                assert len(dispatcher.provider.sent) == 1

    def test_send_email_validates(self):
        fake = Mock(spec=EmailDispatcher)
        fake.send.side_effect = ValidationError("recipient not specified")

        with patch.object(mailer, "_default_dispatcher", fake):
            with pytest.raises(ValidationError):
                send_email("", "titleTest", "bodyTest")

        fake.send.assert_called_once_with("", "titleTest", "bodyTest", None)

