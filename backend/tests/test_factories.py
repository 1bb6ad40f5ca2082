"""
Unit tests for provider and store selection from the environment.
"""

import os
from unittest.mock import patch

import pytest

from email_providers.factory import get_email_provider
from email_providers.memory_provider import InMemoryEmailProvider
from email_providers.sendgrid_provider import SendGridEmailProvider
from file_stores.factory import get_file_store
from file_stores.memory_store import InMemoryFileStore
from file_stores.supabase_store import SupabaseFileStore


class TestGetEmailProvider:
    def test_memory_provider(self):
        with patch.dict(os.environ, {"EMAIL_PROVIDER": " Memory "}):
            assert isinstance(get_email_provider(), InMemoryEmailProvider)

    def test_sendgrid_provider(self):
        env = {"EMAIL_PROVIDER": "sendgrid", "SENDGRID_API_KEY": "SG.test", "MAIL_FROM_EMAIL": "reports@example.com"}
        with patch.dict(os.environ, env):
            provider = get_email_provider()

        assert isinstance(provider, SendGridEmailProvider)
        assert provider.from_email == "reports@example.com"

    def test_unsupported_provider_raises(self):
        with patch.dict(os.environ, {"EMAIL_PROVIDER": "carrier-pigeon"}):
            with pytest.raises(RuntimeError) as exc_info:
                get_email_provider()

        assert "carrier-pigeon" in str(exc_info.value)


class TestGetFileStore:
    def test_memory_store(self):
        with patch.dict(os.environ, {"FILE_STORE": "memory"}):
            assert isinstance(get_file_store(), InMemoryFileStore)

    def test_supabase_store(self):
        env = {"FILE_STORE": "supabase", "SUPABASE_URL": "https://test.supabase.co", "SUPABASE_SERVICE_KEY": "k"}
        with patch.dict(os.environ, env):
            with patch("file_stores.supabase_store.create_client"):
                assert isinstance(get_file_store(), SupabaseFileStore)

    def test_unsupported_store_raises(self):
        with patch.dict(os.environ, {"FILE_STORE": "ftp"}):
            with pytest.raises(RuntimeError):
                get_file_store()
