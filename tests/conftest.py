"""Shared fixtures for Gmail Label Audit tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from gmail_label_audit.config.settings import LabelAuditSettings
from gmail_label_audit.core.gmail_client import MailboxClient
from gmail_label_audit.core.models import MailboxIdentity

from tests.fakes import DOMAIN, OWNER


@pytest.fixture
def mock_service() -> MagicMock:
    """Create a fully-mocked Gmail API Resource."""
    return MagicMock()


@pytest.fixture
def client(mock_service: MagicMock) -> MailboxClient:
    """MailboxClient for OWNER wrapping the mocked service with fast retry settings."""
    return MailboxClient(
        lambda: mock_service,
        user_id=OWNER,
        max_retries=3,
        initial_backoff_seconds=0.01,
        max_backoff_seconds=0.05,
        inter_page_delay_seconds=0.0,
        num_retries=0,
    )


@pytest.fixture
def settings() -> LabelAuditSettings:
    """Settings with an explicit label/domain and no custom attributes."""
    return LabelAuditSettings(
        label_name="Audit",
        domain=DOMAIN,
        create_label=False,
        page_size=500,
        fetch_concurrency=4,
        max_workers=2,
        mailbox_timeout_seconds=None,
        custom_schema_name="",
        custom_schema_fields=[],
        _env_file=None,
    )


@pytest.fixture
def identity() -> MailboxIdentity:
    """The mailbox owner's directory identity."""
    return MailboxIdentity(
        email=OWNER,
        guid="1234567890",
        org_unit_path="/Engineering",
        suspended=False,
    )
