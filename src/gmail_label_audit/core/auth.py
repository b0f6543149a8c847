"""Service account credentials with domain-wide delegation for Gmail API."""

from __future__ import annotations

import logging
from collections.abc import Callable

from google.oauth2 import service_account
from googleapiclient.discovery import Resource, build

from gmail_label_audit.config.settings import LabelAuditSettings
from gmail_label_audit.core.exceptions import AuthorizationError

logger = logging.getLogger(__name__)


def delegated_credentials(
    settings: LabelAuditSettings, subject: str
) -> service_account.Credentials:
    """Build service account credentials that impersonate ``subject``.

    The inline key (``service_account_email``/``service_account_private_key``)
    takes precedence over ``service_account_file``.

    Args:
        settings: Application settings holding the key material and scopes.
        subject: Mailbox address to act as.

    Returns:
        Delegated credentials. They are refreshed lazily on the first API
        call, which is where a rejected delegation surfaces.

    Raises:
        AuthorizationError: If no usable key material is configured.
    """
    info = settings.service_account_info()
    try:
        if info is not None:
            creds = service_account.Credentials.from_service_account_info(
                info, scopes=settings.scopes
            )
        elif settings.service_account_file is not None:
            creds = service_account.Credentials.from_service_account_file(
                str(settings.service_account_file), scopes=settings.scopes
            )
        else:
            raise AuthorizationError(
                "No service account configured. Set LABEL_AUDIT_SERVICE_ACCOUNT_FILE "
                "or LABEL_AUDIT_SERVICE_ACCOUNT_EMAIL and "
                "LABEL_AUDIT_SERVICE_ACCOUNT_PRIVATE_KEY."
            )
    except (ValueError, OSError) as e:
        raise AuthorizationError(f"Invalid service account key: {e}") from e

    logger.debug("Delegating %s to %s", creds.service_account_email, subject)
    return creds.with_subject(subject)


def build_gmail_service(creds: service_account.Credentials) -> Resource:
    """Build a Gmail API service resource.

    Args:
        creds: Credentials to authorize requests with.

    Returns:
        Gmail API service resource.
    """
    return build("gmail", "v1", credentials=creds, cache_discovery=False)


def gmail_service_factory(
    settings: LabelAuditSettings, subject: str
) -> Callable[[], Resource]:
    """Return a zero-argument factory building Gmail services for ``subject``.

    Credentials are created once; each call builds a fresh service so
    threads don't share an HTTP transport.
    """
    creds = delegated_credentials(settings, subject)

    def factory() -> Resource:
        return build_gmail_service(creds)

    return factory
