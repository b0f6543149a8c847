"""Gmail API client for one mailbox: labels, filters, message paging and metadata."""

from __future__ import annotations

import logging
import random
import threading
import time
from collections.abc import Callable, Generator
from typing import Any

from google.auth.exceptions import RefreshError
from googleapiclient.discovery import Resource
from googleapiclient.errors import HttpError

from gmail_label_audit.core.exceptions import AuthorizationError, ProviderError, RateLimitError

logger = logging.getLogger(__name__)

TRANSIENT_STATUSES = frozenset({429, 500, 502, 503, 504})
TRANSIENT_REASONS = ("rateLimitExceeded", "userRateLimitExceeded", "backendError")
METADATA_HEADERS = ["From", "To", "Cc", "Bcc"]


def _is_transient_error(exc: Exception) -> bool:
    """Check whether an exception is worth retrying (rate limit, 5xx, timeout)."""
    if isinstance(exc, HttpError) and exc.status_code in TRANSIENT_STATUSES:
        return True
    if isinstance(exc, (TimeoutError, ConnectionError)):
        return True
    error_str = str(exc)
    if not isinstance(exc, HttpError) and "429" in error_str:
        return True
    return any(reason in error_str for reason in TRANSIENT_REASONS)


def _is_conflict(exc: BaseException | None) -> bool:
    return isinstance(exc, HttpError) and exc.status_code == 409


class MailboxClient:
    """Thin wrapper around the Gmail API for a single mailbox.

    A discovery ``Resource`` is not safe to share between threads, so one is
    built per thread from ``service_factory`` on first use.
    """

    def __init__(
        self,
        service_factory: Callable[[], Resource],
        user_id: str = "me",
        *,
        max_retries: int = 5,
        initial_backoff_seconds: float = 1.0,
        max_backoff_seconds: float = 60.0,
        inter_page_delay_seconds: float = 0.0,
        num_retries: int = 3,
    ) -> None:
        self._service_factory = service_factory
        self._user_id = user_id
        self._max_retries = max_retries
        self._initial_backoff = initial_backoff_seconds
        self._max_backoff = max_backoff_seconds
        self._inter_page_delay = inter_page_delay_seconds
        self._num_retries = num_retries
        self._local = threading.local()

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def _service(self) -> Resource:
        service = getattr(self._local, "service", None)
        if service is None:
            service = self._service_factory()
            self._local.service = service
        return service

    def _execute_with_retry(self, request: Any, context: str) -> Any:
        """Execute a single API request with exponential backoff on transient errors.

        Args:
            request: A googleapiclient HttpRequest object.
            context: Description for log messages (e.g. "list labels").

        Returns:
            The API response dict.

        Raises:
            AuthorizationError: When delegated credentials cannot be refreshed.
            RateLimitError: When retries are exhausted on transient errors.
            ProviderError: On any other API error.
        """
        backoff = self._initial_backoff

        for attempt in range(self._max_retries + 1):
            try:
                return request.execute(num_retries=self._num_retries)
            except RefreshError as e:
                raise AuthorizationError(
                    f"Delegation rejected for {self._user_id} during {context}: {e}"
                ) from e
            except Exception as e:
                if not _is_transient_error(e):
                    raise ProviderError(f"Failed to {context} for {self._user_id}: {e}") from e
                if attempt >= self._max_retries:
                    raise RateLimitError(
                        f"Rate limited during {context} for {self._user_id} after "
                        f"{self._max_retries} retries: {e}"
                    ) from e
                sleep_time = min(backoff, self._max_backoff)
                jitter = random.uniform(0, sleep_time)
                logger.warning(
                    "Transient error during %s for %s (attempt %d/%d), sleeping %.2fs: %s",
                    context, self._user_id, attempt + 1, self._max_retries, jitter, e,
                )
                time.sleep(jitter)
                backoff = min(backoff * 2, self._max_backoff)

        raise RateLimitError(f"Rate limited during {context} after {self._max_retries} retries")

    def list_labels(self) -> list[dict[str, Any]]:
        """List all labels of the mailbox, in the order Gmail returns them."""
        request = self._service.users().labels().list(userId=self._user_id)
        results = self._execute_with_retry(request, "list labels")
        return results.get("labels") or []

    def get_label(self, label_id: str) -> dict[str, Any]:
        """Fetch label detail (messagesTotal, messagesUnread, threadsTotal, threadsUnread)."""
        request = self._service.users().labels().get(userId=self._user_id, id=label_id)
        return self._execute_with_retry(request, "get label") or {}

    def list_filters(self) -> list[dict[str, Any]]:
        """List the mailbox's filter rules."""
        request = self._service.users().settings().filters().list(userId=self._user_id)
        results = self._execute_with_retry(request, "list filters")
        return results.get("filter") or []

    def iter_message_pages(
        self,
        label_id: str,
        page_size: int = 500,
        start_token: str | None = None,
    ) -> Generator[list[str], None, None]:
        """Paginate through message IDs under a label, yielding one list per page.

        Follows ``nextPageToken`` until Gmail stops returning one. Passing
        ``start_token`` resumes from a previously seen token.

        Args:
            label_id: Gmail label ID to filter by.
            page_size: Number of messages per page (1-500).
            start_token: Page token to resume from.

        Yields:
            Lists of message IDs, one list per non-empty API page.
        """
        page_token = start_token
        first_page = True

        while True:
            if not first_page and self._inter_page_delay > 0:
                time.sleep(self._inter_page_delay)
            first_page = False

            kwargs: dict[str, Any] = {
                "userId": self._user_id,
                "labelIds": [label_id],
                "maxResults": page_size,
            }
            if page_token:
                kwargs["pageToken"] = page_token

            request = self._service.users().messages().list(**kwargs)
            response = self._execute_with_retry(request, "list messages")

            ids = [msg["id"] for msg in response.get("messages") or [] if msg.get("id")]
            if ids:
                logger.debug("Listed %d message IDs for %s (page)", len(ids), self._user_id)
                yield ids

            page_token = response.get("nextPageToken")
            if not page_token:
                return

    def get_message(self, message_id: str) -> dict[str, Any]:
        """Fetch size, date, MIME type and address headers for one message."""
        request = self._service.users().messages().get(
            userId=self._user_id,
            id=message_id,
            format="metadata",
            metadataHeaders=METADATA_HEADERS,
        )
        return self._execute_with_retry(request, "get message") or {}

    def create_label(self, name: str) -> dict[str, Any] | None:
        """Create a visible label called ``name``.

        Returns the created label, or None if a label with that name
        already exists.
        """
        request = self._service.users().labels().create(
            userId=self._user_id,
            body={
                "name": name,
                "labelListVisibility": "labelShow",
                "messageListVisibility": "show",
            },
        )
        try:
            return self._execute_with_retry(request, "create label")
        except ProviderError as e:
            if _is_conflict(e.__cause__):
                logger.info("Label %r already exists for %s", name, self._user_id)
                return None
            raise
