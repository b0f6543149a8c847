"""Page through a label's messages and fold their metadata into one aggregate."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from gmail_label_audit.core.classifier import classify_message
from gmail_label_audit.core.exceptions import MailboxTimeoutError
from gmail_label_audit.core.gmail_client import MailboxClient
from gmail_label_audit.core.models import AggregateState
from gmail_label_audit.core.parser import parse_message
from gmail_label_audit.pipeline.deadline import Deadline

logger = logging.getLogger(__name__)


class MessageAggregator:
    """Aggregate size, recency, attachment and boundary counts for a label.

    Listing is sequential (each page needs the previous page's token), but
    every page request runs on the pool so the mailbox deadline bounds it.
    Message details within a page are fetched on the same bounded pool and
    folded into the aggregate by the calling thread only, as they complete.
    """

    def __init__(self, domain: str, page_size: int = 500, fetch_concurrency: int = 8) -> None:
        self._domain = domain
        self._page_size = page_size
        self._fetch_concurrency = fetch_concurrency

    def aggregate(
        self,
        client: MailboxClient,
        label_id: str,
        deadline: Deadline | None = None,
    ) -> AggregateState:
        """Aggregate every message under ``label_id`` in the client's mailbox.

        Args:
            client: Gmail client bound to the mailbox.
            label_id: Resolved label ID.
            deadline: Time budget for the whole mailbox; unbounded if None.

        Returns:
            The aggregate; all zeros when the label holds no messages.

        Raises:
            MailboxTimeoutError: If the deadline passes mid-aggregation.
            ProviderError: If listing or fetching a message fails.
        """
        deadline = deadline or Deadline(None)
        owner = client.user_id
        state = AggregateState()
        pages = client.iter_message_pages(label_id, self._page_size)
        page_count = 0

        executor = ThreadPoolExecutor(
            max_workers=self._fetch_concurrency, thread_name_prefix="message-fetch"
        )
        try:
            while True:
                page = executor.submit(next, pages, None)
                try:
                    message_ids = page.result(timeout=deadline.remaining())
                except TimeoutError as e:
                    raise MailboxTimeoutError(
                        f"Timed out listing messages for {owner} after "
                        f"{state.counted_messages} messages"
                    ) from e
                deadline.check("message listing")
                if message_ids is None:
                    break

                page_count += 1
                futures = [executor.submit(client.get_message, mid) for mid in message_ids]
                try:
                    for future in as_completed(futures, timeout=deadline.remaining()):
                        message = parse_message(future.result())
                        state.fold(message, classify_message(message, owner, self._domain))
                except TimeoutError as e:
                    raise MailboxTimeoutError(
                        f"Timed out fetching messages for {owner} after "
                        f"{state.counted_messages} messages"
                    ) from e
        finally:
            # Drop queued fetches if we are bailing out early
            executor.shutdown(wait=False, cancel_futures=True)

        logger.info(
            "Aggregated %d messages in %d pages for %s",
            state.counted_messages, page_count, owner,
        )
        return state
