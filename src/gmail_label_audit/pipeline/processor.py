"""Mailbox orchestrator: resolve label → count filters + aggregate messages → assemble → sink."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from gmail_label_audit.config.settings import LabelAuditSettings
from gmail_label_audit.core.auth import gmail_service_factory
from gmail_label_audit.core.exceptions import LabelAuditError, MailboxTimeoutError
from gmail_label_audit.core.gmail_client import MailboxClient
from gmail_label_audit.core.models import AggregateState, MailboxIdentity, MailboxOutcome
from gmail_label_audit.pipeline.aggregator import MessageAggregator
from gmail_label_audit.pipeline.deadline import Deadline
from gmail_label_audit.pipeline.filters import count_filter_rules
from gmail_label_audit.pipeline.labels import LabelResolver
from gmail_label_audit.pipeline.record import assemble_record
from gmail_label_audit.storage.sink import RecordSink

logger = logging.getLogger(__name__)


class MailboxProcessor:
    """Produces one label audit record per mailbox and hands it to a sink.

    Per mailbox:
    1. Resolve the target label (creating it for next time if configured).
    2. Count filter rules and aggregate messages concurrently; both are
       skipped when the label wasn't found.
    3. Assemble the fixed-schema record and insert it.

    Failures are confined to the mailbox they happened in and reported as
    a MailboxOutcome instead of being raised.
    """

    def __init__(
        self,
        settings: LabelAuditSettings | None = None,
        sink: RecordSink | None = None,
        client_factory: Callable[[str], MailboxClient] | None = None,
        on_outcome: Callable[[MailboxOutcome], None] | None = None,
    ) -> None:
        self._settings = settings or LabelAuditSettings()
        self._sink = sink
        self._client_factory = client_factory or self._default_client
        self._on_outcome = on_outcome
        self._resolver = LabelResolver(create_label=self._settings.create_label)
        self._aggregator = MessageAggregator(
            self._settings.domain,
            page_size=self._settings.page_size,
            fetch_concurrency=self._settings.fetch_concurrency,
        )

    @property
    def on_outcome(self) -> Callable[[MailboxOutcome], None] | None:
        return self._on_outcome

    @on_outcome.setter
    def on_outcome(self, callback: Callable[[MailboxOutcome], None] | None) -> None:
        self._on_outcome = callback

    def _default_client(self, email: str) -> MailboxClient:
        """Build a delegated Gmail client for ``email`` from settings."""
        return MailboxClient(
            gmail_service_factory(self._settings, email),
            user_id=email,
            max_retries=self._settings.max_retries,
            initial_backoff_seconds=self._settings.initial_backoff_seconds,
            max_backoff_seconds=self._settings.max_backoff_seconds,
            inter_page_delay_seconds=self._settings.inter_page_delay_seconds,
            num_retries=self._settings.num_retries,
        )

    def client_for(self, email: str) -> MailboxClient:
        """Gmail client for one mailbox, from the injected factory or settings."""
        return self._client_factory(email)

    def build_record(self, identity: MailboxIdentity) -> dict[str, Any]:
        """Run label resolution, filter counting and aggregation for one mailbox.

        Raises:
            LabelAuditError: Any failure; no partial record is returned.
        """
        deadline = Deadline(self._settings.mailbox_timeout)
        client = self.client_for(identity.email)

        label = self._resolver.resolve(client, self._settings.label_name)
        deadline.check("label resolution")

        filter_rules = 0
        aggregate = AggregateState()
        if label is not None:
            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="filter-count")
            try:
                filters_future = executor.submit(count_filter_rules, client, label.label_id)
                aggregate = self._aggregator.aggregate(client, label.label_id, deadline)
                try:
                    filter_rules = filters_future.result(timeout=deadline.remaining())
                except TimeoutError as e:
                    raise MailboxTimeoutError(
                        f"Timed out counting filters for {identity.email}"
                    ) from e
            finally:
                executor.shutdown(wait=False, cancel_futures=True)

        return assemble_record(
            identity,
            label,
            filter_rules,
            aggregate,
            custom_fields=self._settings.custom_schema_fields,
        )

    def process(self, identity: MailboxIdentity) -> MailboxOutcome:
        """Process one mailbox end to end.

        Returns:
            MailboxOutcome carrying the inserted record, or the error that
            prevented it. Nothing is inserted on failure.
        """
        logger.info("Starting mailbox %s", identity.email)
        try:
            record = self.build_record(identity)
            if self._sink is not None:
                self._sink.insert([record])
        except LabelAuditError as e:
            logger.error("Mailbox %s failed: %s", identity.email, e)
            outcome = MailboxOutcome(email=identity.email, error=str(e))
        except Exception as e:
            logger.exception("Unexpected error processing mailbox %s", identity.email)
            outcome = MailboxOutcome(email=identity.email, error=f"Unexpected error: {e}")
        else:
            logger.info(
                "Finished mailbox %s (%d messages counted)",
                identity.email, record["countedMessages"],
            )
            outcome = MailboxOutcome(email=identity.email, record=record)

        self._notify(outcome)
        return outcome

    def process_many(self, identities: Sequence[MailboxIdentity]) -> list[MailboxOutcome]:
        """Process mailboxes on a bounded worker pool.

        Returns:
            One outcome per identity, in input order.
        """
        if not identities:
            return []
        workers = min(self._settings.max_workers, len(identities))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="mailbox") as executor:
            return list(executor.map(self.process, identities))

    def _notify(self, outcome: MailboxOutcome) -> None:
        """Send an outcome to the callback if registered."""
        if self._on_outcome:
            self._on_outcome(outcome)
