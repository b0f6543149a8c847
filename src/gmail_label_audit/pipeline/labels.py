"""Locate the target label in a mailbox and read its counters."""

from __future__ import annotations

import logging
from typing import Any

from gmail_label_audit.core.gmail_client import MailboxClient
from gmail_label_audit.core.models import LabelInfo

logger = logging.getLogger(__name__)


def has_sub_labels(labels: list[dict[str, Any]], name: str) -> bool:
    """True if any other label's name extends ``name`` (e.g. "Audit/2023" for "Audit")."""
    for label in labels:
        other = label.get("name") or ""
        if other != name and other.startswith(name):
            return True
    return False


class LabelResolver:
    """Resolve a label by exact name, optionally creating it when missing."""

    def __init__(self, create_label: bool = False) -> None:
        self._create_label = create_label

    def resolve(self, client: MailboxClient, label_name: str) -> LabelInfo | None:
        """Find ``label_name`` in the mailbox and fetch its totals.

        Returns None when the mailbox has no such label. If creation is
        enabled the label is created for future runs, but this run still
        reports it as not found.
        """
        labels = client.list_labels()
        if not labels:
            logger.warning("No labels found for %s", client.user_id)
            return None

        match = next((lbl for lbl in labels if lbl.get("name") == label_name), None)
        if match is None:
            logger.info("Label %r not found for %s", label_name, client.user_id)
            if self._create_label:
                client.create_label(label_name)
                logger.info("Created label %r for %s", label_name, client.user_id)
            return None

        label_id = match.get("id", "")
        detail = client.get_label(label_id)

        return LabelInfo(
            label_id=label_id,
            name=label_name,
            messages_total=detail.get("messagesTotal", 0),
            messages_unread=detail.get("messagesUnread", 0),
            threads_total=detail.get("threadsTotal", 0),
            threads_unread=detail.get("threadsUnread", 0),
            has_sub_labels=has_sub_labels(labels, label_name),
        )
