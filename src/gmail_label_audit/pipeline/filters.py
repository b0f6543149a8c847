"""Count the filter rules that route mail into a label."""

from __future__ import annotations

from gmail_label_audit.core.gmail_client import MailboxClient


def count_filter_rules(client: MailboxClient, label_id: str) -> int:
    """Number of filters whose action adds ``label_id``."""
    count = 0
    for rule in client.list_filters():
        action = rule.get("action")
        if not action:
            continue
        if label_id in (action.get("addLabelIds") or []):
            count += 1
    return count
