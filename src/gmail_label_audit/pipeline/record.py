"""Flatten identity, label and aggregate data into one warehouse row."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from gmail_label_audit.core.models import AggregateState, LabelInfo, MailboxIdentity

IDENTITY_FIELDS = ("timestamp", "email", "guid", "orgUnitPath", "suspended")
LABEL_FIELDS = (
    "filterRules",
    "labelId",
    "labelName",
    "messages",
    "messagesUnread",
    "threads",
    "threadsUnread",
    "hasSubLabels",
)
AGGREGATE_FIELDS = (
    "countedMessages",
    "totalEstimatedSize",
    "nbrExternalIncoming",
    "nbrExternalOutgoing",
    "mostRecentEmail",
    "hasAttachments",
)


def record_fields(custom_fields: Sequence[str] = ()) -> tuple[str, ...]:
    """Column names of every record, in order, for a given custom attribute list."""
    return (*IDENTITY_FIELDS, *custom_fields, *LABEL_FIELDS, *AGGREGATE_FIELDS)


def assemble_record(
    identity: MailboxIdentity,
    label: LabelInfo | None,
    filter_rules: int,
    aggregate: AggregateState,
    *,
    custom_fields: Sequence[str] = (),
    captured_at: datetime | None = None,
) -> dict[str, Any]:
    """Build the output row for one mailbox.

    Every row has the same columns. A missing label yields zero counts,
    empty id/name and ``hasSubLabels=False``; a missing custom attribute
    yields an empty string.
    """
    captured_at = captured_at or datetime.now(UTC)

    record: dict[str, Any] = {
        "timestamp": captured_at.isoformat(),
        "email": identity.email,
        "guid": identity.guid,
        "orgUnitPath": identity.org_unit_path,
        "suspended": identity.suspended,
    }
    for name in custom_fields:
        record[name] = identity.custom_attributes.get(name, "")

    label = label or LabelInfo(label_id="", name="")
    record.update(
        filterRules=filter_rules,
        labelId=label.label_id,
        labelName=label.name,
        messages=label.messages_total,
        messagesUnread=label.messages_unread,
        threads=label.threads_total,
        threadsUnread=label.threads_unread,
        hasSubLabels=label.has_sub_labels,
        countedMessages=aggregate.counted_messages,
        totalEstimatedSize=aggregate.total_estimated_size,
        nbrExternalIncoming=aggregate.external_incoming,
        nbrExternalOutgoing=aggregate.external_outgoing,
        mostRecentEmail=aggregate.most_recent_email,
        hasAttachments=aggregate.has_attachments,
    )
    return record
