"""Dataclasses for the label audit domain model."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TrafficDirection(Enum):
    """Which side of the organization boundary a message crossed, if any."""

    INCOMING_EXTERNAL = "incoming_external"
    OUTGOING_EXTERNAL = "outgoing_external"
    INTERNAL = "internal"


@dataclass(frozen=True)
class MailboxIdentity:
    """Directory attributes of the mailbox owner. Read-only."""

    email: str
    guid: str = ""
    org_unit_path: str = ""
    suspended: bool = False
    custom_attributes: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_directory_user(
        cls,
        user: Mapping[str, Any],
        schema_name: str = "",
        fields: Sequence[str] = (),
    ) -> MailboxIdentity:
        """Build an identity from an Admin Directory user resource.

        Args:
            user: Directory user dict (``primaryEmail``, ``id``, ...).
            schema_name: Custom schema key under ``customSchemas``; empty skips it.
            fields: Attribute names to copy out of the custom schema.
        """
        custom: dict[str, Any] = {}
        if schema_name:
            schema = (user.get("customSchemas") or {}).get(schema_name) or {}
            custom = {name: schema[name] for name in fields if name in schema}

        return cls(
            email=user.get("primaryEmail", ""),
            guid=user.get("id", ""),
            org_unit_path=user.get("orgUnitPath", ""),
            suspended=bool(user.get("suspended", False)),
            custom_attributes=custom,
        )


@dataclass(frozen=True)
class LabelInfo:
    """A resolved target label with its counters."""

    label_id: str
    name: str
    messages_total: int = 0
    messages_unread: int = 0
    threads_total: int = 0
    threads_unread: int = 0
    has_sub_labels: bool = False


@dataclass(frozen=True)
class MessageMetadata:
    """The parts of a Gmail message the aggregate needs."""

    message_id: str
    size_estimate: int = 0
    internal_date: int = 0
    mime_type: str = ""
    sender: str = ""
    to: str = ""
    cc: str = ""
    bcc: str = ""


@dataclass
class AggregateState:
    """Mutable accumulator for one mailbox's messages under the target label.

    Owned by a single aggregation run; never shared between mailboxes.
    """

    counted_messages: int = 0
    total_estimated_size: int = 0
    external_incoming: int = 0
    external_outgoing: int = 0
    most_recent_email: int = 0
    has_attachments: int = 0

    def fold(self, message: MessageMetadata, direction: TrafficDirection) -> None:
        """Add one message to the running totals."""
        self.counted_messages += 1
        self.total_estimated_size += message.size_estimate
        if message.internal_date > self.most_recent_email:
            self.most_recent_email = message.internal_date
        # Coarse attachment proxy: anything that isn't plain multipart/alternative
        if message.mime_type != "multipart/alternative":
            self.has_attachments += 1
        if direction is TrafficDirection.INCOMING_EXTERNAL:
            self.external_incoming += 1
        elif direction is TrafficDirection.OUTGOING_EXTERNAL:
            self.external_outgoing += 1


@dataclass(frozen=True)
class MailboxOutcome:
    """Result of one mailbox run: a record, or the reason there is none."""

    email: str
    record: dict[str, Any] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
