"""Gmail Label Audit - per-mailbox statistics for a designated Gmail label."""

from gmail_label_audit.core.models import (
    AggregateState,
    LabelInfo,
    MailboxIdentity,
    MailboxOutcome,
    MessageMetadata,
    TrafficDirection,
)
from gmail_label_audit.pipeline.processor import MailboxProcessor

__all__ = [
    "AggregateState",
    "LabelInfo",
    "MailboxIdentity",
    "MailboxOutcome",
    "MailboxProcessor",
    "MessageMetadata",
    "TrafficDirection",
]
