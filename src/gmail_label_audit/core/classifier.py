"""Classify a message as crossing the organization boundary inbound or outbound."""

from __future__ import annotations

from gmail_label_audit.core.models import MessageMetadata, TrafficDirection


def classify_traffic(
    sender: str,
    to: str,
    cc: str,
    bcc: str,
    owner: str,
    domain: str,
) -> TrafficDirection:
    """Decide whether a message is external incoming, external outgoing, or neither.

    Matching is by substring, not address parsing: a header "contains" an
    address or ``@domain`` if the text appears anywhere in it.

    1. Sender contains ``owner``: the message is outbound. It is
       external if any receiver (each comma-separated To entry, the Cc
       header, the Bcc header) lacks ``@domain``. Empty entries are not
       receivers; whitespace-only entries are, and lack ``@domain``. An
       outbound message with no receivers at all counts as external.
    2. Otherwise, a sender lacking ``@domain`` makes it external incoming.
    3. Anything else is internal.
    """
    marker = f"@{domain}"

    if owner in sender:
        receivers = [r for r in [*to.split(","), cc, bcc] if r]
        if not receivers or any(marker not in r for r in receivers):
            return TrafficDirection.OUTGOING_EXTERNAL
        return TrafficDirection.INTERNAL

    if marker not in sender:
        return TrafficDirection.INCOMING_EXTERNAL

    return TrafficDirection.INTERNAL


def classify_message(message: MessageMetadata, owner: str, domain: str) -> TrafficDirection:
    """Run classify_traffic on a parsed message's headers."""
    return classify_traffic(message.sender, message.to, message.cc, message.bcc, owner, domain)
