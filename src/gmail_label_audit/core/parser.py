"""Gmail message parser: header lookup and metadata extraction."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from gmail_label_audit.core.models import MessageMetadata

logger = logging.getLogger(__name__)


def header_value(headers: Iterable[Mapping[str, Any]] | None, name: str) -> str:
    """Return the value of the first header called ``name``.

    Names are matched exactly as delivered (case-sensitive). Returns an
    empty string when the header is absent or ``headers`` is empty/None.
    """
    for header in headers or ():
        if header.get("name") == name:
            return header.get("value") or ""
    return ""


def _as_int(value: Any) -> int:
    """Coerce Gmail's numeric fields (often strings) to int, defaulting to 0."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def parse_message(raw_message: Mapping[str, Any]) -> MessageMetadata:
    """Parse a raw Gmail API message dict into MessageMetadata.

    Missing or malformed fields are defaulted rather than raised; an
    absent payload is logged since it usually means a partial response.

    Args:
        raw_message: Message dict from Gmail API (format=metadata or full).

    Returns:
        Parsed MessageMetadata.
    """
    message_id = raw_message.get("id", "")
    payload = raw_message.get("payload")
    if not payload:
        logger.warning("Message %s has no payload, treating headers as empty", message_id)
        payload = {}
    headers = payload.get("headers")

    return MessageMetadata(
        message_id=message_id,
        size_estimate=_as_int(raw_message.get("sizeEstimate")),
        internal_date=_as_int(raw_message.get("internalDate")),
        mime_type=payload.get("mimeType", ""),
        sender=header_value(headers, "From"),
        to=header_value(headers, "To"),
        cc=header_value(headers, "Cc"),
        bcc=header_value(headers, "Bcc"),
    )
