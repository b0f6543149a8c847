"""Destination interface for finished records."""

from __future__ import annotations

from typing import Any, Protocol


class RecordSink(Protocol):
    """Anything that can append a batch of flat records."""

    def insert(self, rows: list[dict[str, Any]]) -> None:
        """Append ``rows``. Raises SinkError if the destination rejects them."""
        ...
