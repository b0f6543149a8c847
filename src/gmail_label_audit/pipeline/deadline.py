"""Per-mailbox time budget."""

from __future__ import annotations

from time import monotonic

from gmail_label_audit.core.exceptions import MailboxTimeoutError


class Deadline:
    """A point in time after which work for one mailbox is abandoned.

    ``Deadline(None)`` never expires.
    """

    def __init__(self, seconds: float | None) -> None:
        self._seconds = seconds
        self._expires_at = monotonic() + seconds if seconds else None

    def remaining(self) -> float | None:
        """Seconds left, or None when unbounded. Never negative."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - monotonic())

    def check(self, context: str) -> None:
        """Raise MailboxTimeoutError if the deadline has passed."""
        if self._expires_at is not None and monotonic() >= self._expires_at:
            raise MailboxTimeoutError(f"Timed out after {self._seconds}s during {context}")
