"""Custom exceptions for the Gmail label audit."""


class LabelAuditError(Exception):
    """Base exception for all label audit errors."""


class AuthorizationError(LabelAuditError):
    """Domain-wide delegation for a mailbox was rejected."""


class ProviderError(LabelAuditError):
    """Gmail API call failed and will not be retried."""


class RateLimitError(ProviderError):
    """Gmail API kept returning transient errors until retries ran out."""


class SinkError(LabelAuditError):
    """The warehouse rejected an insert."""


class MailboxTimeoutError(LabelAuditError):
    """Processing a single mailbox exceeded its deadline."""
