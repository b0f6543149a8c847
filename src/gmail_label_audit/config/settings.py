"""Configuration via pydantic-settings with .env support."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gmail_label_audit.pipeline.record import record_fields


class LabelAuditSettings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_prefix="LABEL_AUDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Target label
    label_name: str = "Audit"
    domain: str = "example.com"
    create_label: bool = False

    # Service account with domain-wide delegation
    service_account_file: Path | None = None
    service_account_email: str = ""
    service_account_private_key: str = ""
    scopes: list[str] = Field(default_factory=lambda: ["https://mail.google.com/"])

    # Paging & concurrency
    page_size: int = Field(default=500, ge=1, le=500)
    fetch_concurrency: int = Field(default=8, ge=1)
    max_workers: int = Field(default=4, ge=1)
    mailbox_timeout_seconds: float | None = 300.0

    # Rate limiting & retry
    max_retries: int = 5
    initial_backoff_seconds: float = 1.0
    max_backoff_seconds: float = 60.0
    inter_page_delay_seconds: float = 0.0
    num_retries: int = 3

    # Sink
    sink: Literal["bigquery", "jsonl"] = "bigquery"
    project_id: str | None = None
    dataset_id: str = "gmail_audit"
    table_id: str = "label_stats"
    output_path: Path = Path("output/label_stats.jsonl")

    # Directory custom schema copied into each record
    custom_schema_name: str = ""
    custom_schema_fields: list[str] = Field(default_factory=list)

    # Logging
    log_level: str = "INFO"

    @field_validator("custom_schema_fields")
    @classmethod
    def check_custom_fields(cls, value: list[str]) -> list[str]:
        clashes = sorted(set(value) & set(record_fields()))
        if clashes:
            raise ValueError(f"custom_schema_fields clash with record columns: {clashes}")
        return value

    def service_account_info(self) -> dict[str, Any] | None:
        """Build service account key info from the inline email/key settings.

        Returns None when no inline key is configured, in which case
        ``service_account_file`` is used instead.
        """
        if not self.service_account_email or not self.service_account_private_key:
            return None
        return {
            "type": "service_account",
            "client_email": self.service_account_email,
            # Keys pasted into env vars usually carry escaped newlines
            "private_key": self.service_account_private_key.replace("\\n", "\n"),
            "token_uri": "https://oauth2.googleapis.com/token",
        }

    @property
    def mailbox_timeout(self) -> float | None:
        """Per-mailbox deadline in seconds, or None when disabled."""
        if not self.mailbox_timeout_seconds:
            return None
        return self.mailbox_timeout_seconds

    def ensure_directories(self) -> None:
        """Create the JSON-lines output directory if it doesn't exist."""
        if self.sink == "jsonl":
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
