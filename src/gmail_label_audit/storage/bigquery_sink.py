"""BigQuery streaming-insert sink for label audit records."""

from __future__ import annotations

import logging
from typing import Any

from google.api_core.exceptions import GoogleAPIError
from google.cloud import bigquery

from gmail_label_audit.config.settings import LabelAuditSettings
from gmail_label_audit.core.exceptions import SinkError

logger = logging.getLogger(__name__)


class BigQuerySink:
    """Append records to a BigQuery table with ``insert_rows_json``.

    Inserts are at-least-once; deduplication is left to the table's consumers.
    """

    def __init__(self, client: bigquery.Client, dataset_id: str, table_id: str) -> None:
        self._client = client
        self._table = f"{client.project}.{dataset_id}.{table_id}"

    @classmethod
    def from_settings(cls, settings: LabelAuditSettings) -> BigQuerySink:
        """Create a sink using application default credentials."""
        client = bigquery.Client(project=settings.project_id)
        return cls(client, settings.dataset_id, settings.table_id)

    @property
    def table(self) -> str:
        return self._table

    def insert(self, rows: list[dict[str, Any]]) -> None:
        """Stream rows into the table.

        Raises:
            SinkError: If the API call fails or any row is rejected.
        """
        if not rows:
            return
        try:
            errors = self._client.insert_rows_json(self._table, rows)
        except GoogleAPIError as e:
            raise SinkError(f"Insert into {self._table} failed: {e}") from e

        if errors:
            raise SinkError(f"Insert into {self._table} rejected {len(errors)} rows: {errors}")
        logger.debug("Inserted %d rows into %s", len(rows), self._table)
