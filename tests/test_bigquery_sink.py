"""Tests for BigQuerySink with a mocked BigQuery client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from google.api_core.exceptions import BadRequest

from gmail_label_audit.config.settings import LabelAuditSettings
from gmail_label_audit.core.exceptions import SinkError
from gmail_label_audit.storage.bigquery_sink import BigQuerySink


@pytest.fixture
def bq_client() -> MagicMock:
    client = MagicMock()
    client.project = "my-project"
    client.insert_rows_json.return_value = []
    return client


class TestBigQuerySink:
    """BigQuerySink.insert() streams rows and surfaces rejections."""

    def test_table_path(self, bq_client: MagicMock) -> None:
        sink = BigQuerySink(bq_client, "gmail_audit", "label_stats")
        assert sink.table == "my-project.gmail_audit.label_stats"

    def test_inserts_rows(self, bq_client: MagicMock) -> None:
        rows = [{"email": "a@example.com"}]

        BigQuerySink(bq_client, "ds", "tbl").insert(rows)

        bq_client.insert_rows_json.assert_called_once_with("my-project.ds.tbl", rows)

    def test_empty_batch_is_a_no_op(self, bq_client: MagicMock) -> None:
        BigQuerySink(bq_client, "ds", "tbl").insert([])
        bq_client.insert_rows_json.assert_not_called()

    def test_row_errors_raise(self, bq_client: MagicMock) -> None:
        bq_client.insert_rows_json.return_value = [
            {"index": 0, "errors": [{"reason": "invalid", "message": "no such field: foo"}]}
        ]

        with pytest.raises(SinkError, match="rejected 1 rows"):
            BigQuerySink(bq_client, "ds", "tbl").insert([{"foo": 1}])

    def test_api_errors_raise(self, bq_client: MagicMock) -> None:
        bq_client.insert_rows_json.side_effect = BadRequest("table not found")

        with pytest.raises(SinkError, match="Insert into my-project.ds.tbl failed"):
            BigQuerySink(bq_client, "ds", "tbl").insert([{"email": "a@example.com"}])

    def test_from_settings(self) -> None:
        settings = LabelAuditSettings(
            project_id="proj", dataset_id="ds", table_id="tbl", _env_file=None
        )
        with patch("gmail_label_audit.storage.bigquery_sink.bigquery.Client") as mock_client_cls:
            mock_client_cls.return_value.project = "proj"
            sink = BigQuerySink.from_settings(settings)

        mock_client_cls.assert_called_once_with(project="proj")
        assert sink.table == "proj.ds.tbl"
