"""Tests for header lookup and message metadata parsing."""

from __future__ import annotations

from gmail_label_audit.core.models import MessageMetadata
from gmail_label_audit.core.parser import header_value, parse_message

from tests.fakes import raw_message


class TestHeaderValue:
    """header_value() returns the first exact match or an empty string."""

    def test_returns_matching_value(self) -> None:
        headers = [{"name": "From", "value": "a@x.com"}, {"name": "To", "value": "b@x.com"}]
        assert header_value(headers, "To") == "b@x.com"

    def test_first_match_wins(self) -> None:
        headers = [{"name": "To", "value": "first@x.com"}, {"name": "To", "value": "second@x.com"}]
        assert header_value(headers, "To") == "first@x.com"

    def test_name_is_case_sensitive(self) -> None:
        headers = [{"name": "cc", "value": "c@x.com"}]
        assert header_value(headers, "Cc") == ""

    def test_absent_header_is_empty_string(self) -> None:
        assert header_value([{"name": "From", "value": "a@x.com"}], "Bcc") == ""

    def test_empty_and_none_header_lists(self) -> None:
        assert header_value([], "From") == ""
        assert header_value(None, "From") == ""

    def test_repeated_calls_agree(self) -> None:
        headers = [{"name": "From", "value": "a@x.com"}]
        assert header_value(headers, "From") == header_value(headers, "From")


class TestParseMessage:
    """parse_message() extracts metadata and defaults anything missing."""

    def test_parses_all_fields(self) -> None:
        raw = raw_message(
            "m1",
            sender="Bob <bob@other.com>",
            to="alice@example.com, carol@example.com",
            cc="dave@example.com",
            bcc="erin@example.com",
            size=2048,
            internal_date="1700000000123",
            mime_type="multipart/mixed",
        )

        assert parse_message(raw) == MessageMetadata(
            message_id="m1",
            size_estimate=2048,
            internal_date=1700000000123,
            mime_type="multipart/mixed",
            sender="Bob <bob@other.com>",
            to="alice@example.com, carol@example.com",
            cc="dave@example.com",
            bcc="erin@example.com",
        )

    def test_internal_date_string_is_numeric(self) -> None:
        """Gmail sends internalDate as a string; it must compare numerically."""
        later = parse_message(raw_message("a", internal_date="10000000000000"))
        earlier = parse_message(raw_message("b", internal_date="9000000000000"))
        assert later.internal_date > earlier.internal_date

    def test_missing_payload_defaults(self) -> None:
        parsed = parse_message({"id": "m2", "sizeEstimate": 10})

        assert parsed.size_estimate == 10
        assert parsed.mime_type == ""
        assert parsed.sender == ""
        assert parsed.to == ""

    def test_malformed_numbers_default_to_zero(self) -> None:
        parsed = parse_message(
            {"id": "m3", "sizeEstimate": None, "internalDate": "not-a-date", "payload": {}}
        )

        assert parsed.size_estimate == 0
        assert parsed.internal_date == 0

    def test_missing_cc_and_bcc_are_empty(self) -> None:
        parsed = parse_message(raw_message("m4"))
        assert parsed.cc == ""
        assert parsed.bcc == ""
