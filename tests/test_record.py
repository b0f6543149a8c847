"""Tests for assemble_record and the fixed record schema."""

from __future__ import annotations

from datetime import UTC, datetime

from gmail_label_audit.core.models import AggregateState, LabelInfo, MailboxIdentity
from gmail_label_audit.pipeline.record import assemble_record, record_fields

CAPTURED_AT = datetime(2024, 3, 1, 12, 0, 0, tzinfo=UTC)


class TestRecordFields:
    """record_fields() lists columns in a stable order."""

    def test_custom_fields_follow_identity(self) -> None:
        fields = record_fields(["jobFamilyName"])
        assert fields[:6] == ("timestamp", "email", "guid", "orgUnitPath", "suspended", "jobFamilyName")
        assert fields[-1] == "hasAttachments"

    def test_no_duplicates(self) -> None:
        fields = record_fields(["globalGrade"])
        assert len(fields) == len(set(fields))


class TestAssembleRecord:
    """assemble_record() always emits the full column set."""

    def test_found_label(self, identity: MailboxIdentity) -> None:
        label = LabelInfo(
            label_id="Label_1",
            name="Audit",
            messages_total=10,
            messages_unread=1,
            threads_total=8,
            threads_unread=1,
            has_sub_labels=True,
        )
        aggregate = AggregateState(
            counted_messages=10,
            total_estimated_size=5000,
            external_incoming=3,
            external_outgoing=2,
            most_recent_email=1700000000000,
            has_attachments=4,
        )

        record = assemble_record(identity, label, 2, aggregate, captured_at=CAPTURED_AT)

        assert record == {
            "timestamp": "2024-03-01T12:00:00+00:00",
            "email": "alice@example.com",
            "guid": "1234567890",
            "orgUnitPath": "/Engineering",
            "suspended": False,
            "filterRules": 2,
            "labelId": "Label_1",
            "labelName": "Audit",
            "messages": 10,
            "messagesUnread": 1,
            "threads": 8,
            "threadsUnread": 1,
            "hasSubLabels": True,
            "countedMessages": 10,
            "totalEstimatedSize": 5000,
            "nbrExternalIncoming": 3,
            "nbrExternalOutgoing": 2,
            "mostRecentEmail": 1700000000000,
            "hasAttachments": 4,
        }
        assert tuple(record) == record_fields()

    def test_missing_label_uses_defaults(self, identity: MailboxIdentity) -> None:
        record = assemble_record(identity, None, 0, AggregateState(), captured_at=CAPTURED_AT)

        assert tuple(record) == record_fields()
        assert record["labelId"] == ""
        assert record["labelName"] == ""
        assert record["hasSubLabels"] is False
        for name in ("filterRules", "messages", "messagesUnread", "threads", "threadsUnread",
                     "countedMessages", "totalEstimatedSize", "nbrExternalIncoming",
                     "nbrExternalOutgoing", "mostRecentEmail", "hasAttachments"):
            assert record[name] == 0, name

    def test_custom_attributes_present_or_blank(self) -> None:
        identity = MailboxIdentity(
            email="bob@example.com", custom_attributes={"jobFamilyName": "Engineering"}
        )

        record = assemble_record(
            identity, None, 0, AggregateState(),
            custom_fields=["jobFamilyName", "globalGrade"],
            captured_at=CAPTURED_AT,
        )

        assert record["jobFamilyName"] == "Engineering"
        assert record["globalGrade"] == ""
        assert tuple(record) == record_fields(["jobFamilyName", "globalGrade"])

    def test_timestamp_defaults_to_now_utc(self, identity: MailboxIdentity) -> None:
        record = assemble_record(identity, None, 0, AggregateState())
        assert datetime.fromisoformat(record["timestamp"]).tzinfo is not None
