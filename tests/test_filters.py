"""Tests for count_filter_rules."""

from __future__ import annotations

from unittest.mock import MagicMock

from gmail_label_audit.pipeline.filters import count_filter_rules


def _client(rules: list[dict]) -> MagicMock:
    client = MagicMock()
    client.list_filters.return_value = rules
    return client


class TestCountFilterRules:
    """Only filters whose action adds the label are counted."""

    def test_counts_matching_rules(self) -> None:
        rules = [
            {"id": "f1", "action": {"addLabelIds": ["Label_1"]}},
            {"id": "f2", "action": {"addLabelIds": ["Label_2", "Label_1"]}},
            {"id": "f3", "action": {"addLabelIds": ["Label_2"]}},
        ]
        assert count_filter_rules(_client(rules), "Label_1") == 2

    def test_rules_without_action_are_skipped(self) -> None:
        rules = [{"id": "f1", "criteria": {"from": "x@y.com"}}, {"id": "f2", "action": {}}]
        assert count_filter_rules(_client(rules), "Label_1") == 0

    def test_action_without_add_labels_is_skipped(self) -> None:
        rules = [{"id": "f1", "action": {"removeLabelIds": ["Label_1"]}}]
        assert count_filter_rules(_client(rules), "Label_1") == 0

    def test_no_rules(self) -> None:
        assert count_filter_rules(_client([]), "Label_1") == 0
