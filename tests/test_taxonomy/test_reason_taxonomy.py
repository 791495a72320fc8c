"""Tests for reason taxonomy integrity — wire values, uniqueness, buckets."""

from __future__ import annotations

import re

from loan_priority.taxonomy.reason_taxonomy import PriorityBucket, ReasonType


class TestReasonTypeEnum:
    def test_all_values_are_strings(self):
        for member in ReasonType:
            assert isinstance(member.value, str)

    def test_no_duplicate_values(self):
        values = [m.value for m in ReasonType]
        assert len(values) == len(set(values)), "ReasonType has duplicate values"

    def test_slug_format(self):
        pattern = re.compile(r"^[a-z]+(_[a-z]+)*$")
        for member in ReasonType:
            assert pattern.match(member.value), (
                f"ReasonType.{member.name} = '{member.value}' is not a snake_case slug"
            )

    def test_key_reason_types_exist(self):
        required = {
            "deadline", "status", "flagged_items", "open_questions",
            "dd_progress", "consent", "amount", "breach", "risk",
            "performance", "importance", "report_type", "margin_impact", "risk_count",
        }
        actual = {m.value for m in ReasonType}
        missing = required - actual
        assert not missing, f"Required ReasonType values missing: {missing}"

    def test_compares_equal_to_wire_string(self):
        assert ReasonType.DEADLINE == "deadline"
        assert str(ReasonType.TRADE_STATUS) == "trade_status"


class TestPriorityBucketEnum:
    def test_four_buckets_in_urgency_order(self):
        assert [m.value for m in PriorityBucket] == ["critical", "high", "medium", "low"]
