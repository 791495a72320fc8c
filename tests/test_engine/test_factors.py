"""
Tests for loan_priority/engine/factors.py.

What we test
------------
FactorOutcome:
  - Default outcome is zero score with no reason.
  - contribution() builds a reason whose weight equals the score.
  - Negative scores, reasonless non-zero scores, zero-score reasons, and
    weight/score mismatches are rejected.

deadline_proximity():
  - Boundary offsets -2..8 map to the documented tiers.
  - Overdue labels contain "overdue"; subject prefixes the label.
  - None, empty, and unparseable deadlines contribute nothing.
  - Datetime deadlines ignore time-of-day.
  - A zero-valued tier contributes nothing.

count_tiers():
  - First band with count >= threshold wins; zero/None/negative → nothing.
  - Bands must be non-empty and ordered highest first.

status_score():
  - Mapped states score; unmapped states and None contribute nothing.
  - Labels default to "Status: <state>".
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from types import SimpleNamespace

import pytest

from loan_priority.engine.factors import (
    NO_CONTRIBUTION,
    DeadlineTiers,
    FactorOutcome,
    PriorityReason,
    count_tiers,
    deadline_proximity,
    plural,
    status_score,
)
from loan_priority.taxonomy.reason_taxonomy import ReasonType

TIERS = DeadlineTiers(overdue=50, today=45, within_3_days=35, within_7_days=25)


def _item(**fields) -> SimpleNamespace:
    return SimpleNamespace(**fields)


@pytest.fixture
def deadline_factor(clock):
    return deadline_proximity(lambda item: item.due, TIERS, clock=clock)


# ── FactorOutcome ─────────────────────────────────────────────────────────────

class TestFactorOutcome:
    def test_default_is_no_contribution(self):
        outcome = FactorOutcome()
        assert outcome.score == 0
        assert outcome.reason is None
        assert outcome == NO_CONTRIBUTION

    def test_contribution_sets_matching_weight(self):
        outcome = FactorOutcome.contribution(ReasonType.AMOUNT, "Large settlement amount", 15)
        assert outcome.score == 15
        assert outcome.reason == PriorityReason(ReasonType.AMOUNT, "Large settlement amount", 15)

    def test_negative_score_rejected(self):
        with pytest.raises(ValueError, match=">= 0"):
            FactorOutcome(score=-1)

    def test_score_without_reason_rejected(self):
        with pytest.raises(ValueError, match="without a reason"):
            FactorOutcome(score=8)

    def test_reason_with_zero_score_rejected(self):
        reason = PriorityReason(ReasonType.STATUS, "Pending", 0)
        with pytest.raises(ValueError, match="zero score"):
            FactorOutcome(score=0, reason=reason)

    def test_weight_mismatch_rejected(self):
        reason = PriorityReason(ReasonType.STATUS, "Pending", 10)
        with pytest.raises(ValueError, match="must equal"):
            FactorOutcome(score=12, reason=reason)

    def test_reason_as_dict_uses_wire_value(self):
        reason = PriorityReason(ReasonType.FLAGGED_ITEMS, "5 items flagged", 35)
        assert reason.as_dict() == {
            "type": "flagged_items",
            "label": "5 items flagged",
            "weight": 35,
        }


# ── deadline_proximity ────────────────────────────────────────────────────────

class TestDeadlineProximity:
    @pytest.mark.parametrize(
        "offset, expected_score",
        [
            (-2, 50),
            (-1, 50),
            (0, 45),
            (1, 35),
            (2, 35),
            (3, 35),
            (4, 25),
            (7, 25),
            (8, 0),
        ],
    )
    def test_boundary_offsets(self, deadline_factor, offset_date, offset, expected_score):
        outcome = deadline_factor(_item(due=offset_date(offset)))
        assert outcome.score == expected_score
        if expected_score:
            assert outcome.reason.type == ReasonType.DEADLINE
            assert outcome.reason.weight == expected_score
        else:
            assert outcome.reason is None

    def test_overdue_label_contains_overdue(self, deadline_factor, offset_date):
        outcome = deadline_factor(_item(due=offset_date(-2)))
        assert "overdue" in outcome.reason.label
        assert outcome.reason.label == "Deadline overdue by 2 days"

    def test_single_day_overdue_is_singular(self, deadline_factor, offset_date):
        outcome = deadline_factor(_item(due=offset_date(-1)))
        assert outcome.reason.label == "Deadline overdue by 1 day"

    def test_today_label(self, deadline_factor, offset_date):
        assert deadline_factor(_item(due=offset_date(0))).reason.label == "Deadline due today"

    def test_upcoming_labels_do_not_say_overdue(self, deadline_factor, offset_date):
        for offset in (0, 1, 3, 4, 7):
            assert "overdue" not in deadline_factor(_item(due=offset_date(offset))).reason.label

    def test_subject_prefixes_label(self, clock, offset_date):
        factor = deadline_proximity(lambda item: item.due, TIERS, subject="Waiver", clock=clock)
        assert factor(_item(due=offset_date(3))).reason.label == "Waiver due in 3 days"

    @pytest.mark.parametrize(
        "value",
        [None, "", "   ", "not-a-date", "2026-13-45", "2026-03-01garbage", "2026-03-02 not a date", 12345],
    )
    def test_absent_or_malformed_deadline_contributes_nothing(self, deadline_factor, value):
        outcome = deadline_factor(_item(due=value))
        assert outcome == NO_CONTRIBUTION

    def test_datetime_string_uses_calendar_day(self, deadline_factor, offset_date):
        late_in_day = f"{offset_date(0)}T23:59:00"
        assert deadline_factor(_item(due=late_in_day)).score == 45

    def test_datetime_object_accepted(self, deadline_factor, today):
        value = datetime(today.year, today.month, today.day, 8, 30, tzinfo=timezone.utc)
        assert deadline_factor(_item(due=value)).score == 45

    def test_date_object_accepted(self, deadline_factor, today):
        assert deadline_factor(_item(due=today)).score == 45

    def test_zero_tier_contributes_nothing(self, clock, offset_date):
        tiers = DeadlineTiers(overdue=50, today=45, within_3_days=35, within_7_days=0)
        factor = deadline_proximity(lambda item: item.due, tiers, clock=clock)
        assert factor(_item(due=offset_date(5))) == NO_CONTRIBUTION

    def test_clock_is_read_per_call(self):
        current = {"today": date(2026, 3, 2)}
        factor = deadline_proximity(lambda item: item.due, TIERS, clock=lambda: current["today"])
        item = _item(due="2026-03-05")
        assert factor(item).score == 35
        current["today"] = date(2026, 3, 6)
        assert factor(item).score == 50


# ── count_tiers ───────────────────────────────────────────────────────────────

class TestCountTiers:
    @pytest.fixture
    def factor(self):
        return count_tiers(
            lambda item: item.count,
            [(5, 35), (3, 22), (1, 12)],
            ReasonType.FLAGGED_ITEMS,
            label=lambda n: f"{plural(n, 'item')} flagged",
        )

    @pytest.mark.parametrize(
        "count, expected",
        [(0, 0), (1, 12), (2, 12), (3, 22), (4, 22), (5, 35), (40, 35)],
    )
    def test_band_selection(self, factor, count, expected):
        assert factor(_item(count=count)).score == expected

    def test_label_pluralises(self, factor):
        assert factor(_item(count=1)).reason.label == "1 item flagged"
        assert factor(_item(count=3)).reason.label == "3 items flagged"

    @pytest.mark.parametrize("count", [None, 0, -3])
    def test_non_positive_counts_contribute_nothing(self, factor, count):
        assert factor(_item(count=count)) == NO_CONTRIBUTION

    def test_empty_bands_rejected(self):
        with pytest.raises(ValueError, match="at least one band"):
            count_tiers(lambda item: 1, [], ReasonType.OPEN_QUESTIONS, label=str)

    def test_unordered_bands_rejected(self):
        with pytest.raises(ValueError, match="highest threshold first"):
            count_tiers(lambda item: 1, [(1, 5), (10, 20)], ReasonType.OPEN_QUESTIONS, label=str)

    def test_count_below_lowest_band(self):
        factor = count_tiers(lambda item: item.count, [(5, 10)], ReasonType.OPEN_QUESTIONS, label=str)
        assert factor(_item(count=2)) == NO_CONTRIBUTION


# ── status_score ──────────────────────────────────────────────────────────────

class TestStatusScore:
    @pytest.fixture
    def factor(self):
        return status_score(
            lambda item: item.status,
            {"pending_settlement": 15, "in_due_diligence": 8},
            ReasonType.TRADE_STATUS,
        )

    def test_mapped_state_scores(self, factor):
        outcome = factor(_item(status="pending_settlement"))
        assert outcome.score == 15
        assert outcome.reason.type == ReasonType.TRADE_STATUS

    def test_default_label(self, factor):
        assert factor(_item(status="in_due_diligence")).reason.label == "Status: in due diligence"

    def test_custom_label(self):
        factor = status_score(
            lambda item: item.status, {"overdue": 45}, ReasonType.STATUS, labels={"overdue": "Overdue"},
        )
        assert factor(_item(status="overdue")).reason.label == "Overdue"

    @pytest.mark.parametrize("status", ["draft", None, "unknown_state"])
    def test_unmapped_states_contribute_nothing(self, factor, status):
        assert factor(_item(status=status)) == NO_CONTRIBUTION


def test_plural_helper():
    assert plural(1, "open question") == "1 open question"
    assert plural(2, "open question") == "2 open questions"
    assert plural(2, "child", "children") == "2 children"
