"""Tests for trading, compliance, and ESG domain models: validation and immutability."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from loan_priority.models.compliance import Covenant, Obligation, UpcomingItem
from loan_priority.models.esg import ESGKPI, ESGReport, ESGTarget, FacilityAtRisk
from loan_priority.models.trading import VALID_TRADE_STATUSES, Settlement, Trade, TradeDetail


class TestTrade:
    def test_minimal_trade_defaults(self):
        trade = Trade(id="t-1")
        assert trade.status == "draft"
        assert trade.settlement_date is None
        assert (trade.flagged_items, trade.open_questions, trade.dd_progress) == (0, 0, 0)

    def test_all_lifecycle_states_accepted(self):
        for status in VALID_TRADE_STATUSES:
            assert Trade(id="t", status=status).status == status

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            Trade(id="t", status="on_hold")

    @pytest.mark.parametrize(
        "field, value",
        [("dd_progress", 101), ("dd_progress", -1), ("flagged_items", -1), ("trade_amount", -5)],
    )
    def test_out_of_range_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            Trade(id="t", **{field: value})

    def test_malformed_settlement_date_is_kept_raw(self):
        assert Trade(id="t", settlement_date="TBD").settlement_date == "TBD"

    def test_frozen(self):
        trade = Trade(id="t")
        with pytest.raises(ValidationError):
            trade.flagged_items = 3

    def test_detail_extends_trade(self):
        detail = TradeDetail(id="t", consent_required=True)
        assert isinstance(detail, Trade)
        assert detail.consent_received is False


class TestSettlement:
    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            Settlement(trade_id="t", amount=-1)


class TestComplianceModels:
    def test_upcoming_item_requires_known_type(self):
        with pytest.raises(ValidationError):
            UpcomingItem(id="i", type="board_meeting")

    def test_covenant_defaults(self):
        covenant = Covenant(id="c")
        assert covenant.status == "active"
        assert covenant.latest_test is None
        assert covenant.waiver is None

    def test_nested_payload_validates(self):
        covenant = Covenant.model_validate(
            {"id": "c", "latest_test": {"headroom_percentage": 12.5}, "waiver": {"expiration_date": "2026-04-01"}}
        )
        assert covenant.latest_test.headroom_percentage == 12.5
        assert covenant.waiver.expiration_date == "2026-04-01"

    def test_obligation_default_event(self):
        obligation = Obligation(id="o")
        assert obligation.frequency == "quarterly"
        assert obligation.upcoming_event.deadline_date is None
        assert obligation.upcoming_event.status == "upcoming"


class TestESGModels:
    def test_current_target_skips_achieved(self):
        kpi = ESGKPI.model_validate({
            "id": "k",
            "targets": [
                {"target_year": 2025, "target_status": "achieved"},
                {"target_year": 2026, "target_status": "at_risk"},
                {"target_year": 2027},
            ],
        })
        assert kpi.current_target == ESGTarget(target_year=2026, target_status="at_risk")

    def test_no_current_target_when_all_achieved(self):
        kpi = ESGKPI(id="k", targets=(ESGTarget(target_year=2025, target_status="achieved"),))
        assert kpi.current_target is None

    @pytest.mark.parametrize("weight", [-1, 100.5])
    def test_kpi_weight_is_a_percentage(self, weight):
        with pytest.raises(ValidationError):
            ESGKPI(id="k", weight=weight)

    def test_report_defaults(self):
        report = ESGReport(id="r")
        assert (report.report_type, report.status, report.period_end) == ("quarterly", "draft", None)

    def test_unknown_report_status_rejected(self):
        with pytest.raises(ValidationError):
            ESGReport(id="r", status="archived")

    @pytest.mark.parametrize("field, value", [("at_risk_kpis", -1), ("margin_impact_bps", -0.5)])
    def test_facility_counts_non_negative(self, field, value):
        with pytest.raises(ValidationError):
            FacilityAtRisk(id="f", **{field: value})
