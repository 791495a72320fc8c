"""
Shared pytest fixtures for the loan-priority test suite.

Provides:
  - ``TODAY`` / ``clock``: a pinned "today" so deadline tiers are
    deterministic regardless of when the suite runs.
  - ``days_from_today``: ISO date string N calendar days from ``TODAY``.
  - Fresh domain engines built against the pinned clock.
  - Sample domain object factories for use in multiple test modules.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Callable

import pytest

from loan_priority.domains import compliance, esg, trading
from loan_priority.engine.priority_engine import PriorityEngine
from loan_priority.models.compliance import Covenant, Obligation, UpcomingItem
from loan_priority.models.esg import ESGKPI, ESGReport, FacilityAtRisk
from loan_priority.models.trading import Settlement, Trade, TradeDetail
from loan_priority.utils.time_utils import Clock, fixed_clock

TODAY = date(2026, 3, 2)


def days_from_today(offset: int) -> str:
    """ISO date ``offset`` days after ``TODAY`` (negative = in the past)."""
    return (TODAY + timedelta(days=offset)).isoformat()


# ── Clock ─────────────────────────────────────────────────────────────────────

@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def clock() -> Clock:
    return fixed_clock(TODAY)


@pytest.fixture
def offset_date() -> Callable[[int], str]:
    """``offset_date(-2)`` → ISO date two days before ``TODAY``."""
    return days_from_today


# ── Engines ───────────────────────────────────────────────────────────────────

@pytest.fixture
def trade_engine(clock: Clock) -> PriorityEngine[Trade]:
    return trading.create_trade_engine(clock=clock)


@pytest.fixture
def trade_detail_engine(clock: Clock) -> PriorityEngine[TradeDetail]:
    return trading.create_trade_detail_engine(clock=clock)


@pytest.fixture
def settlement_engine(clock: Clock) -> PriorityEngine[Settlement]:
    return trading.create_settlement_engine(clock=clock)


@pytest.fixture
def upcoming_item_engine(clock: Clock) -> PriorityEngine[UpcomingItem]:
    return compliance.create_upcoming_item_engine(clock=clock)


@pytest.fixture
def covenant_engine(clock: Clock) -> PriorityEngine[Covenant]:
    return compliance.create_covenant_engine(clock=clock)


@pytest.fixture
def obligation_engine(clock: Clock) -> PriorityEngine[Obligation]:
    return compliance.create_obligation_engine(clock=clock)


# ── Sample domain object factories ────────────────────────────────────────────

@pytest.fixture
def make_trade() -> Callable[..., Trade]:
    """Factory for a quiet ``Trade``; override any field via kwargs."""
    def _make(**overrides) -> Trade:
        fields = {
            "id": "trade-1",
            "trade_reference": "TR-2026-001",
            "facility_name": "Project Apollo",
            "borrower_name": "Apollo Industries",
            "seller_name": "BigBank NA",
            "buyer_name": "Capital Partners Fund",
            "status": "draft",
            "trade_amount": 15_000_000,
            "settlement_date": None,
            "dd_progress": 0,
            "flagged_items": 0,
            "open_questions": 0,
        }
        fields.update(overrides)
        return Trade(**fields)

    return _make


@pytest.fixture
def make_trade_detail() -> Callable[..., TradeDetail]:
    def _make(**overrides) -> TradeDetail:
        fields = {
            "id": "trade-1",
            "trade_reference": "TR-2026-001",
            "status": "draft",
            "settlement_date": None,
            "consent_required": False,
            "consent_received": False,
        }
        fields.update(overrides)
        return TradeDetail(**fields)

    return _make


@pytest.fixture
def make_settlement() -> Callable[..., Settlement]:
    def _make(**overrides) -> Settlement:
        fields = {
            "trade_id": "trade-1",
            "trade_reference": "TR-2026-001",
            "settlement_date": None,
            "amount": 500_000,
            "counterparty": "European Credit AG",
            "is_buyer": True,
        }
        fields.update(overrides)
        return Settlement(**fields)

    return _make


@pytest.fixture
def esg_kpi_engine(clock: Clock) -> PriorityEngine[ESGKPI]:
    return esg.create_esg_kpi_engine(clock=clock)


@pytest.fixture
def esg_report_engine(clock: Clock) -> PriorityEngine[ESGReport]:
    return esg.create_esg_report_engine(clock=clock)


@pytest.fixture
def at_risk_facility_engine(clock: Clock) -> PriorityEngine[FacilityAtRisk]:
    return esg.create_at_risk_facility_engine(clock=clock)
