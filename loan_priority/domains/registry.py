"""
Registry of domain engines by item kind.

Maps each ``ItemKind`` to the pydantic model its items are validated with
and the factory that builds its engine. Used by the CLI to go from a
``--kind`` flag and a JSON file to a ranked inbox.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Callable, Optional

from pydantic import BaseModel

from loan_priority.domains import compliance, esg, trading
from loan_priority.engine.priority_engine import PriorityEngine, StatsThresholds
from loan_priority.models.compliance import Covenant, Obligation, UpcomingItem
from loan_priority.models.esg import ESGKPI, ESGReport, FacilityAtRisk
from loan_priority.models.trading import Settlement, Trade, TradeDetail
from loan_priority.utils.time_utils import Clock


class ItemKind(StrEnum):
    TRADE = "trade"
    TRADE_DETAIL = "trade-detail"
    SETTLEMENT = "settlement"
    UPCOMING = "upcoming"
    COVENANT = "covenant"
    OBLIGATION = "obligation"
    ESG_KPI = "esg-kpi"
    ESG_REPORT = "esg-report"
    AT_RISK_FACILITY = "esg-facility"


EngineFactory = Callable[..., PriorityEngine[Any]]


@dataclass(frozen=True)
class DomainEntry:
    """How to validate and rank one kind of item."""

    model: type[BaseModel]
    create_engine: EngineFactory
    title: str

    def build_engine(
        self,
        clock: Optional[Clock] = None,
        stats_thresholds: Optional[StatsThresholds] = None,
    ) -> PriorityEngine[Any]:
        return self.create_engine(clock=clock, stats_thresholds=stats_thresholds)


DOMAIN_REGISTRY: dict[ItemKind, DomainEntry] = {
    ItemKind.TRADE:        DomainEntry(Trade,        trading.create_trade_engine,           "Trade Inbox"),
    ItemKind.TRADE_DETAIL: DomainEntry(TradeDetail,  trading.create_trade_detail_engine,    "Trade Detail Inbox"),
    ItemKind.SETTLEMENT:   DomainEntry(Settlement,   trading.create_settlement_engine,      "Settlement Calendar"),
    ItemKind.UPCOMING:     DomainEntry(UpcomingItem, compliance.create_upcoming_item_engine, "Compliance Calendar"),
    ItemKind.COVENANT:     DomainEntry(Covenant,     compliance.create_covenant_engine,     "Covenant Watchlist"),
    ItemKind.OBLIGATION:   DomainEntry(Obligation,   compliance.create_obligation_engine,   "Obligation Calendar"),
    ItemKind.ESG_KPI:      DomainEntry(ESGKPI,       esg.create_esg_kpi_engine,             "ESG KPI Watchlist"),
    ItemKind.ESG_REPORT:   DomainEntry(ESGReport,    esg.create_esg_report_engine,          "ESG Report Calendar"),
    ItemKind.AT_RISK_FACILITY: DomainEntry(FacilityAtRisk, esg.create_at_risk_facility_engine, "At-Risk ESG Facilities"),
}


def get_domain(kind: ItemKind | str) -> DomainEntry:
    """Look up a registry entry.

    Raises:
        KeyError: If ``kind`` is not a registered item kind.
    """
    try:
        return DOMAIN_REGISTRY[ItemKind(kind)]
    except ValueError as exc:
        raise KeyError(
            f"Unknown item kind '{kind}'. Valid kinds: {[k.value for k in ItemKind]}"
        ) from exc
