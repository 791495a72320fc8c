"""
Trading priority engines: trades, trade details, and settlements.

Factors
-------
Trade:
    settlement deadline   overdue 50 / today 45 / ≤3d 35 / ≤7d 25
    flagged DD items      ≥5 → 35, ≥3 → 22, ≥1 → 12
    open questions        ≥10 → 20, ≥5 → 12, ≥1 → 5
    DD progress           (in_due_diligence only) <30% → 25, <60% → 12
    trade status bonus    pending_settlement 15, pending_consent 12,
                          in_due_diligence 8, documentation 5

TradeDetail:
    settlement deadline, flagged items, open questions (as Trade)
    consent               required, not received, pending_consent → 30
    DD progress           (as Trade)

Settlement:
    settlement deadline   (as Trade)
    amount                ≥50M → 15, ≥10M → 8, ≥1M → 3

Engines are built by the ``create_*_engine`` factories. The module-level
wrappers (``calculate_trade_priority`` etc.) use a default engine built on
first use; pass ``engine=`` to use an explicitly constructed one instead.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable, Optional, Sequence

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
from loan_priority.engine.priority_engine import (
    DEFAULT_STATS_THRESHOLDS,
    PriorityEngine,
    PriorityResult,
    PriorityStats,
    Prioritized,
    StatsThresholds,
)
from loan_priority.models.trading import Settlement, Trade, TradeDetail
from loan_priority.taxonomy.reason_taxonomy import ReasonType
from loan_priority.utils.time_utils import Clock

SETTLEMENT_DEADLINE_TIERS = DeadlineTiers(
    overdue=50, today=45, within_3_days=35, within_7_days=25,
)

_FLAGGED_ITEM_BANDS: tuple[tuple[int, float], ...] = ((5, 35), (3, 22), (1, 12))
_OPEN_QUESTION_BANDS: tuple[tuple[int, float], ...] = ((10, 20), (5, 12), (1, 5))

_TRADE_STATUS_BONUS: dict[str, float] = {
    "pending_settlement": 15,
    "pending_consent":    12,
    "in_due_diligence":    8,
    "documentation":       5,
}

# (min_amount, score, label), highest first
_AMOUNT_BANDS: tuple[tuple[float, float, str], ...] = (
    (50_000_000, 15, "Large settlement amount"),
    (10_000_000,  8, "Significant settlement amount"),
    (1_000_000,   3, "Material settlement amount"),
)

_TRADE_ACTIONS: dict[ReasonType, str] = {
    ReasonType.FLAGGED_ITEMS:  "Review and resolve flagged DD items",
    ReasonType.OPEN_QUESTIONS: "Follow up on open questions with counterparty",
    ReasonType.DD_PROGRESS:    "Accelerate due diligence process",
    ReasonType.CONSENT:        "Obtain consent from required parties",
    ReasonType.TRADE_STATUS:   "Advance trade to next milestone",
}


# ── Factors ───────────────────────────────────────────────────────────────────

flagged_items_factor = count_tiers(
    lambda trade: trade.flagged_items,
    _FLAGGED_ITEM_BANDS,
    ReasonType.FLAGGED_ITEMS,
    label=lambda n: f"{plural(n, 'item')} flagged",
)

open_questions_factor = count_tiers(
    lambda trade: trade.open_questions,
    _OPEN_QUESTION_BANDS,
    ReasonType.OPEN_QUESTIONS,
    label=lambda n: plural(n, "open question"),
)

trade_status_factor = status_score(
    lambda trade: trade.status,
    _TRADE_STATUS_BONUS,
    ReasonType.TRADE_STATUS,
)


def dd_progress_factor(trade: Trade) -> FactorOutcome:
    """Lagging due diligence, scored only while the trade is in DD."""
    if trade.status != "in_due_diligence":
        return NO_CONTRIBUTION
    progress = trade.dd_progress
    if progress < 30:
        return FactorOutcome.contribution(
            ReasonType.DD_PROGRESS, f"Only {progress:g}% DD complete", 25,
        )
    if progress < 60:
        return FactorOutcome.contribution(
            ReasonType.DD_PROGRESS, f"{progress:g}% DD complete", 12,
        )
    return NO_CONTRIBUTION


def consent_factor(trade: TradeDetail) -> FactorOutcome:
    if not trade.consent_required or trade.consent_received:
        return NO_CONTRIBUTION
    if trade.status != "pending_consent":
        return NO_CONTRIBUTION
    return FactorOutcome.contribution(ReasonType.CONSENT, "Awaiting consent", 30)


def settlement_amount_factor(settlement: Settlement) -> FactorOutcome:
    for minimum, score, label in _AMOUNT_BANDS:
        if settlement.amount >= minimum:
            return FactorOutcome.contribution(ReasonType.AMOUNT, label, score)
    return NO_CONTRIBUTION


# ── Action suggestions ────────────────────────────────────────────────────────

def suggest_trade_action(trade: Trade, reasons: Sequence[PriorityReason]) -> str:
    """Pick the next step from the dominant reason."""
    if not reasons:
        return "Monitor trade progress"

    top = reasons[0]
    if top.type == ReasonType.DEADLINE:
        if "overdue" in top.label:
            return "Expedite settlement immediately"
        return "Prepare settlement documentation"
    return _TRADE_ACTIONS.get(top.type, "Review trade status")


def suggest_settlement_action(
    settlement: Settlement,
    reasons: Sequence[PriorityReason],
) -> str:
    if not reasons:
        return "Monitor settlement schedule"

    top = reasons[0]
    if top.type == ReasonType.DEADLINE:
        if "overdue" in top.label:
            return "Complete overdue settlement immediately"
        return "Prepare funds and finalize settlement"
    if top.type == ReasonType.AMOUNT:
        return "Ensure funds availability for large settlement"
    return "Review settlement requirements"


# ── Engine factories ──────────────────────────────────────────────────────────

def _settlement_deadline(clock: Optional[Clock]):
    return deadline_proximity(
        lambda item: item.settlement_date,
        SETTLEMENT_DEADLINE_TIERS,
        subject="Settlement",
        clock=clock,
    )


def create_trade_engine(
    *,
    clock: Optional[Clock] = None,
    stats_thresholds: Optional[StatsThresholds] = None,
) -> PriorityEngine[Trade]:
    """Build a fresh trade inbox engine."""
    return PriorityEngine(
        factors=[
            _settlement_deadline(clock),
            flagged_items_factor,
            open_questions_factor,
            dd_progress_factor,
            trade_status_factor,
        ],
        action_suggestion_generator=suggest_trade_action,
        stats_thresholds=stats_thresholds or DEFAULT_STATS_THRESHOLDS,
        name="trade",
    )


def create_trade_detail_engine(
    *,
    clock: Optional[Clock] = None,
    stats_thresholds: Optional[StatsThresholds] = None,
) -> PriorityEngine[TradeDetail]:
    """Build a fresh trade detail engine (adds consent, drops status bonus)."""
    return PriorityEngine(
        factors=[
            _settlement_deadline(clock),
            flagged_items_factor,
            open_questions_factor,
            consent_factor,
            dd_progress_factor,
        ],
        action_suggestion_generator=suggest_trade_action,
        stats_thresholds=stats_thresholds or DEFAULT_STATS_THRESHOLDS,
        name="trade_detail",
    )


def create_settlement_engine(
    *,
    clock: Optional[Clock] = None,
    stats_thresholds: Optional[StatsThresholds] = None,
) -> PriorityEngine[Settlement]:
    """Build a fresh settlement calendar engine."""
    return PriorityEngine(
        factors=[
            _settlement_deadline(clock),
            settlement_amount_factor,
        ],
        action_suggestion_generator=suggest_settlement_action,
        stats_thresholds=stats_thresholds or DEFAULT_STATS_THRESHOLDS,
        name="settlement",
    )


@lru_cache(maxsize=None)
def default_trade_engine() -> PriorityEngine[Trade]:
    return create_trade_engine()


@lru_cache(maxsize=None)
def default_trade_detail_engine() -> PriorityEngine[TradeDetail]:
    return create_trade_detail_engine()


@lru_cache(maxsize=None)
def default_settlement_engine() -> PriorityEngine[Settlement]:
    return create_settlement_engine()


# ── Wrappers ──────────────────────────────────────────────────────────────────

def calculate_trade_priority(
    trade: Trade,
    engine: Optional[PriorityEngine[Trade]] = None,
) -> PriorityResult:
    return (engine or default_trade_engine()).calculate_priority(trade)


def prioritize_trades(
    trades: Iterable[Trade],
    engine: Optional[PriorityEngine[Trade]] = None,
) -> list[Prioritized[Trade]]:
    return (engine or default_trade_engine()).prioritize_items(trades)


def get_trade_inbox_stats(
    trades: Sequence[Prioritized[Trade]],
    engine: Optional[PriorityEngine[Trade]] = None,
) -> PriorityStats:
    return (engine or default_trade_engine()).get_stats(trades)


def calculate_trade_detail_priority(
    trade: TradeDetail,
    engine: Optional[PriorityEngine[TradeDetail]] = None,
) -> PriorityResult:
    return (engine or default_trade_detail_engine()).calculate_priority(trade)


def prioritize_trade_details(
    trades: Iterable[TradeDetail],
    engine: Optional[PriorityEngine[TradeDetail]] = None,
) -> list[Prioritized[TradeDetail]]:
    return (engine or default_trade_detail_engine()).prioritize_items(trades)


def get_trade_detail_inbox_stats(
    trades: Sequence[Prioritized[TradeDetail]],
    engine: Optional[PriorityEngine[TradeDetail]] = None,
) -> PriorityStats:
    return (engine or default_trade_detail_engine()).get_stats(trades)


def calculate_settlement_priority(
    settlement: Settlement,
    engine: Optional[PriorityEngine[Settlement]] = None,
) -> PriorityResult:
    return (engine or default_settlement_engine()).calculate_priority(settlement)


def prioritize_settlements(
    settlements: Iterable[Settlement],
    engine: Optional[PriorityEngine[Settlement]] = None,
) -> list[Prioritized[Settlement]]:
    return (engine or default_settlement_engine()).prioritize_items(settlements)


def get_settlement_inbox_stats(
    settlements: Sequence[Prioritized[Settlement]],
    engine: Optional[PriorityEngine[Settlement]] = None,
) -> PriorityStats:
    return (engine or default_settlement_engine()).get_stats(settlements)
