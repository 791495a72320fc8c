"""
Compliance priority engines: calendar items, covenants, and obligations.

Factors
-------
UpcomingItem:
    item deadline         overdue 45 / today 40 / ≤3d 30 / ≤7d 20
    item status           overdue 45, pending 25
    item type bonus       waiver_expiration 15, covenant_test 12,
                          compliance_event 8, notification_due 5

Covenant:
    next test deadline    overdue 35 / today 30 / ≤3d 25 / ≤7d 15
    risk                  breached → 50; headroom <10% → 35, <20% → 20, <30% → 10
    waiver expiration     overdue 45 / today 40 / ≤3d 30 / ≤7d 20

Obligation:
    event deadline        overdue 40 / today 35 / ≤3d 28 / ≤7d 18
    event status          overdue 40, pending 22
    frequency             monthly 5, quarterly 3, annually 1

Covenants carry two independent deadline factors; both report
``ReasonType.DEADLINE`` and are told apart by their label subject.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable, Optional, Sequence

from loan_priority.engine.factors import (
    NO_CONTRIBUTION,
    DeadlineTiers,
    FactorOutcome,
    PriorityReason,
    deadline_proximity,
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
from loan_priority.models.compliance import Covenant, Obligation, UpcomingItem
from loan_priority.taxonomy.reason_taxonomy import ReasonType
from loan_priority.utils.time_utils import Clock

ITEM_DEADLINE_TIERS = DeadlineTiers(overdue=45, today=40, within_3_days=30, within_7_days=20)
COVENANT_TEST_TIERS = DeadlineTiers(overdue=35, today=30, within_3_days=25, within_7_days=15)
WAIVER_EXPIRATION_TIERS = DeadlineTiers(overdue=45, today=40, within_3_days=30, within_7_days=20)
OBLIGATION_DEADLINE_TIERS = DeadlineTiers(overdue=40, today=35, within_3_days=28, within_7_days=18)

# (max_headroom_exclusive, score, label prefix)
_HEADROOM_BANDS: tuple[tuple[float, float, str], ...] = (
    (10, 35, "Only "),
    (20, 20, ""),
    (30, 10, ""),
)


# ── Factors ───────────────────────────────────────────────────────────────────

item_status_factor = status_score(
    lambda item: item.status,
    {"overdue": 45, "pending": 25},
    ReasonType.STATUS,
    labels={"overdue": "Overdue", "pending": "Pending action"},
)

item_type_factor = status_score(
    lambda item: item.type,
    {
        "waiver_expiration": 15,
        "covenant_test":     12,
        "compliance_event":   8,
        "notification_due":   5,
    },
    ReasonType.ITEM_TYPE,
    labels={
        "waiver_expiration": "Waiver expiration",
        "covenant_test":     "Covenant test",
        "compliance_event":  "Compliance event",
        "notification_due":  "Notification due",
    },
)

obligation_status_factor = status_score(
    lambda obligation: obligation.upcoming_event.status,
    {"overdue": 40, "pending": 22},
    ReasonType.STATUS,
    labels={"overdue": "Overdue", "pending": "Pending submission"},
)

obligation_frequency_factor = status_score(
    lambda obligation: obligation.frequency,
    {"monthly": 5, "quarterly": 3, "annually": 1},
    ReasonType.FREQUENCY,
    labels={
        "monthly":   "Monthly obligation",
        "quarterly": "Quarterly obligation",
        "annually":  "Annual obligation",
    },
)


def covenant_risk_factor(covenant: Covenant) -> FactorOutcome:
    """Breach outranks thin headroom; missing test data contributes nothing."""
    if covenant.status == "breached":
        return FactorOutcome.contribution(ReasonType.BREACH, "Covenant breached", 50)

    headroom = covenant.latest_test.headroom_percentage if covenant.latest_test else None
    if headroom is None:
        return NO_CONTRIBUTION
    for ceiling, score, prefix in _HEADROOM_BANDS:
        if headroom < ceiling:
            return FactorOutcome.contribution(
                ReasonType.RISK, f"{prefix}{headroom:.1f}% headroom", score,
            )
    return NO_CONTRIBUTION


# ── Action suggestions ────────────────────────────────────────────────────────

def suggest_item_action(item: UpcomingItem, reasons: Sequence[PriorityReason]) -> str:
    if not reasons:
        return "Monitor compliance schedule"

    top = reasons[0]
    if top.type == ReasonType.DEADLINE:
        if "overdue" in top.label:
            return "Address overdue compliance item immediately"
        return "Prepare compliance deliverable"
    if top.type == ReasonType.STATUS:
        if item.status == "overdue":
            return "Escalate to compliance officer"
        return "Complete pending compliance task"
    return "Review compliance item"


def suggest_covenant_action(covenant: Covenant, reasons: Sequence[PriorityReason]) -> str:
    if not reasons:
        return "Monitor covenant compliance"

    top = reasons[0]
    if top.type == ReasonType.BREACH:
        return "Initiate breach remediation or waiver request"
    if top.type == ReasonType.RISK:
        headroom = covenant.latest_test.headroom_percentage if covenant.latest_test else None
        if headroom is not None and headroom < 15:
            return "Prepare contingency plan and alert stakeholders"
        return "Monitor financial performance closely"
    if top.type == ReasonType.DEADLINE:
        if "waiver" in top.label.lower():
            return "Extend waiver or cure breach"
        return "Prepare covenant test calculation"
    return "Review covenant status"


def suggest_obligation_action(
    obligation: Obligation,
    reasons: Sequence[PriorityReason],
) -> str:
    if not reasons:
        return "Monitor obligation calendar"

    top = reasons[0]
    if top.type == ReasonType.DEADLINE:
        if "overdue" in top.label:
            return "Submit overdue obligation immediately"
        return "Prepare and review obligation deliverable"
    if top.type == ReasonType.STATUS:
        if obligation.upcoming_event.status == "overdue":
            return "Escalate overdue obligation"
        return "Complete pending obligation"
    return "Review obligation requirements"


# ── Engine factories ──────────────────────────────────────────────────────────

def create_upcoming_item_engine(
    *,
    clock: Optional[Clock] = None,
    stats_thresholds: Optional[StatsThresholds] = None,
) -> PriorityEngine[UpcomingItem]:
    """Build a fresh compliance calendar engine."""
    return PriorityEngine(
        factors=[
            deadline_proximity(lambda item: item.date, ITEM_DEADLINE_TIERS, clock=clock),
            item_status_factor,
            item_type_factor,
        ],
        action_suggestion_generator=suggest_item_action,
        stats_thresholds=stats_thresholds or DEFAULT_STATS_THRESHOLDS,
        name="upcoming_item",
    )


def create_covenant_engine(
    *,
    clock: Optional[Clock] = None,
    stats_thresholds: Optional[StatsThresholds] = None,
) -> PriorityEngine[Covenant]:
    """Build a fresh covenant engine."""
    return PriorityEngine(
        factors=[
            deadline_proximity(
                lambda covenant: covenant.next_test_date,
                COVENANT_TEST_TIERS,
                subject="Covenant test",
                clock=clock,
            ),
            covenant_risk_factor,
            deadline_proximity(
                lambda covenant: covenant.waiver.expiration_date if covenant.waiver else None,
                WAIVER_EXPIRATION_TIERS,
                subject="Waiver",
                clock=clock,
            ),
        ],
        action_suggestion_generator=suggest_covenant_action,
        stats_thresholds=stats_thresholds or DEFAULT_STATS_THRESHOLDS,
        name="covenant",
    )


def create_obligation_engine(
    *,
    clock: Optional[Clock] = None,
    stats_thresholds: Optional[StatsThresholds] = None,
) -> PriorityEngine[Obligation]:
    """Build a fresh obligation engine."""
    return PriorityEngine(
        factors=[
            deadline_proximity(
                lambda obligation: obligation.upcoming_event.deadline_date,
                OBLIGATION_DEADLINE_TIERS,
                clock=clock,
            ),
            obligation_status_factor,
            obligation_frequency_factor,
        ],
        action_suggestion_generator=suggest_obligation_action,
        stats_thresholds=stats_thresholds or DEFAULT_STATS_THRESHOLDS,
        name="obligation",
    )


@lru_cache(maxsize=None)
def default_upcoming_item_engine() -> PriorityEngine[UpcomingItem]:
    return create_upcoming_item_engine()


@lru_cache(maxsize=None)
def default_covenant_engine() -> PriorityEngine[Covenant]:
    return create_covenant_engine()


@lru_cache(maxsize=None)
def default_obligation_engine() -> PriorityEngine[Obligation]:
    return create_obligation_engine()


# ── Wrappers ──────────────────────────────────────────────────────────────────

def calculate_upcoming_item_priority(
    item: UpcomingItem,
    engine: Optional[PriorityEngine[UpcomingItem]] = None,
) -> PriorityResult:
    return (engine or default_upcoming_item_engine()).calculate_priority(item)


def prioritize_upcoming_items(
    items: Iterable[UpcomingItem],
    engine: Optional[PriorityEngine[UpcomingItem]] = None,
) -> list[Prioritized[UpcomingItem]]:
    return (engine or default_upcoming_item_engine()).prioritize_items(items)


def get_compliance_inbox_stats(
    items: Sequence[Prioritized[UpcomingItem]],
    engine: Optional[PriorityEngine[UpcomingItem]] = None,
) -> PriorityStats:
    return (engine or default_upcoming_item_engine()).get_stats(items)


def calculate_covenant_priority(
    covenant: Covenant,
    engine: Optional[PriorityEngine[Covenant]] = None,
) -> PriorityResult:
    return (engine or default_covenant_engine()).calculate_priority(covenant)


def prioritize_covenants(
    covenants: Iterable[Covenant],
    engine: Optional[PriorityEngine[Covenant]] = None,
) -> list[Prioritized[Covenant]]:
    return (engine or default_covenant_engine()).prioritize_items(covenants)


def get_covenant_inbox_stats(
    covenants: Sequence[Prioritized[Covenant]],
    engine: Optional[PriorityEngine[Covenant]] = None,
) -> PriorityStats:
    return (engine or default_covenant_engine()).get_stats(covenants)


def calculate_obligation_priority(
    obligation: Obligation,
    engine: Optional[PriorityEngine[Obligation]] = None,
) -> PriorityResult:
    return (engine or default_obligation_engine()).calculate_priority(obligation)


def prioritize_obligations(
    obligations: Iterable[Obligation],
    engine: Optional[PriorityEngine[Obligation]] = None,
) -> list[Prioritized[Obligation]]:
    return (engine or default_obligation_engine()).prioritize_items(obligations)


def get_obligation_inbox_stats(
    obligations: Sequence[Prioritized[Obligation]],
    engine: Optional[PriorityEngine[Obligation]] = None,
) -> PriorityStats:
    return (engine or default_obligation_engine()).get_stats(obligations)
