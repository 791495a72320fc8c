"""
ESG priority engines: KPIs, reports, and at-risk facilities.

Factors
-------
ESGKPI (active KPIs only):
    target deadline       year-end of the current target; overdue 40 / today 35
    performance           missed 50, off_track 40, at_risk 25
    importance            weight ≥30% → 15, ≥20% → 8, ≥10% → 3

ESGReport:
    period deadline       overdue 40 / today 35 / ≤3d 28 / ≤7d 18
                          (draft and overdue reports only)
    status                overdue 45, draft 20
    report type           annual 10, semi_annual 6, quarterly 3

FacilityAtRisk:
    next deadline         overdue 35 / today 30 / ≤3d 25 / ≤7d 15
    margin impact         ≥20 bps → 35, ≥10 bps → 20, >0 → 10
    at-risk KPI count     ≥5 → 30, ≥3 → 18, ≥1 → 8

The current target of a KPI is its first target not yet achieved.
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
from loan_priority.models.esg import ESGKPI, ESGReport, FacilityAtRisk
from loan_priority.taxonomy.reason_taxonomy import ReasonType
from loan_priority.utils.time_utils import Clock

KPI_TARGET_TIERS = DeadlineTiers(overdue=40, today=35, within_3_days=0, within_7_days=0)
REPORT_PERIOD_TIERS = DeadlineTiers(overdue=40, today=35, within_3_days=28, within_7_days=18)
FACILITY_DEADLINE_TIERS = DeadlineTiers(overdue=35, today=30, within_3_days=25, within_7_days=15)

_PERFORMANCE: dict[str, tuple[float, str]] = {
    "missed":    (50, "Target missed"),
    "off_track": (40, "KPI off track"),
    "at_risk":   (25, "KPI at risk"),
}

# (min_weight, score, label prefix), highest first
_KPI_WEIGHT_BANDS: tuple[tuple[float, float, str], ...] = (
    (30, 15, "High impact KPI"),
    (20,  8, "Material KPI"),
    (10,  3, "Weighted KPI"),
)

# (min_bps, score); anything above zero scores at least the last band
_MARGIN_IMPACT_BANDS: tuple[tuple[float, float], ...] = ((20, 35), (10, 20), (0, 10))

_OPEN_REPORT_STATUSES = frozenset({"draft", "overdue"})


# ── Factors ───────────────────────────────────────────────────────────────────

def _kpi_target_deadline(kpi: ESGKPI) -> Optional[str]:
    target = kpi.current_target if kpi.is_active else None
    return f"{target.target_year}-12-31" if target else None


def kpi_performance_factor(kpi: ESGKPI) -> FactorOutcome:
    target = kpi.current_target if kpi.is_active else None
    if target is None or target.target_status not in _PERFORMANCE:
        return NO_CONTRIBUTION
    score, label = _PERFORMANCE[target.target_status]
    return FactorOutcome.contribution(ReasonType.PERFORMANCE, label, score)


def kpi_importance_factor(kpi: ESGKPI) -> FactorOutcome:
    if not kpi.is_active:
        return NO_CONTRIBUTION
    for minimum, score, prefix in _KPI_WEIGHT_BANDS:
        if kpi.weight >= minimum:
            return FactorOutcome.contribution(
                ReasonType.IMPORTANCE, f"{prefix} ({kpi.weight:g}% weight)", score,
            )
    return NO_CONTRIBUTION


report_status_factor = status_score(
    lambda report: report.status,
    {"overdue": 45, "draft": 20},
    ReasonType.STATUS,
    labels={"overdue": "Report overdue", "draft": "Draft pending submission"},
)

report_type_factor = status_score(
    lambda report: report.report_type,
    {"annual": 10, "semi_annual": 6, "quarterly": 3},
    ReasonType.REPORT_TYPE,
    labels={
        "annual":      "Annual report",
        "semi_annual": "Semi-annual report",
        "quarterly":   "Quarterly report",
    },
)


def margin_impact_factor(facility: FacilityAtRisk) -> FactorOutcome:
    impact = facility.margin_impact_bps
    if impact <= 0:
        return NO_CONTRIBUTION
    for minimum, score in _MARGIN_IMPACT_BANDS:
        if impact >= minimum:
            return FactorOutcome.contribution(
                ReasonType.MARGIN_IMPACT, f"{impact:g} bps margin risk", score,
            )
    return NO_CONTRIBUTION


at_risk_kpis_factor = count_tiers(
    lambda facility: facility.at_risk_kpis,
    ((5, 30), (3, 18), (1, 8)),
    ReasonType.RISK_COUNT,
    label=lambda n: f"{plural(n, 'KPI')} at risk",
)


# ── Action suggestions ────────────────────────────────────────────────────────

def suggest_kpi_action(kpi: ESGKPI, reasons: Sequence[PriorityReason]) -> str:
    if not reasons:
        return "Monitor KPI performance"

    top = reasons[0]
    if top.type == ReasonType.PERFORMANCE:
        status = kpi.current_target.target_status if kpi.current_target else None
        if status == "missed":
            return "Initiate remediation plan and stakeholder communication"
        if status == "off_track":
            return "Implement corrective actions immediately"
        return "Review performance drivers and adjust strategy"
    if top.type == ReasonType.DEADLINE:
        return "Accelerate KPI initiatives to meet target"
    if top.type == ReasonType.IMPORTANCE:
        return "Prioritize high-impact KPI monitoring"
    return "Review KPI status"


def suggest_report_action(report: ESGReport, reasons: Sequence[PriorityReason]) -> str:
    if not reasons:
        return "Monitor reporting schedule"

    top = reasons[0]
    if top.type == ReasonType.DEADLINE:
        if "overdue" in top.label:
            return "Submit overdue report immediately"
        return "Finalize and submit report"
    if top.type == ReasonType.STATUS:
        if report.status == "overdue":
            return "Escalate overdue report to management"
        return "Complete report draft and review"
    return "Review report requirements"


def suggest_facility_action(
    facility: FacilityAtRisk,
    reasons: Sequence[PriorityReason],
) -> str:
    if not reasons:
        return "Monitor facility performance"

    top = reasons[0]
    if top.type == ReasonType.MARGIN_IMPACT:
        return "Implement mitigation strategies to avoid margin step-up"
    if top.type == ReasonType.RISK_COUNT:
        return "Review multiple at-risk KPIs and develop action plan"
    if top.type == ReasonType.DEADLINE:
        return "Prepare performance documentation and engage with lender"
    return "Review facility ESG status"


# ── Engine factories ──────────────────────────────────────────────────────────

def create_esg_kpi_engine(
    *,
    clock: Optional[Clock] = None,
    stats_thresholds: Optional[StatsThresholds] = None,
) -> PriorityEngine[ESGKPI]:
    """Build a fresh ESG KPI engine."""
    return PriorityEngine(
        factors=[
            deadline_proximity(_kpi_target_deadline, KPI_TARGET_TIERS, subject="Target", clock=clock),
            kpi_performance_factor,
            kpi_importance_factor,
        ],
        action_suggestion_generator=suggest_kpi_action,
        stats_thresholds=stats_thresholds or DEFAULT_STATS_THRESHOLDS,
        name="esg_kpi",
    )


def create_esg_report_engine(
    *,
    clock: Optional[Clock] = None,
    stats_thresholds: Optional[StatsThresholds] = None,
) -> PriorityEngine[ESGReport]:
    """Build a fresh ESG report engine. Submitted reports have no period deadline."""
    return PriorityEngine(
        factors=[
            deadline_proximity(
                lambda report: report.period_end if report.status in _OPEN_REPORT_STATUSES else None,
                REPORT_PERIOD_TIERS,
                subject="Reporting period",
                clock=clock,
            ),
            report_status_factor,
            report_type_factor,
        ],
        action_suggestion_generator=suggest_report_action,
        stats_thresholds=stats_thresholds or DEFAULT_STATS_THRESHOLDS,
        name="esg_report",
    )


def create_at_risk_facility_engine(
    *,
    clock: Optional[Clock] = None,
    stats_thresholds: Optional[StatsThresholds] = None,
) -> PriorityEngine[FacilityAtRisk]:
    """Build a fresh at-risk facility engine."""
    return PriorityEngine(
        factors=[
            deadline_proximity(
                lambda facility: facility.next_deadline,
                FACILITY_DEADLINE_TIERS,
                clock=clock,
            ),
            margin_impact_factor,
            at_risk_kpis_factor,
        ],
        action_suggestion_generator=suggest_facility_action,
        stats_thresholds=stats_thresholds or DEFAULT_STATS_THRESHOLDS,
        name="at_risk_facility",
    )


@lru_cache(maxsize=None)
def default_esg_kpi_engine() -> PriorityEngine[ESGKPI]:
    return create_esg_kpi_engine()


@lru_cache(maxsize=None)
def default_esg_report_engine() -> PriorityEngine[ESGReport]:
    return create_esg_report_engine()


@lru_cache(maxsize=None)
def default_at_risk_facility_engine() -> PriorityEngine[FacilityAtRisk]:
    return create_at_risk_facility_engine()


# ── Wrappers ──────────────────────────────────────────────────────────────────

def calculate_esg_kpi_priority(
    kpi: ESGKPI,
    engine: Optional[PriorityEngine[ESGKPI]] = None,
) -> PriorityResult:
    return (engine or default_esg_kpi_engine()).calculate_priority(kpi)


def prioritize_esg_kpis(
    kpis: Iterable[ESGKPI],
    engine: Optional[PriorityEngine[ESGKPI]] = None,
) -> list[Prioritized[ESGKPI]]:
    return (engine or default_esg_kpi_engine()).prioritize_items(kpis)


def get_esg_kpi_inbox_stats(
    kpis: Sequence[Prioritized[ESGKPI]],
    engine: Optional[PriorityEngine[ESGKPI]] = None,
) -> PriorityStats:
    return (engine or default_esg_kpi_engine()).get_stats(kpis)


def calculate_esg_report_priority(
    report: ESGReport,
    engine: Optional[PriorityEngine[ESGReport]] = None,
) -> PriorityResult:
    return (engine or default_esg_report_engine()).calculate_priority(report)


def prioritize_esg_reports(
    reports: Iterable[ESGReport],
    engine: Optional[PriorityEngine[ESGReport]] = None,
) -> list[Prioritized[ESGReport]]:
    return (engine or default_esg_report_engine()).prioritize_items(reports)


def get_esg_report_inbox_stats(
    reports: Sequence[Prioritized[ESGReport]],
    engine: Optional[PriorityEngine[ESGReport]] = None,
) -> PriorityStats:
    return (engine or default_esg_report_engine()).get_stats(reports)


def calculate_at_risk_facility_priority(
    facility: FacilityAtRisk,
    engine: Optional[PriorityEngine[FacilityAtRisk]] = None,
) -> PriorityResult:
    return (engine or default_at_risk_facility_engine()).calculate_priority(facility)


def prioritize_at_risk_facilities(
    facilities: Iterable[FacilityAtRisk],
    engine: Optional[PriorityEngine[FacilityAtRisk]] = None,
) -> list[Prioritized[FacilityAtRisk]]:
    return (engine or default_at_risk_facility_engine()).prioritize_items(facilities)


def get_at_risk_facility_inbox_stats(
    facilities: Sequence[Prioritized[FacilityAtRisk]],
    engine: Optional[PriorityEngine[FacilityAtRisk]] = None,
) -> PriorityStats:
    return (engine or default_at_risk_facility_engine()).get_stats(facilities)
