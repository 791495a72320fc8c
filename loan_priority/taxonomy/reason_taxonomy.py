"""
Reason taxonomy for priority scoring.

Two enums describe every ranking output:
  - ``ReasonType``     — the *why*: which signal contributed urgency points?
  - ``PriorityBucket`` — the *how urgent*: coarse band used by inbox stats.

Values are the stable wire strings written into exported audit trails and
matched by action-suggestion generators, so never rename an existing value.

Usage example::

    from loan_priority.taxonomy.reason_taxonomy import ReasonType

    if reasons and reasons[0].type == ReasonType.DEADLINE:
        ...

This module has NO imports from any other ``loan_priority`` package.
"""

from enum import StrEnum


class ReasonType(StrEnum):
    """Category of a single urgency signal."""

    # ── Shared ────────────────────────────────────────────────────────────────
    DEADLINE = "deadline"
    """Date-driven urgency: overdue, due today, or due within a week."""

    STATUS = "status"
    """Workflow state of a compliance item or obligation event."""

    # ── Trading ───────────────────────────────────────────────────────────────
    FLAGGED_ITEMS = "flagged_items"
    """Due-diligence checklist items flagged for review."""

    OPEN_QUESTIONS = "open_questions"
    """Unanswered counterparty questions on a trade."""

    DD_PROGRESS = "dd_progress"
    """Due diligence lagging while the trade sits in DD."""

    CONSENT = "consent"
    """Required borrower/agent consent not yet received."""

    TRADE_STATUS = "trade_status"
    """Fixed bonus for trades in late-lifecycle states."""

    AMOUNT = "amount"
    """Settlement size above a materiality threshold."""

    # ── Compliance ────────────────────────────────────────────────────────────
    ITEM_TYPE = "item_type"
    """Fixed bonus per compliance item type."""

    BREACH = "breach"
    """Covenant already breached."""

    RISK = "risk"
    """Thin covenant headroom."""

    FREQUENCY = "frequency"
    """Reporting cadence of an obligation (more frequent = more urgent)."""

    # ── ESG ───────────────────────────────────────────────────────────────────
    PERFORMANCE = "performance"
    """KPI target missed, off track, or at risk."""

    IMPORTANCE = "importance"
    """KPI weight in the margin ratchet."""

    REPORT_TYPE = "report_type"
    """Fixed bonus per ESG report cadence."""

    MARGIN_IMPACT = "margin_impact"
    """Basis points of margin step-up exposed by at-risk KPIs."""

    RISK_COUNT = "risk_count"
    """Number of at-risk KPIs on a facility."""


class PriorityBucket(StrEnum):
    """Score band used to summarise a ranked list."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
