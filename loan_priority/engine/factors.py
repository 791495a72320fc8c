"""
Factor extractors: the unit of urgency scoring.

A factor is a plain callable ``item -> FactorOutcome`` that scores exactly one
signal. Factors must be pure: no I/O, no randomness, no mutable globals. The
only ambient input is "today", which deadline factors read from an injectable
clock.

Outcome contract
----------------
    FactorOutcome(score=0)                      # factor does not apply
    FactorOutcome(score=w, reason=<weight=w>)   # factor contributed w points

A non-zero score always carries a reason whose weight equals the score, so an
item's total is auditable as the sum of its reasons. ``FactorOutcome``
enforces this at construction.

Builders
--------
deadline_proximity : tiered score from days-until-deadline.
count_tiers        : threshold bands over a count (flagged items, questions).
status_score       : fixed score per enum state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, TypeVar

from loan_priority.taxonomy.reason_taxonomy import ReasonType
from loan_priority.utils.time_utils import (
    Clock,
    DateLike,
    days_until,
    parse_deadline,
    utc_today,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PriorityReason:
    """Audit record explaining why a factor contributed points.

    Attributes:
        type:   Stable machine-readable category.
        label:  Human-readable explanation shown to users.
        weight: Score this factor contributed for this item.
    """

    type: ReasonType
    label: str
    weight: float

    def as_dict(self) -> dict[str, Any]:
        return {"type": str(self.type), "label": self.label, "weight": self.weight}


@dataclass(frozen=True)
class FactorOutcome:
    """Result of running one factor against one item.

    Raises:
        ValueError: If the outcome breaks the score/reason contract. This is
            a configuration error in the factor, not a data error.
    """

    score: float = 0
    reason: Optional[PriorityReason] = None

    def __post_init__(self) -> None:
        if self.score < 0:
            raise ValueError(f"Factor score must be >= 0, got {self.score}.")
        if self.reason is None:
            if self.score != 0:
                raise ValueError(
                    f"Factor scored {self.score} without a reason; "
                    "non-zero scores must be explained."
                )
            return
        if self.score == 0:
            raise ValueError(
                f"Factor emitted reason '{self.reason.label}' with zero score; "
                "omit the reason instead."
            )
        if self.reason.weight != self.score:
            raise ValueError(
                f"Reason weight ({self.reason.weight}) must equal factor "
                f"score ({self.score})."
            )

    @classmethod
    def contribution(
        cls,
        reason_type: ReasonType,
        label: str,
        weight: float,
    ) -> "FactorOutcome":
        """Build a scored outcome whose reason weight matches the score."""
        return cls(
            score=weight,
            reason=PriorityReason(type=reason_type, label=label, weight=weight),
        )


NO_CONTRIBUTION = FactorOutcome()

FactorExtractor = Callable[[T], FactorOutcome]


# ── Deadline proximity ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DeadlineTiers:
    """Score per deadline tier. Tiers are checked most-urgent first."""

    overdue: float
    today: float
    within_3_days: float
    within_7_days: float


def deadline_proximity(
    date_accessor: Callable[[T], DateLike],
    tiers: DeadlineTiers,
    *,
    subject: str = "Deadline",
    clock: Optional[Clock] = None,
) -> FactorExtractor[T]:
    """Build a factor scoring how close an item's deadline is.

    Tier selection (first match wins):
        days_until <  0 → overdue
        days_until == 0 → today
        days_until <= 3 → within_3_days
        days_until <= 7 → within_7_days
        otherwise       → no contribution

    A missing or unparseable deadline contributes nothing: absent deadlines
    are not urgent.

    Args:
        date_accessor: Reads the deadline from an item.
        tiers:         Score for each tier.
        subject:       Label prefix, e.g. ``"Waiver"`` → "Waiver due today".
        clock:         Returns today's date. Defaults to the UTC date.

    Returns:
        A ``FactorExtractor`` emitting ``ReasonType.DEADLINE`` reasons.
    """
    today_fn = clock or utc_today

    def _factor(item: T) -> FactorOutcome:
        raw = date_accessor(item)
        deadline = parse_deadline(raw)
        if deadline is None:
            if raw not in (None, ""):
                logger.debug("Ignoring unparseable %s value %r", subject.lower(), raw)
            return NO_CONTRIBUTION

        days = days_until(deadline, today_fn())
        if days < 0:
            score, label = tiers.overdue, f"{subject} overdue by {_days(-days)}"
        elif days == 0:
            score, label = tiers.today, f"{subject} due today"
        elif days <= 3:
            score, label = tiers.within_3_days, f"{subject} due in {_days(days)}"
        elif days <= 7:
            score, label = tiers.within_7_days, f"{subject} due in {_days(days)}"
        else:
            return NO_CONTRIBUTION

        if score <= 0:
            return NO_CONTRIBUTION
        return FactorOutcome.contribution(ReasonType.DEADLINE, label, score)

    return _factor


# ── Count bands ───────────────────────────────────────────────────────────────

def count_tiers(
    count_accessor: Callable[[T], Optional[int]],
    bands: Sequence[tuple[int, float]],
    reason_type: ReasonType,
    label: Callable[[int], str],
) -> FactorExtractor[T]:
    """Build a factor scoring a count against threshold bands.

    Args:
        count_accessor: Reads the count from an item.
        bands:          ``(min_count, score)`` pairs, highest threshold first.
                        The first band with ``count >= min_count`` wins.
        reason_type:    Category for the emitted reason.
        label:          Formats the reason label from the count.

    Returns:
        A ``FactorExtractor``. Counts of ``None`` or ``<= 0`` contribute nothing.

    Raises:
        ValueError: If ``bands`` is empty or not ordered highest-first.
    """
    if not bands:
        raise ValueError("count_tiers requires at least one band.")
    thresholds = [minimum for minimum, _ in bands]
    if thresholds != sorted(thresholds, reverse=True):
        raise ValueError(f"Bands must be ordered highest threshold first, got {thresholds}.")

    ordered = tuple(bands)

    def _factor(item: T) -> FactorOutcome:
        count = count_accessor(item)
        if not count or count <= 0:
            return NO_CONTRIBUTION
        for minimum, score in ordered:
            if count >= minimum:
                return FactorOutcome.contribution(reason_type, label(count), score)
        return NO_CONTRIBUTION

    return _factor


# ── Enum states ───────────────────────────────────────────────────────────────

def status_score(
    status_accessor: Callable[[T], Optional[str]],
    scores: Mapping[str, float],
    reason_type: ReasonType,
    labels: Optional[Mapping[str, str]] = None,
) -> FactorExtractor[T]:
    """Build a factor assigning a fixed score per enum state.

    States missing from ``scores`` contribute nothing. Labels default to
    ``"Status: <state>"`` with underscores shown as spaces.
    """
    score_map = dict(scores)
    label_map = dict(labels or {})

    def _factor(item: T) -> FactorOutcome:
        state = status_accessor(item)
        score = score_map.get(state) if state is not None else None
        if not score:
            return NO_CONTRIBUTION
        label = label_map.get(state) or f"Status: {state.replace('_', ' ')}"
        return FactorOutcome.contribution(reason_type, label, score)

    return _factor


def plural(count: int, singular: str, plural_form: Optional[str] = None) -> str:
    """``plural(1, "item") -> "1 item"``, ``plural(3, "item") -> "3 items"``."""
    word = singular if count == 1 else (plural_form or f"{singular}s")
    return f"{count} {word}"


def _days(n: int) -> str:
    return plural(n, "day")
