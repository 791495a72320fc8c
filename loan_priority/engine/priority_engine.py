"""
Generic priority engine: aggregates factor outcomes into a ranked,
explainable urgency score.

Usage flow
----------
1. engine = PriorityEngine(factors=[...], action_suggestion_generator=fn)

2. engine.calculate_priority(item)
   -> PriorityResult  (score, reasons sorted by weight, suggested action)

3. engine.prioritize_items(items)
   -> list[Prioritized]  (stable sort, score descending)

4. engine.get_stats(prioritized)
   -> PriorityStats  (critical / high / medium / low counts + total)

Aggregation is additive: every factor runs for every item, scores are summed
with no ceiling, and each non-zero factor leaves exactly one reason behind.
The engine holds only immutable configuration and is safe to share.

Errors raised by factors or by the suggestion generator are configuration
errors and propagate unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator

from loan_priority.engine.factors import FactorExtractor, FactorOutcome, PriorityReason
from loan_priority.taxonomy.reason_taxonomy import PriorityBucket

logger = logging.getLogger(__name__)

T = TypeVar("T")

ActionSuggestionGenerator = Callable[[T, Sequence[PriorityReason]], str]


class StatsThresholds(BaseModel):
    """Lower score bounds for each bucket. Anything below ``medium`` is low.

    Buckets are exhaustive and non-overlapping:
        score >= critical          → critical
        high   <= score < critical → high
        medium <= score < high     → medium
        score < medium             → low
    """

    model_config = ConfigDict(frozen=True)

    critical: float = 70.0
    high: float = 50.0
    medium: float = 25.0

    @model_validator(mode="after")
    def validate_ordering(self) -> "StatsThresholds":
        if self.medium < 0:
            raise ValueError(f"medium threshold must be >= 0, got {self.medium}.")
        if not self.critical > self.high > self.medium:
            raise ValueError(
                "Thresholds must be strictly descending (critical > high > medium), "
                f"got critical={self.critical}, high={self.high}, medium={self.medium}."
            )
        return self


DEFAULT_STATS_THRESHOLDS = StatsThresholds()


@dataclass(frozen=True)
class PriorityResult:
    """Urgency verdict for one item.

    Attributes:
        score:            Sum of all factor scores.
        reasons:          Non-zero factor reasons, heaviest first.
        suggested_action: Next step from the domain's suggestion generator.
    """

    score: float
    reasons: tuple[PriorityReason, ...]
    suggested_action: str

    @property
    def dominant_reason(self) -> Optional[PriorityReason]:
        return self.reasons[0] if self.reasons else None

    def as_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "reasons": [r.as_dict() for r in self.reasons],
            "suggested_action": self.suggested_action,
        }


@dataclass(frozen=True)
class Prioritized(Generic[T]):
    """An item paired with its priority. Created fresh on every call."""

    item: T
    priority: PriorityResult


@dataclass(frozen=True)
class PriorityStats:
    """Bucket counts over a prioritized collection. Counts sum to ``total``."""

    total: int
    critical: int
    high: int
    medium: int
    low: int

    @property
    def requires_action(self) -> int:
        """Items in the critical or high bucket."""
        return self.critical + self.high

    def as_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "critical": self.critical,
            "high": self.high,
            "medium": self.medium,
            "low": self.low,
            "requires_action": self.requires_action,
        }


class PriorityEngine(Generic[T]):
    """Domain-agnostic aggregator over an ordered list of factors.

    Args:
        factors:                     Factor extractors, in registration order.
                                     Order breaks ties between equal-weight reasons.
        action_suggestion_generator: ``(item, reasons) -> str``. Must return a
                                     neutral default when ``reasons`` is empty.
        stats_thresholds:            Bucket boundaries for ``get_stats``.
        name:                        Label used in log messages.

    Raises:
        TypeError: If a factor or the generator is not callable.
    """

    def __init__(
        self,
        factors: Sequence[FactorExtractor[T]],
        action_suggestion_generator: ActionSuggestionGenerator[T],
        *,
        stats_thresholds: StatsThresholds = DEFAULT_STATS_THRESHOLDS,
        name: str = "engine",
    ) -> None:
        for idx, factor in enumerate(factors):
            if not callable(factor):
                raise TypeError(f"Factor #{idx} of '{name}' is not callable: {factor!r}")
        if not callable(action_suggestion_generator):
            raise TypeError(f"Action suggestion generator of '{name}' is not callable.")

        self._factors: tuple[FactorExtractor[T], ...] = tuple(factors)
        self._suggest = action_suggestion_generator
        self._thresholds = stats_thresholds
        self.name = name

    @property
    def factors(self) -> tuple[FactorExtractor[T], ...]:
        return self._factors

    @property
    def stats_thresholds(self) -> StatsThresholds:
        return self._thresholds

    def calculate_priority(self, item: T) -> PriorityResult:
        """Score one item against every registered factor.

        Raises:
            TypeError: If a factor returns something other than a
                ``FactorOutcome`` or the generator returns a non-string.
        """
        score: float = 0
        reasons: list[PriorityReason] = []

        for factor in self._factors:
            outcome = factor(item)
            if not isinstance(outcome, FactorOutcome):
                raise TypeError(
                    f"Factor {_factor_name(factor)} of '{self.name}' returned "
                    f"{type(outcome).__name__}, expected FactorOutcome."
                )
            if outcome.score == 0:
                continue
            score += outcome.score
            reasons.append(outcome.reason)

        # sorted() is stable: equal weights keep registration order.
        ordered = tuple(sorted(reasons, key=lambda r: -r.weight))

        suggestion = self._suggest(item, ordered)
        if not isinstance(suggestion, str):
            raise TypeError(
                f"Action suggestion generator of '{self.name}' returned "
                f"{type(suggestion).__name__}, expected str."
            )

        return PriorityResult(score=score, reasons=ordered, suggested_action=suggestion)

    def prioritize_items(self, items: Iterable[T]) -> list[Prioritized[T]]:
        """Score every item and sort by score descending.

        Equal scores keep their input order.
        """
        scored = [
            Prioritized(item=item, priority=self.calculate_priority(item))
            for item in items
        ]
        ranked = sorted(scored, key=lambda p: -p.priority.score)

        if ranked:
            logger.debug(
                "%s: ranked %d items (top score %.1f)",
                self.name, len(ranked), ranked[0].priority.score,
            )
        return ranked

    def bucket_for(self, score: float) -> PriorityBucket:
        """Return the bucket ``score`` falls into."""
        if score >= self._thresholds.critical:
            return PriorityBucket.CRITICAL
        if score >= self._thresholds.high:
            return PriorityBucket.HIGH
        if score >= self._thresholds.medium:
            return PriorityBucket.MEDIUM
        return PriorityBucket.LOW

    def get_stats(self, prioritized: Sequence[Prioritized[T]]) -> PriorityStats:
        """Count items per bucket. Every item lands in exactly one bucket."""
        counts = {bucket: 0 for bucket in PriorityBucket}
        for entry in prioritized:
            counts[self.bucket_for(entry.priority.score)] += 1

        return PriorityStats(
            total=len(prioritized),
            critical=counts[PriorityBucket.CRITICAL],
            high=counts[PriorityBucket.HIGH],
            medium=counts[PriorityBucket.MEDIUM],
            low=counts[PriorityBucket.LOW],
        )

    def __repr__(self) -> str:
        return f"PriorityEngine(name={self.name!r}, factors={len(self._factors)})"


def _factor_name(factor: Callable[..., Any]) -> str:
    return getattr(factor, "__qualname__", None) or repr(factor)
