"""
Priority engine: turns domain items into ranked, explainable urgency scores.

Modules
-------
factors         : PriorityReason + FactorOutcome value types, the
                  FactorExtractor contract, and the reusable builders
                  deadline_proximity() / count_tiers() / status_score().
priority_engine : PriorityEngine aggregator + PriorityResult, Prioritized,
                  PriorityStats, StatsThresholds. Pure, no I/O.
"""
