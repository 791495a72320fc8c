"""
Export helpers for ranked inboxes.

All writers go to disk and return the written ``Path``. They accept generic
``list[dict]`` data to stay decoupled from specific item shapes.

CSV exports are flat (no nested dicts) so they load directly in Excel or a
BI tool. The full reason trail is kept as one ``reasons`` column of
``label (weight)`` tokens; the JSON export keeps reasons structured.

``prioritized_records()`` is the main adapter: it turns an engine's ranked
output into one row per item.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from loan_priority.engine.priority_engine import PriorityEngine, PriorityStats, Prioritized

logger = logging.getLogger(__name__)

RANKING_FIELDNAMES: list[str] = [
    "rank", "item_id", "score", "bucket", "dominant_reason",
    "suggested_action", "reasons",
]


def prioritized_records(
    prioritized: Sequence[Prioritized[Any]],
    engine: PriorityEngine[Any],
    id_accessor: Optional[Callable[[Any], Any]] = None,
) -> list[dict]:
    """Flatten ranked items into one row per item, in rank order.

    Args:
        prioritized: Output of ``engine.prioritize_items()``.
        engine:      Engine that produced the ranking (used for bucketing).
        id_accessor: Reads an identifier from an item. Defaults to the
                     item's ``id`` attribute, then ``trade_id``.

    Returns:
        List of row dicts with ``RANKING_FIELDNAMES`` keys plus
        ``reason_trail`` (the structured reasons, for JSON export).
    """
    read_id = id_accessor or _default_item_id
    rows: list[dict] = []

    for rank, entry in enumerate(prioritized, start=1):
        priority = entry.priority
        top = priority.dominant_reason
        rows.append(
            {
                "rank":             rank,
                "item_id":          read_id(entry.item),
                "score":            priority.score,
                "bucket":           str(engine.bucket_for(priority.score)),
                "dominant_reason":  str(top.type) if top else "",
                "suggested_action": priority.suggested_action,
                "reasons":          "; ".join(f"{r.label} ({r.weight:g})" for r in priority.reasons),
                "reason_trail":     [r.as_dict() for r in priority.reasons],
            }
        )

    return rows


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order. Defaults to ``RANKING_FIELDNAMES``.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    cols = fieldnames or RANKING_FIELDNAMES
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)

    logger.info("Ranking CSV written: %s (%d rows)", path, len(records))
    return path


def export_to_json(
    records: list[dict],
    path: Path,
    stats: PriorityStats | None = None,
    metadata: dict | None = None,
) -> Path:
    """Write ranked rows plus stats to a pretty-printed JSON file.

    The flat ``reasons`` string is replaced by the structured reason trail.

    Args:
        records:  Rows from ``prioritized_records()``.
        path:     Destination file path (parent dirs created if missing).
        stats:    Optional bucket counts for the same ranking.
        metadata: Extra top-level keys (engine name, as-of date, ...).

    Returns:
        ``path`` as written.
    """
    items = []
    for row in records:
        item = {k: v for k, v in row.items() if k not in ("reasons", "reason_trail")}
        item["reasons"] = row.get("reason_trail", [])
        items.append(item)

    payload: dict = {**(metadata or {})}
    if stats is not None:
        payload["stats"] = stats.as_dict()
    payload["items"] = items

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    logger.info("Ranking JSON written: %s (%d items)", path, len(items))
    return path


def _default_item_id(item: Any) -> Any:
    for attr in ("id", "trade_id"):
        value = getattr(item, attr, None)
        if value is not None:
            return value
    return ""
