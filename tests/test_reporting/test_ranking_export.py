"""Tests for loan_priority.reporting.export."""

from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest

from loan_priority.reporting.export import (
    RANKING_FIELDNAMES,
    export_to_csv,
    export_to_json,
    prioritized_records,
)


@pytest.fixture
def ranked_settlements(settlement_engine, make_settlement, offset_date):
    settlements = [
        make_settlement(trade_id="quiet", settlement_date=offset_date(30)),
        make_settlement(trade_id="late", settlement_date=offset_date(-2), amount=60_000_000),
    ]
    return settlement_engine.prioritize_items(settlements)


# ── prioritized_records ───────────────────────────────────────────────────────


def test_records_follow_rank_order(ranked_settlements, settlement_engine) -> None:
    """Rows are numbered from 1 in ranked order, ids read from trade_id."""
    rows = prioritized_records(ranked_settlements, settlement_engine)

    assert [r["rank"] for r in rows] == [1, 2]
    assert [r["item_id"] for r in rows] == ["late", "quiet"]


def test_record_fields(ranked_settlements, settlement_engine) -> None:
    """Top row carries bucket, dominant reason, and the flattened reason string."""
    top = prioritized_records(ranked_settlements, settlement_engine)[0]

    assert set(RANKING_FIELDNAMES) <= set(top)
    assert top["score"] == 65
    assert top["bucket"] == "high"
    assert top["dominant_reason"] == "deadline"
    assert top["suggested_action"] == "Complete overdue settlement immediately"
    assert top["reasons"] == "Settlement overdue by 2 days (50); Large settlement amount (15)"
    assert top["reason_trail"][1] == {
        "type": "amount", "label": "Large settlement amount", "weight": 15,
    }


def test_record_without_reasons(ranked_settlements, settlement_engine) -> None:
    """An item with no reasons has empty reason columns and the low bucket."""
    quiet = prioritized_records(ranked_settlements, settlement_engine)[1]

    assert quiet["bucket"] == "low"
    assert quiet["dominant_reason"] == ""
    assert quiet["reasons"] == ""
    assert quiet["reason_trail"] == []


def test_custom_id_accessor(ranked_settlements, settlement_engine) -> None:
    rows = prioritized_records(
        ranked_settlements, settlement_engine, id_accessor=lambda s: s.trade_reference,
    )
    assert rows[0]["item_id"] == "TR-2026-001"


def test_empty_ranking(settlement_engine) -> None:
    assert prioritized_records([], settlement_engine) == []


# ── export_to_csv ─────────────────────────────────────────────────────────────


def test_export_to_csv_flat_columns(tmp_path: Path, ranked_settlements, settlement_engine) -> None:
    """CSV has ranking columns only; the structured trail is dropped."""
    rows = prioritized_records(ranked_settlements, settlement_engine)
    out = tmp_path / "nested" / "ranking.csv"
    result = export_to_csv(rows, out)

    assert result == out
    with out.open(encoding="utf-8") as f:
        reader = csv.DictReader(f)
        assert reader.fieldnames == RANKING_FIELDNAMES
        data = list(reader)
    assert len(data) == 2
    assert data[0]["item_id"] == "late"
    assert "reason_trail" not in data[0]


def test_export_to_csv_custom_fieldnames(tmp_path: Path) -> None:
    """Custom fieldnames control column order."""
    out = tmp_path / "cols.csv"
    export_to_csv([{"rank": 1, "item_id": "x", "score": 3}], out, fieldnames=["score", "rank"])

    with out.open(encoding="utf-8") as f:
        assert f.readline().strip() == "score,rank"


def test_export_to_csv_empty(tmp_path: Path) -> None:
    """Empty records still produce a header row."""
    out = tmp_path / "empty.csv"
    export_to_csv([], out)
    assert out.read_text(encoding="utf-8").strip() == ",".join(RANKING_FIELDNAMES)


# ── export_to_json ────────────────────────────────────────────────────────────


def test_export_to_json_payload(tmp_path: Path, ranked_settlements, settlement_engine) -> None:
    """JSON carries metadata, stats, and items with structured reasons."""
    rows = prioritized_records(ranked_settlements, settlement_engine)
    stats = settlement_engine.get_stats(ranked_settlements)
    out = tmp_path / "ranking.json"
    export_to_json(rows, out, stats=stats, metadata={"kind": "settlement", "as_of": "2026-03-02"})

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert list(payload) == ["kind", "as_of", "stats", "items"]
    assert payload["stats"] == {
        "total": 2, "critical": 0, "high": 1, "medium": 0, "low": 1, "requires_action": 1,
    }
    top = payload["items"][0]
    assert "reason_trail" not in top
    assert top["reasons"][0] == {
        "type": "deadline", "label": "Settlement overdue by 2 days", "weight": 50,
    }


def test_export_to_json_without_stats(tmp_path: Path) -> None:
    out = tmp_path / "bare.json"
    export_to_json([], out)
    assert json.loads(out.read_text(encoding="utf-8")) == {"items": []}
