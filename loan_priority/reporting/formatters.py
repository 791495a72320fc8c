"""
ASCII terminal formatters for the ``rank`` CLI command.

All formatters accept ranking rows / stats and return plain multi-line
strings suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).
"""

from __future__ import annotations

from loan_priority.engine.priority_engine import PriorityStats

_ACTION_WIDTH = 48


def format_ranking_table(
    records: list[dict],
    title: str,
    as_of: str,
) -> str:
    """Format ranked rows as an ASCII table::

        Rank  Item             Score  Bucket    Action
        ---------------------------------------------------------------
           1  TR-2024-004       88.0  critical  Review and resolve flagged DD items
                                      - 5 items flagged (35)
                                      - Only 20% DD complete (25)

    Args:
        records: Rows from ``reporting.export.prioritized_records()``.
        title:   Header line (e.g. engine name).
        as_of:   Date the deadlines were measured against.

    Returns:
        Multi-line string.
    """
    lines: list[str] = []
    lines.append("")
    lines.append(f"=== {title} ===")
    lines.append(f"  As of: {as_of}")

    if not records:
        lines.append("")
        lines.append("  (no items)")
        return "\n".join(lines)

    header = f"  {'Rank':>4}  {'Item':<16}  {'Score':>6}  {'Bucket':<8}  Action"
    lines.append("")
    lines.append(header)
    lines.append("  " + "-" * (len(header) + _ACTION_WIDTH - 8))

    indent = " " * 42
    for row in records:
        action = str(row.get("suggested_action", ""))[:_ACTION_WIDTH]
        lines.append(
            f"  {row.get('rank', ''):>4}  {str(row.get('item_id', ''))[:16]:<16}  "
            f"{float(row.get('score', 0)):>6.1f}  {row.get('bucket', ''):<8}  {action}"
        )
        for reason in row.get("reason_trail", []):
            lines.append(f"{indent}- {reason['label']} ({reason['weight']:g})")

    return "\n".join(lines)


def format_stats_summary(stats: PriorityStats) -> str:
    """One-block bucket summary, e.g. for the footer of a ranking."""
    return "\n".join(
        [
            "",
            f"  Total: {stats.total}   Requires action: {stats.requires_action}",
            f"  critical={stats.critical}  high={stats.high}  "
            f"medium={stats.medium}  low={stats.low}",
        ]
    )
