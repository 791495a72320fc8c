"""
loan-priority — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (rank a JSON file of items, validate config).
  5. Report result to stdout.

Install and run::

    pip install -e .
    loan-priority --help
    loan-priority validate-config
    loan-priority rank trade --file trades.json
    loan-priority rank settlement --file settlements.json --as-of 2026-03-02 --export
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any, Optional

import typer

from loan_priority.domains.registry import ItemKind

app = typer.Typer(
    name="loan-priority",
    help="Loan operations priority engine — rank trades, settlements and compliance items.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from loan_priority.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from loan_priority.utils.logging import configure_logging
    configure_logging(config.logging)


def _read_items_or_exit(items_file: str) -> list[dict[str, Any]]:
    """Read a JSON array of items (or ``{"items": [...]}``) from disk."""
    path = Path(items_file)
    if not path.exists():
        typer.echo(f"[ERROR] Items file not found: {path}", err=True)
        raise typer.Exit(code=1)

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        typer.echo(f"[ERROR] {path} is not valid JSON: {exc}", err=True)
        raise typer.Exit(code=1)

    if isinstance(payload, dict):
        payload = payload.get("items")
    if not isinstance(payload, list):
        typer.echo(
            f"[ERROR] {path} must contain a JSON array of items "
            "or an object with an 'items' array.",
            err=True,
        )
        raise typer.Exit(code=1)
    return payload


def _parse_as_of_or_exit(as_of: Optional[str]) -> Optional[date]:
    if as_of is None:
        return None
    try:
        return date.fromisoformat(as_of)
    except ValueError:
        typer.echo(f"[ERROR] Invalid --as-of date '{as_of}' (expected YYYY-MM-DD).", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(
        f"  Stats thresholds: critical>={config.stats.critical:g}  "
        f"high>={config.stats.high:g}  medium>={config.stats.medium:g}"
    )
    typer.echo(f"  Output dir:       {config.output.output_dir}")
    typer.echo(f"  Export format:    {config.output.default_format}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))


@app.command("rank")
def rank(
    kind: ItemKind = typer.Argument(..., help="Kind of items in the file."),
    items_file: str = typer.Option(
        ...,
        "--file",
        "-f",
        help="JSON file holding an array of items.",
    ),
    as_of: Optional[str] = typer.Option(
        None,
        "--as-of",
        help="Measure deadlines against this date (YYYY-MM-DD). Default: today (UTC).",
    ),
    top: Optional[int] = typer.Option(
        None,
        "--top",
        min=1,
        help="Show at most N items (default: config.output.top_n).",
    ),
    export: bool = typer.Option(
        False,
        "--export",
        help="Also write the full ranking to the output directory.",
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        help="Override export directory from config (implies --export).",
    ),
    export_format: Optional[str] = typer.Option(
        None,
        "--format",
        help="Export format: csv or json (default: config.output.default_format).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Rank a file of items by urgency and print the inbox with bucket counts."""
    import logging

    from pydantic import ValidationError

    from loan_priority.domains.registry import get_domain
    from loan_priority.reporting.export import (
        export_to_csv,
        export_to_json,
        prioritized_records,
    )
    from loan_priority.reporting.formatters import format_ranking_table, format_stats_summary
    from loan_priority.utils.logging import ranking_context
    from loan_priority.utils.time_utils import fixed_clock, utc_today

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    logger = logging.getLogger(__name__)

    fmt = (export_format or config.output.default_format).lower()
    if fmt not in ("csv", "json"):
        typer.echo(f"[ERROR] Unknown --format '{fmt}' (expected csv or json).", err=True)
        raise typer.Exit(code=1)

    as_of_date = _parse_as_of_or_exit(as_of) or utc_today()
    domain = get_domain(kind)

    raw_items = _read_items_or_exit(items_file)
    try:
        items = [domain.model.model_validate(raw) for raw in raw_items]
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid {kind.value} record: {exc}", err=True)
        raise typer.Exit(code=1)

    engine = domain.build_engine(
        clock=fixed_clock(as_of_date),
        stats_thresholds=config.stats.thresholds(),
    )
    ranked = engine.prioritize_items(items)
    stats = engine.get_stats(ranked)
    records = prioritized_records(ranked, engine)
    context = ranking_context(kind, engine.name, as_of_date, items=len(records))
    logger.info(
        "Ranked %d items (%d requiring action)", len(records), stats.requires_action, extra=context,
    )

    limit = top if top is not None else config.output.top_n
    typer.echo(format_ranking_table(records[:limit], domain.title, as_of_date.isoformat()))
    typer.echo(format_stats_summary(stats))

    if export or output_dir:
        out_dir = Path(output_dir or config.output.output_dir)
        out_path = out_dir / f"{kind.value}_ranking_{as_of_date.isoformat()}.{fmt}"
        if fmt == "csv":
            export_to_csv(records, out_path)
        else:
            export_to_json(
                records,
                out_path,
                stats=stats,
                metadata={"kind": kind.value, "engine": engine.name, "as_of": as_of_date},
            )
        typer.echo("")
        typer.echo(f"  Exported: {out_path}")


if __name__ == "__main__":
    app()
