"""
Logging setup for the loan-priority CLI.

``configure_logging(config)`` is called once by the CLI before any ranking
work. Library modules only ever call ``logging.getLogger(__name__)``.

Ranking context
---------------
A ranking run is identified by the item kind, the engine that scored it,
and the as-of date its deadlines were measured against. Pass
``extra=ranking_context(...)`` on a log call and both formatters render
those fields::

  text  2026-03-02T09:00:00Z INFO    loan_priority.cli: Ranked 3 items  kind=trade engine=trade as_of=2026-03-02 items=3
  json  {"ts": "2026-03-02T09:00:00Z", "level": "INFO", "logger": "loan_priority.cli",
         "msg": "Ranked 3 items", "kind": "trade", "engine": "trade", "as_of": "2026-03-02", "items": 3}

Handlers write to stderr; stdout is reserved for the ranking table.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import date, datetime, timezone
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from loan_priority.config import LoggingConfig

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Order in which context fields are rendered.
CONTEXT_FIELDS: tuple[str, ...] = ("kind", "engine", "as_of", "items")


def ranking_context(
    kind: str,
    engine: str,
    as_of: date | str,
    items: Optional[int] = None,
) -> dict[str, Any]:
    """Build the ``extra=`` mapping that tags a log line with its ranking run.

    Args:
        kind:   Item kind being ranked (``"trade"``, ``"covenant"``, ...).
        engine: Name of the engine that scored the items.
        as_of:  Date deadlines were measured against.
        items:  Number of items ranked, when known.
    """
    context: dict[str, Any] = {
        "kind": str(kind),
        "engine": engine,
        "as_of": as_of.isoformat() if isinstance(as_of, date) else str(as_of),
    }
    if items is not None:
        context["items"] = items
    return context


def _context_of(record: logging.LogRecord) -> dict[str, Any]:
    return {name: getattr(record, name) for name in CONTEXT_FIELDS if hasattr(record, name)}


class _TextFormatter(logging.Formatter):
    """Human-readable line in UTC, with ranking context appended as ``key=value``."""

    converter = time.gmtime

    def __init__(self) -> None:
        super().__init__(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context_of(record)
        if context:
            line += "  " + " ".join(f"{key}={value}" for key, value in context.items())
        return line


class _JsonFormatter(logging.Formatter):
    """One JSON object per line: ``ts``, ``level``, ``logger``, ``msg``,
    any ranking context fields, and ``exc`` when an exception is attached.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                LOG_DATE_FORMAT
            ),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(_context_of(record))
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(config: "LoggingConfig", stream: Optional[IO[str]] = None) -> None:
    """Install root handlers from the ``[logging]`` config section.

    Args:
        config: Logging section of ``AppConfig``.
        stream: Console stream; defaults to ``sys.stderr``.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)
    formatter = _JsonFormatter() if config.json_format else _TextFormatter()

    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
