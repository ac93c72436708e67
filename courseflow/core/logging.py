"""Logging configuration for courseflow.

Two output shapes share one setup function: single-line text for a terminal
and JSON Lines (LOG_JSON=true) for an aggregator.

Two groups of context fields ride on log records through ``extra=``:

  request   request_id, method, path, status_code, duration_ms
            (RequestContextMiddleware)
  workflow  actor_id, entity, entity_id, action
            (the proposal, course and content services)

so a single proposal can be followed across requests with a query like

  level == "WARNING" AND entity == "proposal" AND entity_id == 42
"""

from __future__ import annotations

import datetime
import json
import logging
import sys

REQUEST_FIELDS = ("request_id", "method", "path", "status_code", "duration_ms")
WORKFLOW_FIELDS = ("actor_id", "entity", "entity_id", "action")

_QUIET_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpcore",
    "httpx",
    "sqlalchemy.engine",
)


def _utc_timestamp(record: logging.LogRecord) -> str:
    # 2024-01-01T09:30:00.123Z
    moment = datetime.datetime.fromtimestamp(record.created, tz=datetime.UTC)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{int(record.msecs):03d}Z"


def _context(record: logging.LogRecord, fields: tuple[str, ...]) -> dict[str, object]:
    context = {}
    for key in fields:
        value = getattr(record, key, None)
        if value is not None:
            context[key] = value
    return context


class _ContainerFormatter(logging.Formatter):
    """Human-readable line: timestamp, level, logger, message.

    Warnings and above get a ``[file:line]`` suffix.  Records that carry
    workflow context get it appended as ``{proposal#42 submit by 7}``.
    """

    def format(self, record: logging.LogRecord) -> str:
        line = (
            f"{_utc_timestamp(record)} {record.levelname:<8} {record.name}  "
            f"{record.getMessage()}"
        )

        workflow = _context(record, WORKFLOW_FIELDS)
        if "entity" in workflow:
            target = f"{workflow['entity']}#{workflow.get('entity_id', '-')}"
            if "action" in workflow:
                target += f" {workflow['action']}"
            if "actor_id" in workflow:
                target += f" by {workflow['actor_id']}"
            line += f"  {{{target}}}"

        if record.levelno >= logging.WARNING:
            line += f"  [{record.filename}:{record.lineno}]"

        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


class _JsonFormatter(logging.Formatter):
    """One JSON object per line; context fields become top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": _utc_timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_context(record, REQUEST_FIELDS))
        entry.update(_context(record, WORKFLOW_FIELDS))

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Point the root logger at stdout with the chosen formatter.

    Unknown level names fall back to INFO.  Calling it again replaces the
    handler instead of stacking a second one.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
