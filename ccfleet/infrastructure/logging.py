"""
Provisioning Log Output

Architectural Intent:
- One handler on the ``ccfleet`` logger tree, configured once by the CLI
- Plan records carry their context as ``extra`` fields (deployment, step,
  slot, target group) so a run can be filtered per step or per deployment
- The same context renders as JSON keys or as a bracketed prefix

Design Decisions:
- Context fields are read off the record, never from global state, so
  concurrently running steps cannot mislabel each other's records
"""

import json
import logging
import sys
from datetime import datetime, UTC
from typing import Optional, TextIO

CONTEXT_FIELDS = ("deployment", "step", "slot", "target_group")


def record_context(record: logging.LogRecord) -> dict:
    return {
        name: getattr(record, name)
        for name in CONTEXT_FIELDS
        if getattr(record, name, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record, context fields as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **record_context(record),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ContextFormatter(logging.Formatter):
    """Human-readable lines prefixed with ``[deployment/step slot=N]``."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(context)s%(message)s")

    def format(self, record: logging.LogRecord) -> str:
        context = record_context(record)
        path = "/".join(str(context.pop(k)) for k in ("deployment", "step") if k in context)
        extras = " ".join(f"{k}={v}" for k, v in context.items())
        label = " ".join(part for part in (path, extras) if part)
        record.context = f"[{label}] " if label else ""
        return super().format(record)


def parse_level(name: str, default: int = logging.WARNING) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else default


def configure_logging(
    level: int = logging.WARNING,
    json_format: bool = False,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """Route the ``ccfleet`` logger tree to a single stream handler.

    Reconfiguring replaces the previous handler.
    """
    tree = logging.getLogger("ccfleet")
    tree.setLevel(level)
    for old in list(tree.handlers):
        tree.removeHandler(old)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if json_format else ContextFormatter())
    tree.addHandler(handler)
    return handler
