"""Structured JSON-line logging for router and grading events.

Significant events (primary failure, fallback, repair) are emitted as flat
key/value objects so an external aggregator can index them::

    {"timestamp": "...", "level": "warning", "logger": "ai_router.orchestrator",
     "event": "MODEL_FALLBACK", "correlation_id": "...", "from_model": "..."}

Usage:
    from ai_router.logs import log_event

    log_event(logger, logging.WARNING, "MODEL_FALLBACK", from_model=a, to_model=b)
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

EVENT_FIELDS_ATTR = "event_fields"


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
        }
        fields = getattr(record, EVENT_FIELDS_ATTR, None)
        if fields is not None:
            payload["event"] = record.getMessage()
            payload.update(fields)
        else:
            payload["message"] = record.getMessage()
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    logger.log(level, event, extra={EVENT_FIELDS_ATTR: fields})


def setup_logging(level: str = "info", *, verbose: bool = False) -> None:
    """Send everything to stderr as JSON lines."""
    resolved = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonLineFormatter())
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(resolved)
    # Quiet down noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("litellm").setLevel(logging.WARNING)
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)
