"""
Structured logging helpers for portal automation.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

REDACTED = "****REDACTED****"
_SECRET_FIELDS = frozenset({"password", "passwd", "pass", "secret"})


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


def redact_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """
    Copy of `fields` with credential-looking values masked, for form-body logging.
    """

    return {
        key: (REDACTED if key.lower() in _SECRET_FIELDS and value else value)
        for key, value in fields.items()
    }


def configure_logging() -> None:
    """
    Configure root logging once for the process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
