"""
Debug HTML snapshots of portal pages.
"""

from __future__ import annotations

import logging
import tempfile
import time
from pathlib import Path

from plan_changer.portal.logging_utils import log_event

logger = logging.getLogger(__name__)

MAX_SNAPSHOT_CHARS = 200_000


class SnapshotWriter:
    """
    Writes truncated page bodies to disk when enabled; otherwise a no-op.

    Write failures are logged and swallowed so diagnostics never change a
    run's outcome.
    """

    def __init__(self, *, enabled: bool, directory: str | None = None) -> None:
        self.enabled = enabled
        self.directory = Path(directory) if directory else Path(tempfile.gettempdir())

    def save(self, stage: str, html: str) -> str | None:
        if not self.enabled:
            return None

        path = self.directory / f"plan-changer-{stage}-{int(time.time() * 1000)}.html"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text((html or "")[:MAX_SNAPSHOT_CHARS], encoding="utf-8")
        except OSError as exc:
            log_event(
                logger,
                logging.WARNING,
                "snapshot_write_failed",
                stage=stage,
                path=str(path),
                error=str(exc),
            )
            return None

        log_event(logger, logging.INFO, "snapshot_saved", stage=stage, path=str(path))
        return str(path)


def with_snapshot(message: str, path: str | None) -> str:
    return f"{message}; snapshot: {path}" if path else message
