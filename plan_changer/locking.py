"""
Single-instance lock file for one-shot runs started by cron.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)


class SingleInstanceLock:
    """
    Lock held by atomically creating a file; a second holder gets False from `acquire`.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._acquired = False

    @property
    def acquired(self) -> bool:
        return self._acquired

    def acquire(self) -> bool:
        payload = json.dumps(
            {"pid": os.getpid(), "startedAt": datetime.now(timezone.utc).isoformat()},
            indent=2,
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return False
        except PermissionError:
            return False
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload)
        self._acquired = True
        return True

    def release(self) -> None:
        if not self._acquired:
            return
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Failed to remove lock file %s: %s", self.path, exc)
        finally:
            self._acquired = False

    def __enter__(self) -> SingleInstanceLock:
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()
