"""
Run history sinks.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from plan_changer.domain.plan_change import RunResult
from plan_changer.portal.logging_utils import log_event
from plan_changer.providers.base import LogSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoggedRun:
    """
    One recorded history row.
    """

    result: RunResult
    context_label: str

    @property
    def message(self) -> str:
        return format_history_message(self.result, self.context_label)


def format_history_message(result: RunResult, context_label: str) -> str:
    if not context_label:
        return result.message
    return f"{context_label}: {result.message}"


class LoggingLogSink(LogSink):
    """
    Writes each outcome as a structured log line.
    """

    def append(self, result: RunResult, context_label: str) -> None:
        log_event(
            logger,
            logging.INFO if result.success else logging.WARNING,
            "plan_change_recorded",
            success=result.success,
            message=format_history_message(result, context_label),
            plan_name=result.plan_name,
            psid=result.psid,
            timestamp=result.timestamp.isoformat(),
        )


class InMemoryLogSink(LogSink):
    """
    Keeps history in process memory, oldest first.
    """

    def __init__(self) -> None:
        self._rows: list[LoggedRun] = []
        self._lock = threading.Lock()

    def append(self, result: RunResult, context_label: str) -> None:
        with self._lock:
            self._rows.append(LoggedRun(result=result, context_label=context_label))

    def entries(self) -> list[LoggedRun]:
        with self._lock:
            return list(self._rows)

    def clear(self) -> None:
        with self._lock:
            self._rows.clear()
