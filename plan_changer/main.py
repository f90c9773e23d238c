"""
plan_changer/main.py

Process bootstrap for the scheduler service.
"""

from __future__ import annotations

import logging
import signal
import threading

from plan_changer.config import get_engine_settings, get_scheduler_settings
from plan_changer.portal import AutomationEngine, KeywordSuccessClassifier
from plan_changer.portal.logging_utils import configure_logging
from plan_changer.providers import EnvConfigProvider, JsonFileScheduleProvider, LoggingLogSink
from plan_changer.scheduler import TriggerScheduler

logger = logging.getLogger(__name__)


def build_engine() -> AutomationEngine:
    settings = get_engine_settings()
    return AutomationEngine(
        classifier=KeywordSuccessClassifier(settings.success_keywords),
        snapshot_dir=settings.snapshot_dir,
    )


def build_trigger_scheduler() -> TriggerScheduler:
    """
    Wire the scheduler to env-based settings, the JSON schedule file and log-based history.

    Returns a configured but not yet started scheduler.
    """

    scheduler_settings = get_scheduler_settings()
    return TriggerScheduler(
        engine=build_engine(),
        config_provider=EnvConfigProvider(),
        schedule_provider=JsonFileScheduleProvider(path=scheduler_settings.schedule_path),
        log_sink=LoggingLogSink(),
        timer_timezone=scheduler_settings.timer_timezone,
    )


def main() -> int:
    configure_logging()
    trigger_scheduler = build_trigger_scheduler()
    stop_requested = threading.Event()

    def _request_stop(signum: int, _frame: object) -> None:
        logger.info("Received signal %s, shutting down", signum)
        stop_requested.set()

    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)

    trigger_scheduler.start()
    try:
        stop_requested.wait()
    finally:
        trigger_scheduler.stop(wait=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
