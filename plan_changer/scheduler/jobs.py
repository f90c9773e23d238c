"""
plan_changer/scheduler/jobs.py

APScheduler-based trigger scheduler for scheduled plan changes.

Matching
--------
Once a minute the tick renders "now" into each enabled entry's timezone and
fires the entry when the local hour:minute equals the stored hour:minute.
The process's own local timezone plays no part.

Deliberate non-features
-----------------------
* No suppression of an entry that already fired in the same minute.
* No de-duplication across entries sharing a trigger time.
* No catch-up: a tick delayed past the target minute misses that day's run.
* No serialization between runs; ticks may overlap if a run outlasts a minute.

Lifecycle
---------
The process bootstrap owns one `TriggerScheduler`. `start()` and `stop()` are
idempotent; a second `start()` is logged and ignored.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Protocol
from zoneinfo import ZoneInfo

from apscheduler.schedulers.background import BackgroundScheduler

from plan_changer.domain.plan_change import PortalSettings, RunConfig, RunResult, ScheduleEntry
from plan_changer.portal.logging_utils import log_event
from plan_changer.providers.base import ConfigProvider, LogSink, ScheduleProvider

logger = logging.getLogger(__name__)

TICK_JOB_ID = "plan_change_tick"

# Upper bound APScheduler needs for concurrently running ticks.
MAX_OVERLAPPING_TICKS = 10


class PlanChangeRunner(Protocol):
    def run(self, config: RunConfig) -> RunResult:
        ...


def local_wall_clock(now: datetime, timezone_name: str) -> datetime:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(timezone_name or "UTC"))


def entry_is_due(entry: ScheduleEntry, now: datetime) -> bool:
    """
    True when the wall clock in the entry's timezone reads its hour:minute.
    """

    local = local_wall_clock(now, entry.timezone)
    return local.hour == entry.hour and local.minute == entry.minute


class TriggerScheduler:
    """
    Owns the one-minute timer and evaluates schedule entries on each tick.
    """

    def __init__(
        self,
        *,
        engine: PlanChangeRunner,
        config_provider: ConfigProvider,
        schedule_provider: ScheduleProvider,
        log_sink: LogSink,
        clock: Callable[[], datetime] | None = None,
        timer_timezone: str = "UTC",
    ) -> None:
        self._engine = engine
        self._config_provider = config_provider
        self._schedule_provider = schedule_provider
        self._log_sink = log_sink
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._timer_timezone = timer_timezone
        self._scheduler: BackgroundScheduler | None = None
        self._lifecycle_lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    def start(self) -> bool:
        """
        Start the timer. Returns False (and does nothing) when already started.
        """

        with self._lifecycle_lock:
            if self._scheduler is not None:
                logger.info("Scheduler: already started, ignoring start()")
                return False

            scheduler = BackgroundScheduler(timezone=self._timer_timezone)
            scheduler.add_job(
                self.tick,
                trigger="cron",
                second=0,
                id=TICK_JOB_ID,
                name="Scheduled plan change check",
                replace_existing=True,
                max_instances=MAX_OVERLAPPING_TICKS,
                coalesce=False,
                misfire_grace_time=30,
            )
            scheduler.start()
            self._scheduler = scheduler
            logger.info("Scheduler: started, checking schedules every minute")
            return True

    def stop(self, *, wait: bool = True) -> bool:
        """
        Stop the timer. Returns False when it was not running.
        """

        with self._lifecycle_lock:
            scheduler = self._scheduler
            if scheduler is None:
                return False
            self._scheduler = None

        scheduler.shutdown(wait=wait)
        logger.info("Scheduler: stopped")
        return True

    def tick(self, now: datetime | None = None) -> list[RunResult]:
        """
        Evaluate every enabled entry once and run the due ones.

        Returns the results of the runs started by this tick.
        """

        current = now or self._clock()
        log_event(logger, logging.DEBUG, "scheduler_tick", now=current.isoformat())

        try:
            entries = list(self._schedule_provider.get_enabled_entries())
            settings = self._config_provider.get_portal_settings()
        except Exception as exc:  # noqa: BLE001
            logger.error("Scheduler: failed to read schedules or settings: %s", exc)
            return []

        if settings is None:
            logger.info("Scheduler: no settings configured, skipping scheduled tasks")
            return []

        results: list[RunResult] = []
        for entry in entries:
            result = self._evaluate_entry(entry=entry, settings=settings, now=current)
            if result is not None:
                results.append(result)
        return results

    def _evaluate_entry(
        self,
        *,
        entry: ScheduleEntry,
        settings: PortalSettings,
        now: datetime,
    ) -> RunResult | None:
        timezone_name = entry.timezone or "UTC"
        try:
            local = local_wall_clock(now, timezone_name)
        except (KeyError, ValueError) as exc:
            logger.warning(
                "Scheduler: skipping schedule_id=%s, unusable timezone %r: %s",
                entry.id,
                timezone_name,
                exc,
            )
            return None

        log_event(
            logger,
            logging.DEBUG,
            "schedule_checked",
            schedule_id=entry.id,
            timezone=timezone_name,
            local_time=f"{local.hour}:{local.minute:02d}",
            target_time=f"{entry.hour}:{entry.minute:02d}",
        )
        if not entry_is_due(entry, now):
            return None

        try:
            log_event(
                logger,
                logging.INFO,
                "scheduled_plan_change_started",
                schedule_id=entry.id,
                plan_name=entry.plan_name,
                psid=entry.psid,
                timezone=timezone_name,
            )
            result = self._engine.run(settings.for_plan(entry.psid))
            label = f"Scheduled ({timezone_name})"
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Scheduler: scheduled task failed schedule_id=%s timezone=%s: %s",
                entry.id,
                timezone_name,
                exc,
            )
            result = RunResult(
                success=False,
                message=str(exc) or "Unknown error",
                timestamp=now,
                plan_name=entry.plan_name,
                psid=entry.psid,
            )
            label = f"Scheduled task failed ({timezone_name})"

        self._record(result, label)
        log_event(
            logger,
            logging.INFO if result.success else logging.WARNING,
            "scheduled_plan_change_finished",
            schedule_id=entry.id,
            success=result.success,
            message=result.message,
        )
        return result

    def _record(self, result: RunResult, label: str) -> None:
        try:
            self._log_sink.append(result, label)
        except Exception as exc:  # noqa: BLE001
            logger.error("Scheduler: failed to record run outcome: %s", exc)
