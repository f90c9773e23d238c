"""
plan_changer/domain/plan_change.py

Value objects passed between the automation engine, the scheduler and
external collaborators.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

DEFAULT_PORTAL_BASE = "https://residential.launtel.net.au"
DEFAULT_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True)
class PortalSettings:
    """
    Portal account settings shared by every run; everything except the target plan.
    """

    username: str
    password: str
    user_id: str
    service_id: str
    avc_id: str
    loc_id: str
    base: str = DEFAULT_PORTAL_BASE
    discount_code: str = ""
    unpause: str = "0"
    coat: str = "0"
    churn: str = "0"
    scheduled_dt: str = ""
    new_service_payment_option: str = ""
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    debug_html: bool = False

    def for_plan(self, psid: str | int) -> RunConfig:
        """
        Bind these settings to a target plan code.
        """

        return RunConfig(portal=self, psid=str(psid))

    def redacted(self) -> dict[str, Any]:
        payload = dataclasses.asdict(self)
        payload["password"] = "****REDACTED****" if self.password else ""
        return payload


@dataclass(frozen=True)
class RunConfig:
    """
    Fully-resolved input for one automation run.

    The plan code is the only plan selector; name resolution happens before
    construction.
    """

    portal: PortalSettings
    psid: str

    def __post_init__(self) -> None:
        if not str(self.psid).strip():
            raise ValueError("RunConfig.psid must be a non-empty plan code.")


@dataclass(frozen=True)
class RunResult:
    """
    Outcome of one automation run. `timestamp` is the instant the run began.
    """

    success: bool
    message: str
    timestamp: datetime
    plan_name: str | None = None
    psid: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "planName": self.plan_name,
            "psid": self.psid,
            "timestamp": self.timestamp.astimezone(timezone.utc).isoformat(),
        }


@dataclass(frozen=True)
class ScheduleEntry:
    """
    One stored trigger rule: fire `psid` when the wall clock in `timezone` reads hour:minute.

    Entries are validated before they reach the scheduler (see
    `plan_changer.providers.schedules.ScheduleEntryModel`).
    """

    id: str
    plan_name: str
    psid: str
    hour: int
    minute: int
    timezone: str = "UTC"
    enabled: bool = True
