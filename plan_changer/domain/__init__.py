"""
Domain value objects for plan-change runs and schedules.
"""

from plan_changer.domain.plan_change import PortalSettings, RunConfig, RunResult, ScheduleEntry

__all__ = ["PortalSettings", "RunConfig", "RunResult", "ScheduleEntry"]
