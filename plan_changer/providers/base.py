"""
Collaborator interfaces consumed by the trigger scheduler.

Storage of settings, schedules and run history lives outside this package;
these are the only calls made against it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from plan_changer.domain.plan_change import PortalSettings, RunResult, ScheduleEntry


class ConfigProvider(ABC):
    """
    Source of the single portal configuration.
    """

    @abstractmethod
    def get_portal_settings(self) -> PortalSettings | None:
        """
        Return current portal settings, or None when not configured.
        """


class ScheduleProvider(ABC):
    """
    Source of schedule entries. Entries are read-only to callers.
    """

    @abstractmethod
    def get_enabled_entries(self) -> Sequence[ScheduleEntry]:
        """
        Return currently enabled entries.
        """


class LogSink(ABC):
    """
    Append-only run history.
    """

    @abstractmethod
    def append(self, result: RunResult, context_label: str) -> None:
        """
        Record one run outcome; `context_label` prefixes the stored message.
        """
