"""
Collaborator interfaces and provider implementations.
"""

from plan_changer.providers.base import ConfigProvider, LogSink, ScheduleProvider
from plan_changer.providers.config_providers import EnvConfigProvider, StaticConfigProvider
from plan_changer.providers.log_sinks import InMemoryLogSink, LoggedRun, LoggingLogSink
from plan_changer.providers.schedules import (
    InMemoryScheduleProvider,
    JsonFileScheduleProvider,
    ScheduleEntryModel,
    parse_schedule_records,
    validate_timezone,
)

__all__ = [
    "ConfigProvider",
    "EnvConfigProvider",
    "InMemoryLogSink",
    "InMemoryScheduleProvider",
    "JsonFileScheduleProvider",
    "LogSink",
    "LoggedRun",
    "LoggingLogSink",
    "ScheduleEntryModel",
    "ScheduleProvider",
    "StaticConfigProvider",
    "parse_schedule_records",
    "validate_timezone",
]
