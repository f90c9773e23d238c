"""
Schedule entry validation and schedule providers.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from plan_changer.catalog import list_plans, plan_name_for_code, resolve_plan
from plan_changer.domain.plan_change import ScheduleEntry
from plan_changer.portal.logging_utils import log_event
from plan_changer.providers.base import ScheduleProvider

logger = logging.getLogger(__name__)


def validate_timezone(name: str) -> str:
    """
    Return `name` when it is a resolvable IANA zone, else raise ValueError.
    """

    candidate = (name or "").strip()
    if not candidate:
        raise ValueError("Timezone must not be empty.")
    try:
        ZoneInfo(candidate)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Invalid timezone: {candidate}") from exc
    return candidate


class ScheduleEntryModel(BaseModel):
    """
    Validated schedule record as stored by the settings layer.

    Either `psid` or `plan_name` is enough; the other is filled from the
    plan catalog.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    plan_name: str | None = Field(default=None, alias="planName")
    psid: str | None = None
    hour: int = Field(..., ge=0, le=23)
    minute: int = Field(..., ge=0, le=59)
    timezone: str = "UTC"
    enabled: bool = True

    @field_validator("id", "psid", mode="before")
    @classmethod
    def _coerce_to_str(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        return validate_timezone(value)

    @model_validator(mode="after")
    def _resolve_plan(self) -> ScheduleEntryModel:
        if self.psid and self.psid.strip():
            self.psid = self.psid.strip()
            if not self.plan_name:
                self.plan_name = plan_name_for_code(self.psid) or self.psid
            return self

        if not self.plan_name:
            raise ValueError("Schedule entry needs a psid or a plan name.")
        resolved = resolve_plan(self.plan_name)
        if resolved is None:
            valid = ", ".join(name for name, _ in list_plans())
            raise ValueError(f"Unknown plan '{self.plan_name}'. Valid plans: {valid}")
        self.plan_name = resolved.name
        self.psid = resolved.psid
        return self

    def to_entry(self) -> ScheduleEntry:
        return ScheduleEntry(
            id=self.id,
            plan_name=self.plan_name or "",
            psid=self.psid or "",
            hour=self.hour,
            minute=self.minute,
            timezone=self.timezone,
            enabled=self.enabled,
        )


def parse_schedule_records(records: Iterable[Any]) -> list[ScheduleEntry]:
    """
    Validate raw records; invalid ones are logged and skipped.
    """

    entries: list[ScheduleEntry] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            log_event(logger, logging.WARNING, "schedule_record_skipped", index=index, error="not an object")
            continue
        payload = {"id": str(index), **record}
        try:
            entries.append(ScheduleEntryModel.model_validate(payload).to_entry())
        except ValidationError as exc:
            log_event(
                logger,
                logging.WARNING,
                "schedule_record_skipped",
                index=index,
                error=str(exc),
            )
    return entries


class JsonFileScheduleProvider(ScheduleProvider):
    """
    Reads ``{"schedules": [...]}`` from a JSON file on every call.
    """

    def __init__(self, *, path: str) -> None:
        self._path = Path(path)

    def get_enabled_entries(self) -> list[ScheduleEntry]:
        if not self._path.exists():
            return []

        raw_data = json.loads(self._path.read_text(encoding="utf-8"))
        records = raw_data.get("schedules", []) if isinstance(raw_data, dict) else None
        if not isinstance(records, list):
            raise ValueError("Invalid schedule file: 'schedules' must be a list.")
        return [entry for entry in parse_schedule_records(records) if entry.enabled]


class InMemoryScheduleProvider(ScheduleProvider):
    def __init__(self, entries: Sequence[ScheduleEntry] = ()) -> None:
        self._entries = list(entries)
        self._lock = threading.Lock()

    def replace(self, entries: Sequence[ScheduleEntry]) -> None:
        with self._lock:
            self._entries = list(entries)

    def get_enabled_entries(self) -> list[ScheduleEntry]:
        with self._lock:
            return [entry for entry in self._entries if entry.enabled]
