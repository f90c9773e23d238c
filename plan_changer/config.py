"""
plan_changer/config.py

Environment-driven configuration helpers.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from plan_changer.domain.plan_change import DEFAULT_PORTAL_BASE, PortalSettings
from plan_changer.portal.classifier import DEFAULT_SUCCESS_KEYWORDS

REQUIRED_PORTAL_VARS: tuple[str, ...] = (
    "LAUNTEL_USERNAME",
    "LAUNTEL_PASSWORD",
    "LAUNTEL_USERID",
    "LAUNTEL_SERVICE_ID",
    "LAUNTEL_AVCID",
    "LAUNTEL_LOCID",
)

_TRUTHY = {"1", "true", "yes", "on"}


def project_root() -> Path:
    return Path(__file__).resolve().parents[1]


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    root = project_root()
    for filename in (".env", ".env.local"):
        env_path = root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in _TRUTHY


def _get_int_env(name: str, default: int) -> int:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_raw_str_env(name: str, default: str) -> str:
    """
    Like `_get_str_env` but an explicitly empty value is kept.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip()


def _get_optional_str_env(name: str) -> str | None:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def missing_portal_vars() -> list[str]:
    """
    Names of required portal variables that are unset or blank.
    """

    return [name for name in REQUIRED_PORTAL_VARS if _get_optional_str_env(name) is None]


def load_portal_settings(*, debug_html: bool | None = None) -> PortalSettings | None:
    """
    Build portal settings from LAUNTEL_* variables; None when any required one is missing.

    Not cached: the scheduler re-reads configuration on every tick.
    """

    if missing_portal_vars():
        return None

    timeout_ms = max(1000, _get_int_env("LAUNTEL_TIMEOUT_MS", 15000))
    return PortalSettings(
        base=_get_str_env("LAUNTEL_BASE", DEFAULT_PORTAL_BASE),
        username=_get_str_env("LAUNTEL_USERNAME", ""),
        password=_get_str_env("LAUNTEL_PASSWORD", ""),
        user_id=_get_str_env("LAUNTEL_USERID", ""),
        service_id=_get_str_env("LAUNTEL_SERVICE_ID", ""),
        avc_id=_get_str_env("LAUNTEL_AVCID", ""),
        loc_id=_get_str_env("LAUNTEL_LOCID", ""),
        discount_code=_get_raw_str_env("LAUNTEL_DISCOUNT_CODE", ""),
        unpause=_get_raw_str_env("LAUNTEL_UNPAUSE", "0"),
        coat=_get_raw_str_env("LAUNTEL_COAT", "0"),
        churn=_get_raw_str_env("LAUNTEL_CHURN", "0"),
        scheduled_dt=_get_raw_str_env("LAUNTEL_SCHEDULEDDT", ""),
        new_service_payment_option=_get_raw_str_env("LAUNTEL_NEW_SERVICE_PAYMENT_OPTION", ""),
        timeout_seconds=timeout_ms / 1000.0,
        debug_html=_get_bool_env("LAUNTEL_DEBUG_HTML", False) if debug_html is None else debug_html,
    )


@dataclass(frozen=True)
class EngineSettings:
    """
    Automation engine tuning.
    """

    success_keywords: tuple[str, ...] = DEFAULT_SUCCESS_KEYWORDS
    snapshot_dir: str | None = None


@dataclass(frozen=True)
class SchedulerSettings:
    """
    Runtime settings for the trigger scheduler service.
    """

    schedule_path: str
    timer_timezone: str = "UTC"


@dataclass(frozen=True)
class LockSettings:
    """
    Single-instance lock for the one-shot CLI.
    """

    job_name: str
    lock_dir: str

    @property
    def lock_path(self) -> Path:
        return Path(self.lock_dir) / f"{self.job_name}.lock"


@lru_cache(maxsize=1)
def get_engine_settings() -> EngineSettings:
    raw_keywords = _get_optional_str_env("LAUNTEL_SUCCESS_KEYWORDS")
    keywords = DEFAULT_SUCCESS_KEYWORDS
    if raw_keywords:
        parsed = tuple(item.strip() for item in raw_keywords.split(",") if item.strip())
        keywords = parsed or DEFAULT_SUCCESS_KEYWORDS
    return EngineSettings(
        success_keywords=keywords,
        snapshot_dir=_get_optional_str_env("LAUNTEL_SNAPSHOT_DIR"),
    )


@lru_cache(maxsize=1)
def get_scheduler_settings() -> SchedulerSettings:
    raw_path = _get_str_env("SCHEDULER_CONFIG_PATH", "schedules.json")
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        candidate = (project_root() / candidate).resolve()
    return SchedulerSettings(
        schedule_path=str(candidate),
        timer_timezone=_get_str_env("SCHEDULER_TIMEZONE", "UTC"),
    )


@lru_cache(maxsize=1)
def get_lock_settings() -> LockSettings:
    return LockSettings(
        job_name=_get_str_env("JOB_NAME", "plan-changer-job"),
        lock_dir=_get_str_env("LOCK_DIR", tempfile.gettempdir()),
    )
