"""
Portal settings providers.
"""

from __future__ import annotations

from plan_changer.config import load_portal_settings
from plan_changer.domain.plan_change import PortalSettings
from plan_changer.providers.base import ConfigProvider


class EnvConfigProvider(ConfigProvider):
    """
    Reads LAUNTEL_* environment variables on every call.
    """

    def get_portal_settings(self) -> PortalSettings | None:
        return load_portal_settings()


class StaticConfigProvider(ConfigProvider):
    def __init__(self, settings: PortalSettings | None) -> None:
        self._settings = settings

    def get_portal_settings(self) -> PortalSettings | None:
        return self._settings
