"""
Portal automation exceptions.

Every error raised inside the login/confirm flows is fatal for the run and is
converted into a failed `RunResult` by the automation engine.
"""

from __future__ import annotations


class PlanChangeError(RuntimeError):
    """Base exception for plan-change run failures."""


class TransportError(PlanChangeError):
    """Raised on HTTP status >= 400, timeouts and connection failures."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StructuralError(PlanChangeError):
    """Raised when an expected form or element is missing from a portal page."""


class AuthenticationError(PlanChangeError):
    """Raised when a login page is served where an authenticated page was expected."""


class AmbiguousResultError(PlanChangeError):
    """Raised when the confirm POST succeeded but no success signal was found."""
