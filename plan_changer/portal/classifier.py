"""
Success classification for the confirm POST response.

Only positive keywords are checked. A page without any of them is reported as
unclear, whether it is an explicit error page or something unrelated.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

DEFAULT_SUCCESS_KEYWORDS: tuple[str, ...] = ("confirmed", "success", "submitted", "thank you")


class SuccessClassifier(Protocol):
    def is_success(self, body: str) -> bool:
        """
        Return True when `body` shows the plan change was accepted.
        """


class KeywordSuccessClassifier:
    """
    Case-insensitive substring match against a keyword set.
    """

    def __init__(self, keywords: Iterable[str] = DEFAULT_SUCCESS_KEYWORDS) -> None:
        normalized = tuple(keyword.strip().lower() for keyword in keywords if keyword.strip())
        if not normalized:
            raise ValueError("KeywordSuccessClassifier needs at least one keyword.")
        self.keywords = normalized

    def is_success(self, body: str) -> bool:
        lowered = (body or "").lower()
        return any(keyword in lowered for keyword in self.keywords)
