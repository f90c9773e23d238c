"""
Portal automation exports.
"""

from plan_changer.portal.classifier import (
    DEFAULT_SUCCESS_KEYWORDS,
    KeywordSuccessClassifier,
    SuccessClassifier,
)
from plan_changer.portal.engine import AutomationEngine
from plan_changer.portal.errors import (
    AmbiguousResultError,
    AuthenticationError,
    PlanChangeError,
    StructuralError,
    TransportError,
)
from plan_changer.portal.forms import FormFieldSet, scrape_form

__all__ = [
    "DEFAULT_SUCCESS_KEYWORDS",
    "AmbiguousResultError",
    "AuthenticationError",
    "AutomationEngine",
    "FormFieldSet",
    "KeywordSuccessClassifier",
    "PlanChangeError",
    "StructuralError",
    "SuccessClassifier",
    "TransportError",
    "scrape_form",
]
