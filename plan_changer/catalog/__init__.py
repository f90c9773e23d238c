"""
Plan catalog exports.
"""

from plan_changer.catalog.plans import (
    PLAN_CATALOG,
    PLAN_NAME_ALIASES,
    ResolvedPlan,
    list_plans,
    normalize_plan_name,
    plan_name_for_code,
    resolve_plan,
)

__all__ = [
    "PLAN_CATALOG",
    "PLAN_NAME_ALIASES",
    "ResolvedPlan",
    "list_plans",
    "normalize_plan_name",
    "plan_name_for_code",
    "resolve_plan",
]
