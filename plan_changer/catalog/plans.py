"""
plan_changer/catalog/plans.py

Plan catalog: canonical plan names, their portal plan codes (psid) and
tolerant name resolution.

Normalization (kept stable for compatibility with stored schedules)
-------------------------------------------------------------------
trim -> lowercase -> collapse whitespace runs -> drop whitespace around
hyphens -> strip remaining whitespace -> collapse hyphen runs.

So ``" Home  Fast "``, ``"home-fast"`` and ``"HOMEFAST"`` all resolve to
``"Home Fast"`` (2669). Lookup is exact on the normalized key; there is no
fuzzy matching.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

# Catalog-definition order is the listing order.
PLAN_CATALOG: Mapping[str, int] = MappingProxyType(
    {
        "Standby": 2623,
        "nbn100/20": 2613,
        "nbn100/40": 2608,
        "Home Fast": 2669,
        "Home SuperFast": 2615,
        "Ultrafast-100": 2617,
        "nbn250/100": 2664,
        "Hyperfast": 2666,
        "IoT 1Mbps": 2629,
        "IoT 4Mbps": 2635,
    }
)

# Keys are stored pre-normalized.
PLAN_NAME_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "homefast": "Home Fast",
        "home-fast": "Home Fast",
        "homesuperfast": "Home SuperFast",
        "home-superfast": "Home SuperFast",
        "ultrafast100": "Ultrafast-100",
        "ultrafast-100": "Ultrafast-100",
        "iot1mbps": "IoT 1Mbps",
        "iot-1mbps": "IoT 1Mbps",
        "iot4mbps": "IoT 4Mbps",
        "iot-4mbps": "IoT 4Mbps",
    }
)

_WHITESPACE_RUN = re.compile(r"\s+")
_SPACED_HYPHEN = re.compile(r"\s*-\s*")
_HYPHEN_RUN = re.compile(r"-+")


@dataclass(frozen=True)
class ResolvedPlan:
    """
    Result of a successful plan-name lookup.
    """

    code: int
    name: str

    @property
    def psid(self) -> str:
        return str(self.code)


def normalize_plan_name(value: str) -> str:
    normalized = value.strip().lower()
    normalized = _WHITESPACE_RUN.sub(" ", normalized)
    normalized = _SPACED_HYPHEN.sub("-", normalized)
    normalized = _WHITESPACE_RUN.sub("", normalized)
    return _HYPHEN_RUN.sub("-", normalized)


def _build_lookup(
    catalog: Mapping[str, int],
    aliases: Mapping[str, str],
) -> dict[str, str]:
    lookup: dict[str, str] = {}
    for canonical in catalog:
        lookup[normalize_plan_name(canonical)] = canonical

    for alias_key, canonical in aliases.items():
        if canonical not in catalog:
            raise ValueError(f"Alias '{alias_key}' points at unknown plan '{canonical}'.")
        existing = lookup.get(alias_key)
        if existing is not None and existing != canonical:
            raise ValueError(
                f"Alias '{alias_key}' collides with plan '{existing}' "
                f"(alias target '{canonical}')."
            )
        lookup[alias_key] = canonical
    return lookup


_NORMALIZED_TO_CANONICAL: Mapping[str, str] = MappingProxyType(
    _build_lookup(PLAN_CATALOG, PLAN_NAME_ALIASES)
)


def resolve_plan(value: str) -> ResolvedPlan | None:
    """
    Resolve a human plan name to its canonical name and code.

    Returns None when nothing matches; callers decide how to report it
    (typically by listing `list_plans()`).
    """

    canonical = _NORMALIZED_TO_CANONICAL.get(normalize_plan_name(value))
    if canonical is None:
        return None
    return ResolvedPlan(code=PLAN_CATALOG[canonical], name=canonical)


def list_plans() -> list[tuple[str, int]]:
    return list(PLAN_CATALOG.items())


def plan_name_for_code(code: str | int | None) -> str | None:
    """
    Reverse lookup of a plan code; unknown or non-numeric codes give None.
    """

    if code is None:
        return None
    try:
        numeric = int(str(code).strip())
    except ValueError:
        return None
    for name, plan_code in PLAN_CATALOG.items():
        if plan_code == numeric:
            return name
    return None
