"""
tests/test_plan_catalog.py

Plan name normalization and resolution.
"""

from __future__ import annotations

import pytest

from plan_changer.catalog import (
    PLAN_CATALOG,
    PLAN_NAME_ALIASES,
    list_plans,
    normalize_plan_name,
    plan_name_for_code,
    resolve_plan,
)


class TestNormalization:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("  Home   Fast ", "homefast"),
            ("Ultrafast - 100", "ultrafast-100"),
            ("ultrafast--100", "ultrafast-100"),
            ("IoT\t1Mbps", "iot1mbps"),
            ("nbn100/20", "nbn100/20"),
            ("", ""),
            ("---", "-"),
        ],
    )
    def test_normalize(self, raw: str, expected: str) -> None:
        assert normalize_plan_name(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["Home Fast", " a - - b ", "X\n-\ty", "--a--", "IoT 4Mbps", "   ", "Ultrafast -  - 100"],
    )
    def test_normalize_is_idempotent(self, raw: str) -> None:
        once = normalize_plan_name(raw)
        assert normalize_plan_name(once) == once


class TestResolve:
    @pytest.mark.parametrize("name, code", list(PLAN_CATALOG.items()))
    def test_canonical_names_round_trip(self, name: str, code: int) -> None:
        resolved = resolve_plan(name)
        assert resolved is not None
        assert (resolved.code, resolved.name) == (code, name)

    def test_alias_with_hyphen(self) -> None:
        resolved = resolve_plan("home-fast")
        assert resolved is not None
        assert (resolved.code, resolved.name) == (2669, "Home Fast")

    def test_case_insensitive_with_spaces(self) -> None:
        resolved = resolve_plan("IOT 1MBPS")
        assert resolved is not None
        assert (resolved.code, resolved.name) == (2629, "IoT 1Mbps")

    def test_psid_is_string_form_of_code(self) -> None:
        resolved = resolve_plan("hyperfast")
        assert resolved is not None
        assert resolved.psid == "2666"

    def test_unknown_plan_is_none(self) -> None:
        assert resolve_plan("totally-unknown-plan") is None

    def test_no_partial_matching(self) -> None:
        assert resolve_plan("home") is None

    def test_aliases_never_shadow_other_plans(self) -> None:
        canonical_keys = {normalize_plan_name(name): name for name in PLAN_CATALOG}
        for alias_key, target in PLAN_NAME_ALIASES.items():
            if alias_key in canonical_keys:
                assert canonical_keys[alias_key] == target


class TestListing:
    def test_list_plans_keeps_definition_order(self) -> None:
        plans = list_plans()
        assert len(plans) == 10
        assert plans[0] == ("Standby", 2623)
        assert plans[-1] == ("IoT 4Mbps", 2635)
        assert [name for name, _ in plans] != sorted(name for name, _ in plans)

    @pytest.mark.parametrize(
        "code, expected",
        [("2669", "Home Fast"), (2623, "Standby"), (" 2666 ", "Hyperfast"), ("9999", None), ("abc", None), (None, None)],
    )
    def test_reverse_lookup(self, code: object, expected: str | None) -> None:
        assert plan_name_for_code(code) == expected
