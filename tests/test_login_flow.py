"""
tests/test_login_flow.py

Login GET-then-POST against the fake portal.
"""

from __future__ import annotations

import pytest

from plan_changer.domain.plan_change import PortalSettings
from plan_changer.portal.errors import StructuralError, TransportError
from plan_changer.portal.login import LoginFlow, LoginStage, login_path
from plan_changer.portal.session import PortalSession

from conftest import LOGIN_PAGE, PORTAL_BASE, FakePortal


def _run_login(portal: FakePortal, settings: PortalSettings) -> LoginFlow:
    session = PortalSession(
        base_url=settings.base,
        timeout_seconds=settings.timeout_seconds,
        session=portal.session_factory(),
    )
    flow = LoginFlow(session=session, settings=settings)
    flow.run()
    return flow


def test_login_path_embeds_encoded_return_url(portal_settings: PortalSettings) -> None:
    assert login_path(portal_settings) == (
        "/login?return_url=%2Fservice_details%3Favcid%3DAVC000123%26userid%3Du-1"
    )


def test_replays_hidden_fields_with_credentials(
    happy_portal: FakePortal, portal_settings: PortalSettings
) -> None:
    flow = _run_login(happy_portal, portal_settings)

    assert flow.stage is LoginStage.DONE
    get_call = happy_portal.calls("GET", "/login")[0]
    assert get_call.query["return_url"] == ["/service_details?avcid=AVC000123&userid=u-1"]

    post_call = happy_portal.calls("POST", "/login")[0]
    assert post_call.form == {
        "csrf_token": ["tok-123"],
        "username": ["alice@example.com"],
        "password": ["s3cret"],
    }
    assert post_call.headers["Origin"] == PORTAL_BASE
    assert post_call.headers["Referer"] == PORTAL_BASE + login_path(portal_settings)
    assert post_call.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert "Mozilla/5.0" in post_call.headers["User-Agent"]


def test_detects_alternate_credential_field_names(
    portal: FakePortal, portal_settings: PortalSettings
) -> None:
    portal.respond(
        "GET",
        "/login",
        200,
        '<form method="post" action="/auth/session">'
        '<input name="email"><input type="password" name="passwd"></form>',
    )
    portal.respond("POST", "/auth/session", 200, "ok")

    _run_login(portal, portal_settings)

    post_call = portal.calls("POST", "/auth/session")[0]
    assert post_call.form == {"email": ["alice@example.com"], "passwd": ["s3cret"]}


def test_missing_credential_fields_use_default_names(
    portal: FakePortal, portal_settings: PortalSettings
) -> None:
    portal.respond("GET", "/login", 200, '<form method="post"><input type="hidden" name="t" value="1"></form>')
    portal.respond("POST", "/login", 200, "ok")

    _run_login(portal, portal_settings)

    post_call = portal.calls("POST", "/login")[0]
    assert post_call.form == {"t": ["1"], "username": ["alice@example.com"], "password": ["s3cret"]}


def test_uses_first_post_form_only(portal: FakePortal, portal_settings: PortalSettings) -> None:
    portal.respond(
        "GET",
        "/login",
        200,
        '<form action="/search"><input name="q"></form>'
        '<form method="POST" action="/first"><input name="username"></form>'
        '<form method="post" action="/second"><input name="username"></form>',
    )
    portal.respond("POST", "/first", 200, "ok")

    _run_login(portal, portal_settings)

    assert len(portal.calls("POST", "/first")) == 1
    assert portal.calls("POST", "/second") == []


def test_missing_form_is_structural_error(portal: FakePortal, portal_settings: PortalSettings) -> None:
    portal.respond("GET", "/login", 200, "<html><form action='/x'></form></html>")

    with pytest.raises(StructuralError, match="Login form not found"):
        _run_login(portal, portal_settings)


@pytest.mark.parametrize(
    "method, path, expected",
    [
        ("GET", "/login", "Login page GET failed with status 503"),
        ("POST", "/login", "Login POST failed with status 503"),
    ],
)
def test_error_status_is_transport_error(
    happy_portal: FakePortal,
    portal_settings: PortalSettings,
    method: str,
    path: str,
    expected: str,
) -> None:
    happy_portal.respond(method, path, 503, "down")

    with pytest.raises(TransportError) as ctx:
        _run_login(happy_portal, portal_settings)

    assert str(ctx.value) == expected
    assert ctx.value.status_code == 503


def test_follows_redirect_after_login_post(
    happy_portal: FakePortal, portal_settings: PortalSettings
) -> None:
    happy_portal.route("POST", "/login", lambda _r: (302, "", {"Location": "/service_details"}))
    happy_portal.respond("GET", "/service_details", 200, "<title>Service</title>")

    _run_login(happy_portal, portal_settings)

    assert len(happy_portal.calls("GET", "/service_details")) == 1


def test_login_page_html_is_never_validated_for_auth(
    happy_portal: FakePortal, portal_settings: PortalSettings
) -> None:
    happy_portal.respond("POST", "/login", 200, LOGIN_PAGE)

    flow = _run_login(happy_portal, portal_settings)

    assert flow.stage is LoginStage.DONE
