"""
Login flow: GET the login page, replay its form with credentials.

Login success is not verified here. The confirm flow detects a login page
served in place of the confirm page and fails the run then.
"""

from __future__ import annotations

import logging
from enum import Enum
from urllib.parse import quote

from bs4 import BeautifulSoup, Tag

from plan_changer.domain.plan_change import PortalSettings
from plan_changer.portal.errors import StructuralError
from plan_changer.portal.forms import parse_html, scrape_form
from plan_changer.portal.logging_utils import log_event, redact_fields
from plan_changer.portal.session import PortalSession, raise_for_portal_status
from plan_changer.portal.snapshots import SnapshotWriter

logger = logging.getLogger(__name__)

USERNAME_FIELD_CANDIDATES: tuple[str, ...] = ("username", "email", "user", "login")
PASSWORD_FIELD_CANDIDATES: tuple[str, ...] = ("password", "passwd", "pass")
DEFAULT_LOGIN_ACTION = "/login"

# Characters encodeURIComponent leaves untouched.
_URI_COMPONENT_SAFE = "-_.!~*'()"


class LoginStage(str, Enum):
    AWAITING_FORM = "awaiting_form"
    AWAITING_AUTH_RESULT = "awaiting_auth_result"
    DONE = "done"


def encode_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def service_details_path(settings: PortalSettings) -> str:
    return (
        f"/service_details?avcid={encode_component(settings.avc_id)}"
        f"&userid={encode_component(settings.user_id)}"
    )


def login_path(settings: PortalSettings) -> str:
    return f"/login?return_url={encode_component(service_details_path(settings))}"


def find_login_form(soup: BeautifulSoup) -> Tag | None:
    """
    First form submitted with method=post.
    """

    for form in soup.find_all("form"):
        if (form.get("method") or "").strip().lower() == "post":
            return form
    return None


class LoginFlow:
    """
    Authenticates one portal session.
    """

    def __init__(
        self,
        *,
        session: PortalSession,
        settings: PortalSettings,
        snapshots: SnapshotWriter | None = None,
    ) -> None:
        self._session = session
        self._settings = settings
        self._snapshots = snapshots or SnapshotWriter(enabled=False)
        self.stage = LoginStage.AWAITING_FORM

    def run(self) -> None:
        page_path = login_path(self._settings)
        page_url = self._session.request_url(page_path)

        get_response = self._session.get(page_path)
        self._snapshots.save("login-get", get_response.text)
        raise_for_portal_status(get_response, step="Login page GET")

        form = find_login_form(parse_html(get_response.text))
        if form is None:
            raise StructuralError("Login form not found on the page")

        fields = scrape_form(form)
        user_field = fields.first_present(USERNAME_FIELD_CANDIDATES, default="username")
        pass_field = fields.first_present(PASSWORD_FIELD_CANDIDATES, default="password")
        fields.apply_overrides(
            forced={
                user_field: self._settings.username,
                pass_field: self._settings.password,
            }
        )

        action = self._session.absolute_url(form.get("action"), default=DEFAULT_LOGIN_ACTION)
        self.stage = LoginStage.AWAITING_AUTH_RESULT
        log_event(
            logger,
            logging.INFO,
            "login_form_submitting",
            action=action,
            user_field=user_field,
            password_field=pass_field,
            fields=redact_fields(fields.as_dict()),
        )

        post_response = self._session.post_form(
            action,
            fields,
            headers={"Referer": page_url},
        )
        self._snapshots.save("login-post", post_response.text)
        raise_for_portal_status(post_response, step="Login POST")

        self.stage = LoginStage.DONE
        log_event(
            logger,
            logging.INFO,
            "login_completed",
            status_code=post_response.status_code,
        )
