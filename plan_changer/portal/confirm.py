"""
Confirm flow: GET the change-of-plan page, replay its form with the target
plan and account identifiers, classify the response.
"""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from bs4 import BeautifulSoup, Tag

from plan_changer.domain.plan_change import RunConfig
from plan_changer.portal.classifier import KeywordSuccessClassifier, SuccessClassifier
from plan_changer.portal.errors import AmbiguousResultError, AuthenticationError, StructuralError
from plan_changer.portal.forms import describe_forms, page_title, parse_html, scrape_form
from plan_changer.portal.logging_utils import log_event
from plan_changer.portal.login import service_details_path
from plan_changer.portal.session import PortalSession, raise_for_portal_status
from plan_changer.portal.snapshots import SnapshotWriter, with_snapshot

logger = logging.getLogger(__name__)

CONFIRM_PATH = "/confirm_service"
CONFIRM_FORM_NAME = "confirm_service"


def confirm_query(config: RunConfig) -> dict[str, str]:
    """
    The nine query parameters of the confirm GET, in portal order; all always present.
    """

    portal = config.portal
    return {
        "userid": portal.user_id,
        "psid": config.psid,
        "unpause": portal.unpause or "0",
        "service_id": portal.service_id,
        "discount_code": portal.discount_code or "",
        "avcid": portal.avc_id,
        "locid": portal.loc_id,
        "coat": portal.coat or "0",
        "churn": portal.churn or "0",
    }


def confirm_path(config: RunConfig) -> str:
    return f"{CONFIRM_PATH}?{urlencode(confirm_query(config))}"


def looks_like_login(soup: BeautifulSoup) -> bool:
    """
    True when the page shows any login signal: a password input, a form
    posting to a login action, or a title mentioning login.
    """

    for node in soup.find_all("input"):
        if (node.get("type") or "").strip().lower() == "password":
            return True
    for form in soup.find_all("form"):
        if "login" in (form.get("action") or "").lower():
            return True
    return "login" in page_title(soup).lower()


def find_confirm_form(soup: BeautifulSoup) -> Tag | None:
    form = soup.find("form", attrs={"name": CONFIRM_FORM_NAME})
    if form is not None:
        return form

    for candidate in soup.find_all("form"):
        if CONFIRM_PATH in (candidate.get("action") or ""):
            return candidate

    for candidate in soup.find_all("form"):
        if candidate.find("input", attrs={"name": "psid"}) is not None:
            return candidate
    return None


class ConfirmFlow:
    """
    Submits the change-of-plan form on an authenticated session.
    """

    def __init__(
        self,
        *,
        session: PortalSession,
        config: RunConfig,
        classifier: SuccessClassifier | None = None,
        snapshots: SnapshotWriter | None = None,
    ) -> None:
        self._session = session
        self._config = config
        self._classifier = classifier or KeywordSuccessClassifier()
        self._snapshots = snapshots or SnapshotWriter(enabled=False)

    def run(self) -> None:
        portal = self._config.portal
        get_path = confirm_path(self._config)
        get_url = self._session.request_url(get_path)

        get_response = self._session.get(
            get_path,
            headers={"Referer": self._session.request_url(service_details_path(portal))},
        )
        raise_for_portal_status(get_response, step="Confirm page GET")

        html = get_response.text
        soup = parse_html(html)
        if looks_like_login(soup):
            snapshot = self._snapshots.save("confirm-get", html)
            raise AuthenticationError(
                with_snapshot(
                    "Not authenticated on confirm page (login detected). "
                    f"Status {get_response.status_code}",
                    snapshot,
                )
            )

        log_event(
            logger,
            logging.INFO,
            "confirm_page_forms",
            forms=describe_forms(soup),
        )

        form = find_confirm_form(soup)
        if form is None:
            snapshot = self._snapshots.save("confirm-get", html)
            raise StructuralError(with_snapshot("Confirm form not found on the page", snapshot))

        fields = scrape_form(form)
        fields.apply_overrides(
            defaults={"ntdreplace": "0", "ntdupgrade": "0"},
            forced={
                "userid": portal.user_id,
                "psid": self._config.psid,
                "locid": portal.loc_id,
                "avcid": portal.avc_id,
                "unpause": portal.unpause or "0",
                "scheduleddt": portal.scheduled_dt or "",
                "coat": portal.coat or "0",
                "new_service_payment_option": portal.new_service_payment_option or "",
            },
        )
        if "discount_code" in fields or portal.discount_code:
            fields.apply_overrides(forced={"discount_code": portal.discount_code or ""})

        action = self._session.absolute_url(form.get("action"), default=CONFIRM_PATH)
        log_event(
            logger,
            logging.INFO,
            "confirm_form_submitting",
            action=action,
            psid=self._config.psid,
            fields=fields.as_dict(),
        )

        post_response = self._session.post_form(
            action,
            fields,
            headers={"Referer": get_url},
        )
        raise_for_portal_status(post_response, step="Confirm form POST")

        if not self._classifier.is_success(post_response.text):
            snapshot = self._snapshots.save("confirm-post", post_response.text)
            raise AmbiguousResultError(
                with_snapshot(
                    "Plan change confirmation unclear - success indicators not found in response",
                    snapshot,
                )
            )

        log_event(
            logger,
            logging.INFO,
            "confirm_completed",
            status_code=post_response.status_code,
            psid=self._config.psid,
        )
