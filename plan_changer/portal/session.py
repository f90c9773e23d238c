"""
HTTP session client bound to one portal run.

One cookie jar per instance, shared by every request of the run and
discarded with it. Responses with error statuses are returned, not raised:
flows inspect the status themselves via `raise_for_portal_status`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from urllib.parse import urljoin, urlsplit

import requests

from plan_changer.portal.errors import TransportError
from plan_changer.portal.logging_utils import log_event

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 10

BROWSER_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class PortalSession:
    """
    Thin wrapper over `requests.Session` with fixed browser headers,
    a per-request timeout and bounded redirects.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._session = session or requests.Session()
        self._session.max_redirects = MAX_REDIRECTS
        self._session.headers.update(BROWSER_HEADERS)

    def __enter__(self) -> PortalSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def cookies(self) -> requests.cookies.RequestsCookieJar:
        return self._session.cookies

    def absolute_url(self, target: str | None, default: str = "/") -> str:
        """
        Resolve a form action against the portal base the way a browser does;
        blank targets use `default`.
        """

        candidate = target.strip() if target else ""
        return urljoin(f"{self.base_url}/", candidate or default)

    def request_url(self, target: str) -> str:
        """
        URL for a portal path, appended to the base so a base path is kept.

        Absolute URLs pass through unchanged.
        """

        if urlsplit(target).scheme:
            return target
        return f"{self.base_url}/{target.lstrip('/')}"

    def get(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> requests.Response:
        return self._send("GET", url, headers=headers)

    def post_form(
        self,
        url: str,
        fields: Mapping[str, str],
        *,
        headers: Mapping[str, str] | None = None,
    ) -> requests.Response:
        """
        POST `fields` as an urlencoded body with Origin set to the portal base.
        """

        merged = {
            "Content-Type": FORM_CONTENT_TYPE,
            "Origin": self.base_url,
            **(headers or {}),
        }
        return self._send("POST", url, headers=merged, data=dict(fields))

    def close(self) -> None:
        self._session.close()

    def _send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        data: dict[str, str] | None = None,
    ) -> requests.Response:
        absolute = self.request_url(url)
        try:
            response = self._session.request(
                method,
                absolute,
                headers=dict(headers or {}),
                data=data,
                timeout=self.timeout_seconds,
                allow_redirects=True,
            )
        except requests.Timeout as exc:
            raise TransportError(
                f"{method} {absolute} timed out after {self.timeout_seconds:g}s"
            ) from exc
        except requests.TooManyRedirects as exc:
            raise TransportError(
                f"{method} {absolute} exceeded {MAX_REDIRECTS} redirects"
            ) from exc
        except requests.RequestException as exc:
            raise TransportError(f"{method} {absolute} failed: {exc}") from exc

        log_event(
            logger,
            logging.INFO,
            "portal_request",
            method=method,
            url=absolute,
            final_url=response.url,
            status_code=response.status_code,
            redirects=len(response.history),
        )
        return response


def raise_for_portal_status(response: requests.Response, *, step: str) -> None:
    """
    Raise TransportError for any status >= 400, naming the failed step.
    """

    if response.status_code >= 400:
        raise TransportError(
            f"{step} failed with status {response.status_code}",
            status_code=response.status_code,
        )
