"""
Shared fixtures: a scripted in-process portal mounted as a requests transport adapter.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from urllib.parse import parse_qs, urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from plan_changer.domain.plan_change import PortalSettings

PORTAL_BASE = "https://portal.test"

LOGIN_PAGE = """
<html><head><title>Sign in</title></head><body>
<form method="post" action="/login">
  <input type="hidden" name="csrf_token" value="tok-123">
  <input type="text" name="username">
  <input type="password" name="password">
  <input type="checkbox" name="remember" value="yes">
</form>
</body></html>
"""

CONFIRM_PAGE = """
<html><head><title>Confirm service change</title></head><body>
<form name="confirm_service" method="post" action="/confirm_service">
  <input type="hidden" name="psid" value="2623">
  <input type="hidden" name="userid" value="stale">
  <input type="hidden" name="ntdupgrade" value="1">
  <input type="hidden" name="form_key" value="abc">
</form>
</body></html>
"""


@dataclass
class RecordedRequest:
    method: str
    url: str
    path: str
    query: dict[str, list[str]]
    form: dict[str, list[str]]
    headers: CaseInsensitiveDict


Handler = Callable[[RecordedRequest], "tuple[int, str] | tuple[int, str, dict[str, str]]"]


@dataclass
class FakePortal(BaseAdapter):
    """
    Routes (method, path) to handlers returning (status, body[, headers]).
    Unrouted requests get a 404.
    """

    routes: dict[tuple[str, str], Handler] = field(default_factory=dict)
    received: list[RecordedRequest] = field(default_factory=list)
    sessions: list[requests.Session] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__init__()

    def route(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method.upper(), path)] = handler

    def respond(self, method: str, path: str, status: int, body: str) -> None:
        self.route(method, path, lambda _request: (status, body))

    def send(self, request: requests.PreparedRequest, **kwargs: object) -> requests.Response:
        parts = urlsplit(request.url)
        raw_body = request.body or ""
        if isinstance(raw_body, bytes):
            raw_body = raw_body.decode("utf-8")
        recorded = RecordedRequest(
            method=request.method,
            url=request.url,
            path=parts.path,
            query=parse_qs(parts.query, keep_blank_values=True),
            form=parse_qs(raw_body, keep_blank_values=True),
            headers=request.headers,
        )
        self.received.append(recorded)

        handler = self.routes.get((request.method, parts.path))
        outcome = handler(recorded) if handler else (404, "not found")
        status, body = outcome[0], outcome[1]
        headers = outcome[2] if len(outcome) > 2 else {}

        response = requests.Response()
        response.status_code = status
        response._content = body.encode("utf-8")
        response._content_consumed = True
        response.headers = CaseInsensitiveDict({"Content-Type": "text/html; charset=utf-8", **headers})
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        response.reason = "OK" if status < 400 else "ERROR"
        return response

    def close(self) -> None:
        pass

    def session_factory(self) -> requests.Session:
        session = requests.Session()
        session.mount("https://", self)
        session.mount("http://", self)
        self.sessions.append(session)
        return session

    def calls(self, method: str, path: str) -> list[RecordedRequest]:
        return [item for item in self.received if item.method == method and item.path == path]


@pytest.fixture()
def portal() -> FakePortal:
    return FakePortal()


@pytest.fixture()
def happy_portal(portal: FakePortal) -> FakePortal:
    portal.respond("GET", "/login", 200, LOGIN_PAGE)
    portal.respond("POST", "/login", 200, "<html><title>Dashboard</title>welcome</html>")
    portal.respond("GET", "/confirm_service", 200, CONFIRM_PAGE)
    portal.respond("POST", "/confirm_service", 200, "<html>change confirmed</html>")
    return portal


@pytest.fixture()
def portal_settings() -> PortalSettings:
    return PortalSettings(
        base=PORTAL_BASE,
        username="alice@example.com",
        password="s3cret",
        user_id="u-1",
        service_id="svc-9",
        avc_id="AVC000123",
        loc_id="LOC000456",
        timeout_seconds=5.0,
    )
