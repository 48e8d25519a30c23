from __future__ import annotations

# ============================================================================
# REST API CLIENT
# ============================================================================
# One method per endpoint. Every call is a single request: no retries, no
# caching, and the timeout is left to the transport unless configured.
import logging
from dataclasses import dataclass
from typing import Any

import requests

from .models import Issue, Session, User

logger = logging.getLogger(__name__)


# ============================================================================
# ERRORS
# ============================================================================
class ApiError(Exception):
    """Base class for everything the client raises."""


class TransportFailure(ApiError):
    """Network failure, timeout, or a response body that is not JSON."""


class APIRejection(ApiError):
    """Non-2xx response. `message` is the server's own text when it sent one."""

    def __init__(self, status_code: int, message: str | None = None):
        super().__init__(message or f"HTTP {status_code}")
        self.status_code = status_code
        self.message = message

    def user_message(self, fallback: str) -> str:
        return self.message or fallback


@dataclass(frozen=True)
class ReportImage:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class IssueReport:
    """Multipart payload for a new issue (exactly one image)."""

    title: str
    description: str
    category: str
    latitude: float
    longitude: float
    image: ReportImage


def _server_message(body: Any) -> str | None:
    if isinstance(body, dict):
        for key in ("message", "detail", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return None


class ApiClient:
    """Thin client for the civic issues REST API.

    Why:
    - Pages and controllers only ever see `Issue`, `Session` or an `ApiError`,
      never a raw `requests` response.
    - A shared `requests.Session` keeps connections alive across reruns.
    """

    def __init__(self, base_url: str, timeout: float | None = None, http: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http or requests.Session()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _request(self, method: str, path: str, *, token: str | None = None, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        headers = kwargs.pop("headers", {})
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self.http.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise TransportFailure(str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.ok:
            message = _server_message(body)
            logger.warning("%s %s rejected with %s: %s", method, path, response.status_code, message)
            raise APIRejection(response.status_code, message)

        if body is None:
            logger.error("%s %s returned a non-JSON body", method, path)
            raise TransportFailure(f"Invalid JSON from {path}")
        return body

    def _issue_list(self, path: str, token: str | None = None) -> list[Issue]:
        body = self._request("GET", path, token=token)
        if not isinstance(body, list):
            raise TransportFailure(f"Expected a list of issues from {path}")
        if not all(isinstance(item, dict) for item in body):
            logger.error("GET %s returned a list with non-object items", path)
            raise TransportFailure(f"Malformed issue in list from {path}")
        return [Issue.from_api(item) for item in body]

    @staticmethod
    def _session(body: Any) -> Session:
        try:
            return Session(token=str(body["token"]), user=User.from_api(body["user"]))
        except (KeyError, TypeError) as e:
            raise TransportFailure("Malformed authentication response") from e

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------
    def login(self, email: str, password: str) -> Session:
        body = self._request("POST", "/auth/login", json={"email": email, "password": password})
        return self._session(body)

    def register(self, name: str, email: str, password: str, role: str) -> Session:
        body = self._request(
            "POST",
            "/auth/register",
            json={"name": name, "email": email, "password": password, "role": role},
        )
        return self._session(body)

    # ------------------------------------------------------------------
    # Issues
    # ------------------------------------------------------------------
    def public_issues(self) -> list[Issue]:
        return self._issue_list("/issues/public")

    def my_issues(self, token: str) -> list[Issue]:
        return self._issue_list("/issues/my-issues", token=token)

    def all_issues(self, token: str) -> list[Issue]:
        return self._issue_list("/issues/admin/all", token=token)

    def get_issue(self, issue_id: str) -> Issue:
        body = self._request("GET", f"/issues/{issue_id}")
        if not isinstance(body, dict):
            raise TransportFailure("Expected an issue object")
        return Issue.from_api(body)

    def update_status(self, token: str, issue_id: str, status: str) -> dict[str, Any]:
        return self._request("PATCH", f"/issues/{issue_id}/status", token=token, json={"status": status})

    def report_issue(self, token: str, report: IssueReport) -> dict[str, Any]:
        data = {
            "title": report.title,
            "description": report.description,
            "category": report.category,
            "latitude": str(report.latitude),
            "longitude": str(report.longitude),
        }
        image = report.image
        files = {"image": (image.filename, image.content, image.content_type)}
        return self._request("POST", "/issues/report", token=token, data=data, files=files)
