"""Thin Heroku Platform API client built on ``requests``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import requests
from requests.auth import HTTPBasicAuth

from heroku_provisioner import __version__

if TYPE_CHECKING:
    from heroku_provisioner.core.credentials import Credentials

logger = logging.getLogger(__name__)

API_URL = "https://api.heroku.com"
ACCEPT = "application/vnd.heroku+json; version=3"
USER_AGENT = f"heroku-provisioner/{__version__}"
DEFAULT_TIMEOUT = 60.0


class HerokuAPIError(Exception):
    """Raised for any non-success response from the Heroku API.

    Attributes:
        status_code: HTTP status code.
        error_id: Heroku's machine-readable error id (e.g. ``"not_found"``).
        message: Heroku's human-readable error message.
    """

    def __init__(self, status_code: int, message: str, error_id: str | None = None) -> None:
        self.status_code = status_code
        self.error_id = error_id
        self.message = message
        label = f"{status_code} {error_id}" if error_id else str(status_code)
        super().__init__(f"Heroku API error ({label}): {message}")


class HerokuNotFoundError(HerokuAPIError):
    """Raised when the requested object does not exist (HTTP 404)."""


def _error_from_response(response: requests.Response) -> HerokuAPIError:
    error_id: str | None = None
    message = response.reason or "request failed"
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error_id = body.get("id")
        message = body.get("message", message)
    cls = HerokuNotFoundError if response.status_code == 404 else HerokuAPIError
    return cls(response.status_code, message, error_id)


class HerokuClient:
    """Session-bound client for the Heroku Platform API.

    Paths are relative to ``base_url`` (e.g. ``"/apps/my-app"``). Responses
    are decoded JSON. Construct via :func:`build_client`.
    """

    def __init__(
        self,
        session: requests.Session,
        *,
        base_url: str = API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        debug: bool = False,
    ) -> None:
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.debug = debug

    def request(self, method: str, path: str, *, json: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        if self.debug:
            # Bodies may carry config var values; only keys are logged.
            keys = sorted(json) if isinstance(json, dict) else None
            logger.debug("HTTP %s %s body_keys=%s", method, url, keys)

        try:
            response = self.session.request(method, url, json=json, timeout=self.timeout)
        except requests.RequestException as exc:
            raise HerokuAPIError(0, f"{method} {path}: {exc}", "connection_error") from exc

        if self.debug:
            logger.debug(
                "HTTP %s %s -> %d (%s)",
                method,
                url,
                response.status_code,
                response.headers.get("Request-Id", "-"),
            )

        if not response.ok:
            raise _error_from_response(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def get(self, path: str) -> Any:
        return self.request("GET", path)

    def post(self, path: str, body: dict[str, Any]) -> Any:
        return self.request("POST", path, json=body)

    def patch(self, path: str, body: dict[str, Any]) -> Any:
        return self.request("PATCH", path, json=body)

    def put(self, path: str, body: dict[str, Any]) -> Any:
        return self.request("PUT", path, json=body)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)


def build_client(
    credentials: Credentials,
    *,
    base_url: str = API_URL,
    timeout: float = DEFAULT_TIMEOUT,
    debug: bool = False,
) -> HerokuClient:
    """Create a :class:`HerokuClient` for the given connection context.

    Uses basic auth (email + API key) when an email is known and a bearer
    token otherwise. ``debug`` enables request/response logging at DEBUG
    level on this module's logger.
    """
    session = requests.Session()
    token = credentials.api_key.get_secret_value()
    if credentials.email:
        session.auth = HTTPBasicAuth(credentials.email, token)
    else:
        session.headers["Authorization"] = f"Bearer {token}"
    session.headers["Accept"] = ACCEPT
    session.headers.update(credentials.headers)
    session.headers["User-Agent"] = USER_AGENT

    logger.info("Heroku client configured for user: %s", credentials.email or "<token>")
    return HerokuClient(session, base_url=base_url, timeout=timeout, debug=debug)
