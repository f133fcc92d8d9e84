from __future__ import annotations

import logging
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from tracker.constants import REQUEST_TIMEOUT_SECONDS
from tracker.errors import AuthenticationError, NetworkError, error_for_status

logger = logging.getLogger(__name__)


def build_http_session():
    session = requests.Session()
    # Timeouts and connection failures surface to the caller; only idempotent
    # reads are retried when the gateway is briefly unavailable.
    retry = Retry(
        total=2,
        connect=0,
        read=0,
        status=2,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=10)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({"Content-Type": "application/json"})
    return session


def send(http, method: str, url: str, params: dict | None = None, json: Any = None, headers: dict | None = None, timeout: float = REQUEST_TIMEOUT_SECONDS):
    try:
        return http.request(method, url, params=params, json=json, headers=headers or {}, timeout=timeout)
    except requests.Timeout as exc:
        raise NetworkError(f"Request timed out after {timeout}s: {method} {url}") from exc
    except requests.RequestException as exc:
        raise NetworkError(f"Network error: {exc}") from exc


def response_detail(response):
    try:
        return response.json()
    except ValueError:
        return response.text


def decode(response) -> Any:
    if not response.ok:
        raise error_for_status(response.status_code, response_detail(response))
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ApiClient:
    """JSON client for the habits API.

    Every request carries the session's bearer token. A 401 on the first
    attempt goes through ``session.refresh`` and the request is replayed once
    with the new token.
    """

    def __init__(self, session_manager, base_url: str, http=None, timeout: float = REQUEST_TIMEOUT_SECONDS):
        self.session_manager = session_manager
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else session_manager.http
        self.timeout = timeout

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _send(self, method, path, params, json, access_token):
        headers = {}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return send(self.http, method, self.url(path), params=params, json=json, headers=headers, timeout=self.timeout)

    def request(self, method: str, path: str, params: dict | None = None, json: Any = None) -> Any:
        access_token = self.session_manager.access_token
        response = self._send(method, path, params, json, access_token)
        if response.status_code == 401 and access_token:
            logger.info("Access token rejected for %s %s; refreshing", method, path)
            new_token = self.session_manager.refresh(failed_access_token=access_token)
            response = self._send(method, path, params, json, new_token)
            if response.status_code == 401:
                raise AuthenticationError(
                    "Request was rejected after refreshing the session",
                    401,
                    response_detail(response),
                )
        return decode(response)

    def get(self, path: str, params: dict | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def patch(self, path: str, json: Any = None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
