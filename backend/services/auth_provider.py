"""Calls to the hosted authentication provider (GoTrue-compatible REST API).

User storage, password hashing and token issuance all live there; this
module only forwards requests and reshapes the session payload.
"""
from __future__ import annotations

import logging

import httpx

from backend.settings import get_settings

logger = logging.getLogger(__name__)


class AuthProviderError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"Auth provider returned {response.status_code}"
    for key in ("error_description", "msg", "message", "error"):
        if payload.get(key):
            return str(payload[key])
    return f"Auth provider returned {response.status_code}"


async def _request(method: str, path: str, *, json: dict | None = None, params: dict | None = None, bearer: str | None = None, admin: bool = False) -> dict:
    settings = get_settings()
    api_key = settings.auth_service_role_key if admin else settings.auth_anon_key
    headers = {"apikey": api_key, "Authorization": f"Bearer {bearer or api_key}"}
    try:
        async with httpx.AsyncClient(timeout=settings.auth_timeout_seconds) as client:
            response = await client.request(
                method,
                f"{settings.auth_base_url}{path}",
                json=json,
                params=params,
                headers=headers,
            )
    except httpx.HTTPError as exc:
        raise AuthProviderError(f"Auth provider unreachable: {exc}", status_code=503) from exc
    if response.status_code >= 400:
        raise AuthProviderError(_error_message(response), status_code=response.status_code)
    if response.status_code == 204 or not response.content:
        return {}
    try:
        return response.json()
    except ValueError as exc:
        raise AuthProviderError("Auth provider returned an unreadable response", status_code=502) from exc


def session_payload(data: dict) -> dict:
    return {
        "accessToken": data.get("access_token"),
        "refreshToken": data.get("refresh_token"),
        "expiresAt": data.get("expires_at"),
        "user": data.get("user"),
    }


async def sign_in(email: str, password: str) -> dict:
    data = await _request("POST", "/token", params={"grant_type": "password"}, json={"email": email, "password": password})
    return session_payload(data)


async def refresh_session(refresh_token: str) -> dict:
    data = await _request("POST", "/token", params={"grant_type": "refresh_token"}, json={"refresh_token": refresh_token})
    return session_payload(data)


async def get_user(access_token: str) -> dict:
    return await _request("GET", "/user", bearer=access_token)


async def create_user(email: str, password: str) -> dict:
    return await _request(
        "POST",
        "/admin/users",
        json={"email": email, "password": password, "email_confirm": True, "user_metadata": {}},
        admin=True,
    )


async def delete_user(auth_user_id: str) -> None:
    await _request("DELETE", f"/admin/users/{auth_user_id}", admin=True)


async def sign_out(refresh_token: str) -> None:
    """Revoke the session behind ``refresh_token``. Never raises."""
    try:
        session = await refresh_session(refresh_token)
    except AuthProviderError as exc:
        logger.info("Refresh token already invalid at logout: %s", exc.message)
        return
    try:
        await _request("POST", "/logout", bearer=session["accessToken"])
    except AuthProviderError as exc:
        logger.warning("Failed to revoke session at auth provider: %s", exc.message)
