from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from backend.schemas import LoginPayload, LogoutPayload, RefreshPayload
from backend.services import auth_provider

router = APIRouter()
logger = logging.getLogger(__name__)


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


@router.post("/login")
async def login(payload: LoginPayload):
    if not payload.email.strip() or not payload.password:
        return _message(400, "Email and password are required")
    try:
        return await auth_provider.sign_in(payload.email.strip(), payload.password)
    except auth_provider.AuthProviderError as exc:
        if exc.status_code >= 500:
            logger.warning("Login failed upstream: %s", exc.message)
            return _message(503, "Authentication service unavailable")
        return _message(401, exc.message or "Invalid email or password")


@router.post("/refresh")
async def refresh(payload: RefreshPayload):
    if not payload.refreshToken:
        return _message(400, "Refresh token is required")
    try:
        return await auth_provider.refresh_session(payload.refreshToken)
    except auth_provider.AuthProviderError as exc:
        return _message(401, exc.message or "Invalid refresh token")


@router.post("/logout")
async def logout(payload: LogoutPayload):
    if payload.refreshToken:
        await auth_provider.sign_out(payload.refreshToken)
    return {"message": "Logged out"}
