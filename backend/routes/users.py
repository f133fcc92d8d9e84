from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from backend import repositories
from backend.auth import ensure_self, require_auth_user, require_profile
from backend.schemas import UserCreate, UserPatch
from backend.services import auth_provider

router = APIRouter(prefix="/api/users")
logger = logging.getLogger(__name__)


@router.post("", status_code=201)
async def register(payload: UserCreate):
    if not payload.email.strip() or not payload.password:
        return JSONResponse(status_code=400, content={"message": "Email and password are required"})
    try:
        auth_user = await auth_provider.create_user(payload.email.strip(), payload.password)
    except auth_provider.AuthProviderError as exc:
        return JSONResponse(status_code=400, content={"message": exc.message})
    profile_fields = payload.model_dump(include={"username", "phone", "preferred_contact_method"})
    await repositories.create_user(auth_user["id"], profile_fields)
    try:
        session = await auth_provider.sign_in(payload.email.strip(), payload.password)
    except auth_provider.AuthProviderError as exc:
        # Account exists; the client falls back to a normal login.
        logger.warning("Auto sign-in after registration failed: %s", exc.message)
        return {"message": "User registered successfully", "user": auth_user}
    return {"message": "User registered successfully", **session}


@router.get("/me")
async def get_me(auth_user: dict = Depends(require_auth_user)):
    profile = await repositories.get_user_by_auth_id(auth_user["id"])
    if not profile:
        raise HTTPException(
            status_code=404,
            detail="User profile not found. Please contact support or try logging out and back in.",
        )
    return profile


@router.get("/{user_id}")
async def get_user(user_id: str, profile: dict = Depends(require_profile)):
    ensure_self(profile, user_id)
    return profile


@router.patch("/{user_id}")
async def update_user(user_id: str, payload: UserPatch, profile: dict = Depends(require_profile)):
    ensure_self(profile, user_id)
    return await repositories.update_user(user_id, payload.model_dump(exclude_unset=True))


@router.delete("/{user_id}")
async def delete_user(user_id: str, profile: dict = Depends(require_profile)):
    ensure_self(profile, user_id)
    await repositories.delete_user(user_id)
    try:
        await auth_provider.delete_user(profile["auth_user_id"])
    except auth_provider.AuthProviderError as exc:
        logger.warning("Profile %s deleted but auth user removal failed: %s", user_id, exc.message)
    return {"ok": True}
