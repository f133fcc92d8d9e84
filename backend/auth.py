from __future__ import annotations

from fastapi import Depends, Header, HTTPException

from backend import repositories
from backend.services import auth_provider


async def require_auth_user(authorization: str | None = Header(default=None)) -> dict:
    if not authorization:
        raise HTTPException(status_code=401, detail="No authorization header provided")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="No token provided")
    try:
        user = await auth_provider.get_user(token.strip())
    except auth_provider.AuthProviderError as exc:
        raise HTTPException(status_code=401, detail="Invalid or expired token") from exc
    if not user or not user.get("id"):
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return user


async def require_profile(auth_user: dict = Depends(require_auth_user)) -> dict:
    profile = await repositories.get_user_by_auth_id(auth_user["id"])
    if not profile:
        raise HTTPException(
            status_code=404,
            detail="User profile not found. Please contact support or try logging out and back in.",
        )
    return profile


def ensure_self(profile: dict, user_id: str) -> None:
    if str(profile.get("id")) != str(user_id):
        raise HTTPException(status_code=403, detail="Not allowed to access another user's data")


async def require_owned_habit(habit_id: str, profile: dict) -> dict:
    habit = await repositories.get_habit(habit_id)
    if not habit or str(habit.get("user_id")) != str(profile.get("id")):
        raise HTTPException(status_code=404, detail="Habit not found")
    return habit


async def require_owned_log(log_id: str, profile: dict) -> dict:
    log = await repositories.get_log(log_id)
    if not log:
        raise HTTPException(status_code=404, detail="Log not found")
    await require_owned_habit(log["user_habit_id"], profile)
    return log
