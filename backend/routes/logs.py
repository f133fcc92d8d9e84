from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from backend import repositories
from backend.auth import ensure_self, require_owned_habit, require_owned_log, require_profile
from backend.schemas import LogCreate, LogPatch

router = APIRouter(prefix="/api")


@router.get("/user-habits/{habit_id}/logs")
async def list_habit_logs(habit_id: str, profile: dict = Depends(require_profile)):
    await require_owned_habit(habit_id, profile)
    return await repositories.list_habit_logs(habit_id)


@router.get("/user-habits/{habit_id}/logs/today")
async def list_today_logs(habit_id: str, day: Optional[date] = Query(None, alias="date"), profile: dict = Depends(require_profile)):
    await require_owned_habit(habit_id, profile)
    return await repositories.list_logs_for_day(habit_id, day.isoformat() if day else None)


@router.post("/user-habits/{habit_id}/logs", status_code=201)
async def create_log(habit_id: str, payload: LogCreate, profile: dict = Depends(require_profile)):
    await require_owned_habit(habit_id, profile)
    return await repositories.create_log(habit_id, payload.model_dump())


@router.patch("/habit-logs/{log_id}")
async def update_log(log_id: str, payload: LogPatch, profile: dict = Depends(require_profile)):
    await require_owned_log(log_id, profile)
    return await repositories.update_log(log_id, payload.model_dump(exclude_unset=True))


@router.delete("/habit-logs/{log_id}")
async def delete_log(log_id: str, profile: dict = Depends(require_profile)):
    await require_owned_log(log_id, profile)
    await repositories.delete_log(log_id)
    return {"ok": True}


@router.get("/users/{user_id}/logs/range")
async def list_logs_for_range(
    user_id: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    profile: dict = Depends(require_profile),
):
    if start_date is None or end_date is None:
        raise HTTPException(
            status_code=400,
            detail="start_date and end_date query parameters are required (YYYY-MM-DD format)",
        )
    ensure_self(profile, user_id)
    return await repositories.list_logs_for_range(user_id, start_date.isoformat(), end_date.isoformat())
