from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from backend import repositories
from backend.auth import ensure_self, require_owned_habit, require_profile
from backend.schemas import HabitCreate, HabitPatch

router = APIRouter(prefix="/api")


async def _ensure_visible_category(category_id: str, profile: dict) -> None:
    """Habits may only use global categories or the caller's own."""
    category = await repositories.get_category(category_id)
    if not category or category.get("user_id") not in (None, profile["id"]):
        raise HTTPException(status_code=400, detail="Unknown category")


@router.get("/users/{user_id}/habits")
async def list_habits(user_id: str, profile: dict = Depends(require_profile)):
    ensure_self(profile, user_id)
    return await repositories.list_habits(user_id)


@router.post("/users/{user_id}/habits", status_code=201)
async def create_habit(user_id: str, payload: HabitCreate, profile: dict = Depends(require_profile)):
    ensure_self(profile, user_id)
    values = payload.model_dump()
    if payload.template_id:
        template = await repositories.get_template(payload.template_id)
        if not template:
            raise HTTPException(status_code=400, detail="Unknown habit template")
        values["name"] = values.get("name") or template["name"]
        values["description"] = values.get("description") or template.get("description")
        values["category_id"] = values.get("category_id") or template.get("category_id")
    elif not payload.category_id:
        raise HTTPException(status_code=400, detail="Category is required for custom habits")
    if values.get("category_id"):
        await _ensure_visible_category(values["category_id"], profile)
    try:
        return await repositories.create_habit(user_id, values)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/user-habits/{habit_id}")
async def get_habit(habit_id: str, profile: dict = Depends(require_profile)):
    return await require_owned_habit(habit_id, profile)


@router.patch("/user-habits/{habit_id}")
async def update_habit(habit_id: str, payload: HabitPatch, profile: dict = Depends(require_profile)):
    await require_owned_habit(habit_id, profile)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("category_id"):
        await _ensure_visible_category(changes["category_id"], profile)
    try:
        return await repositories.update_habit(habit_id, changes)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.patch("/user-habits/{habit_id}/archive")
async def archive_habit(habit_id: str, profile: dict = Depends(require_profile)):
    await require_owned_habit(habit_id, profile)
    return await repositories.archive_habit(habit_id)


@router.delete("/user-habits/{habit_id}")
async def delete_habit(habit_id: str, profile: dict = Depends(require_profile)):
    await require_owned_habit(habit_id, profile)
    await repositories.delete_habit(habit_id)
    return {"ok": True}
