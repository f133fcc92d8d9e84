from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from backend import repositories
from backend.auth import require_profile
from backend.schemas import CategoryCreate, CategoryPatch

router = APIRouter(prefix="/api/categories")


async def _owned_category(category_id: str, profile: dict) -> dict:
    category = await repositories.get_category(category_id)
    if not category or category.get("user_id") not in (None, profile["id"]):
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.get("")
async def list_categories(profile: dict = Depends(require_profile)):
    return await repositories.list_categories_for_user(profile["id"])


@router.get("/me")
async def list_my_categories(profile: dict = Depends(require_profile)):
    return await repositories.list_categories_for_user(profile["id"])


@router.post("", status_code=201)
async def create_category(payload: CategoryCreate, profile: dict = Depends(require_profile)):
    if payload.user_id and payload.user_id != profile["id"]:
        raise HTTPException(status_code=403, detail="Not allowed to create categories for another user")
    try:
        return await repositories.create_category(payload.name, profile["id"])
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/{category_id}")
async def get_category(category_id: str, profile: dict = Depends(require_profile)):
    return await _owned_category(category_id, profile)


@router.patch("/{category_id}")
async def update_category(category_id: str, payload: CategoryPatch, profile: dict = Depends(require_profile)):
    category = await _owned_category(category_id, profile)
    if category.get("user_id") is None:
        raise HTTPException(status_code=403, detail="Global categories cannot be modified")
    try:
        return await repositories.update_category(category_id, payload.name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.delete("/{category_id}")
async def delete_category(category_id: str, profile: dict = Depends(require_profile)):
    category = await _owned_category(category_id, profile)
    if category.get("user_id") is None:
        raise HTTPException(status_code=403, detail="Global categories cannot be deleted")
    await repositories.delete_category(category_id)
    return {"ok": True}
