from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from backend import repositories
from backend.auth import require_auth_user

router = APIRouter(prefix="/api/habit-templates")


@router.get("")
async def list_templates(_auth_user: dict = Depends(require_auth_user)):
    return await repositories.list_templates()


@router.get("/{template_id}")
async def get_template(template_id: str, _auth_user: dict = Depends(require_auth_user)):
    template = await repositories.get_template(template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")
    return template
