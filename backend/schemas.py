from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field


class LoginPayload(BaseModel):
    email: str
    password: str


class RefreshPayload(BaseModel):
    refreshToken: str


class LogoutPayload(BaseModel):
    refreshToken: Optional[str] = None


class UserCreate(BaseModel):
    username: str
    password: str
    email: str
    phone: Optional[str] = None
    preferred_contact_method: Optional[str] = None


class UserPatch(BaseModel):
    username: Optional[str] = None
    phone: Optional[str] = None
    preferred_contact_method: Optional[str] = None


class CategoryCreate(BaseModel):
    name: str
    user_id: Optional[str] = None


class CategoryPatch(BaseModel):
    name: Optional[str] = None


class HabitCreate(BaseModel):
    template_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[str] = None
    times_per_day: int = Field(1, ge=1)
    create_date: Optional[dt.date] = None


class HabitPatch(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[str] = None
    times_per_day: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None


class LogCreate(BaseModel):
    date: Optional[dt.date] = None
    time_completed: Optional[str] = None
    notes: Optional[str] = None


class LogPatch(BaseModel):
    date: Optional[dt.date] = None
    time_completed: Optional[str] = None
    notes: Optional[str] = None
