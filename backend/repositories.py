from __future__ import annotations

from datetime import date, datetime, timezone
from uuid import uuid4

from sqlalchemy import text as sql_text

from backend.db import get_sessionmaker
from backend.db_init import CATEGORIES_TABLE, HABITS_TABLE, LOGS_TABLE, TEMPLATES_TABLE, USERS_TABLE

USER_FIELDS = ["username", "phone", "preferred_contact_method"]
HABIT_FIELDS = ["name", "description", "category_id", "times_per_day", "is_active"]
LOG_FIELDS = ["date", "time_completed", "notes"]

HABIT_COLUMNS = "id, user_id, template_id, name, description, category_id, times_per_day, is_active, create_date, deleted_at, updated_at"


def _new_id() -> str:
    return uuid4().hex


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _date_key(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:10]
    value_str = str(value).strip()
    return value_str[:10] or None


def _normalize_habit_row(row) -> dict:
    payload = dict(row)
    payload["is_active"] = bool(payload.get("is_active"))
    payload["times_per_day"] = max(1, int(payload.get("times_per_day") or 1))
    return payload


def _normalize_template_row(row) -> dict:
    payload = dict(row)
    category_name = payload.pop("category_name", None)
    category_user = payload.pop("category_user_id", None)
    if payload.get("category_id") and category_name is not None:
        payload["category"] = {"id": payload["category_id"], "name": category_name, "user_id": category_user}
    else:
        payload["category"] = None
    return payload


def _pick(patch: dict, allowed: list[str]) -> dict:
    return {key: patch[key] for key in allowed if key in patch}


# users


async def get_user_by_auth_id(auth_user_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT * FROM {USERS_TABLE} WHERE auth_user_id = :auth_user_id"),
            {"auth_user_id": auth_user_id},
        )).mappings().fetchone()
    return dict(row) if row else None


async def get_user(user_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT * FROM {USERS_TABLE} WHERE id = :id"),
            {"id": user_id},
        )).mappings().fetchone()
    return dict(row) if row else None


async def create_user(auth_user_id: str, payload: dict) -> dict:
    record = {
        "id": _new_id(),
        "auth_user_id": auth_user_id,
        "username": payload.get("username"),
        "phone": payload.get("phone"),
        "preferred_contact_method": payload.get("preferred_contact_method"),
        "created_at": _now_iso(),
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {USERS_TABLE}
                (id, auth_user_id, username, phone, preferred_contact_method, created_at)
                VALUES (:id, :auth_user_id, :username, :phone, :preferred_contact_method, :created_at)
                """
            ),
            record,
        )
        await session.commit()
    return record


async def update_user(user_id: str, patch: dict) -> dict | None:
    values = _pick(patch, USER_FIELDS)
    if values:
        assignments = ", ".join(f"{key} = :{key}" for key in values)
        session_factory = get_sessionmaker()
        async with session_factory() as session:
            await session.execute(
                sql_text(f"UPDATE {USERS_TABLE} SET {assignments} WHERE id = :id"),
                {**values, "id": user_id},
            )
            await session.commit()
    return await get_user(user_id)


async def delete_user(user_id: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(sql_text(f"DELETE FROM {USERS_TABLE} WHERE id = :id"), {"id": user_id})
        await session.commit()


# categories


async def list_categories_for_user(user_id: str) -> list[dict]:
    """Global categories (no owner) first, then the user's own, each by name."""
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT id, name, user_id FROM {CATEGORIES_TABLE}
                WHERE user_id IS NULL OR user_id = :user_id
                ORDER BY CASE WHEN user_id IS NULL THEN 0 ELSE 1 END, name
                """
            ),
            {"user_id": user_id},
        )).mappings().all()
    return [dict(row) for row in rows]


async def get_category(category_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT id, name, user_id FROM {CATEGORIES_TABLE} WHERE id = :id"),
            {"id": category_id},
        )).mappings().fetchone()
    return dict(row) if row else None


async def create_category(name: str, user_id: str | None) -> dict:
    clean = " ".join(str(name or "").split())
    if not clean:
        raise ValueError("Category name is required")
    record = {"id": _new_id(), "name": clean, "user_id": user_id, "created_at": _now_iso()}
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"INSERT INTO {CATEGORIES_TABLE} (id, name, user_id, created_at) VALUES (:id, :name, :user_id, :created_at)"
            ),
            record,
        )
        await session.commit()
    return {"id": record["id"], "name": clean, "user_id": user_id}


async def update_category(category_id: str, name: str) -> dict | None:
    clean = " ".join(str(name or "").split())
    if not clean:
        raise ValueError("Category name is required")
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"UPDATE {CATEGORIES_TABLE} SET name = :name WHERE id = :id"),
            {"name": clean, "id": category_id},
        )
        await session.commit()
    return await get_category(category_id)


async def delete_category(category_id: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(sql_text(f"DELETE FROM {CATEGORIES_TABLE} WHERE id = :id"), {"id": category_id})
        await session.commit()


# templates

_TEMPLATE_SELECT = f"""
    SELECT t.id, t.name, t.description, t.category_id, t.times_per_day,
           c.name AS category_name, c.user_id AS category_user_id
    FROM {TEMPLATES_TABLE} t
    LEFT JOIN {CATEGORIES_TABLE} c ON c.id = t.category_id
"""


async def list_templates() -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(sql_text(f"{_TEMPLATE_SELECT} ORDER BY t.name"))).mappings().all()
    return [_normalize_template_row(row) for row in rows]


async def get_template(template_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"{_TEMPLATE_SELECT} WHERE t.id = :id"),
            {"id": template_id},
        )).mappings().fetchone()
    return _normalize_template_row(row) if row else None


# habits


async def list_habits(user_id: str) -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {HABIT_COLUMNS} FROM {HABITS_TABLE}
                WHERE user_id = :user_id AND is_active = 1 AND deleted_at IS NULL
                ORDER BY create_date, id
                """
            ),
            {"user_id": user_id},
        )).mappings().all()
    return [_normalize_habit_row(row) for row in rows]


async def get_habit(habit_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT {HABIT_COLUMNS} FROM {HABITS_TABLE} WHERE id = :id AND deleted_at IS NULL"),
            {"id": habit_id},
        )).mappings().fetchone()
    return _normalize_habit_row(row) if row else None


async def create_habit(user_id: str, payload: dict) -> dict:
    name = " ".join(str(payload.get("name") or "").split())
    if not name:
        raise ValueError("Name is required")
    times_per_day = int(payload.get("times_per_day") or 1)
    if times_per_day < 1:
        raise ValueError("times_per_day must be at least 1")
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_id": user_id,
        "template_id": payload.get("template_id"),
        "name": name,
        "description": payload.get("description"),
        "category_id": payload.get("category_id"),
        "times_per_day": times_per_day,
        "is_active": 1,
        "create_date": _date_key(payload.get("create_date")) or date.today().isoformat(),
        "deleted_at": None,
        "updated_at": now,
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {HABITS_TABLE} ({HABIT_COLUMNS})
                VALUES (:id, :user_id, :template_id, :name, :description, :category_id,
                        :times_per_day, :is_active, :create_date, :deleted_at, :updated_at)
                """
            ),
            record,
        )
        await session.commit()
    return _normalize_habit_row(record)


async def update_habit(habit_id: str, patch: dict) -> dict | None:
    values = _pick(patch, HABIT_FIELDS)
    if "name" in values and not " ".join(str(values["name"] or "").split()):
        raise ValueError("Name is required")
    if "times_per_day" in values and int(values["times_per_day"]) < 1:
        raise ValueError("times_per_day must be at least 1")
    if "is_active" in values:
        values["is_active"] = int(bool(values["is_active"]))
    values["updated_at"] = _now_iso()
    assignments = ", ".join(f"{key} = :{key}" for key in values)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"UPDATE {HABITS_TABLE} SET {assignments} WHERE id = :id AND deleted_at IS NULL"),
            {**values, "id": habit_id},
        )
        await session.commit()
    return await get_habit(habit_id)


async def archive_habit(habit_id: str) -> dict | None:
    return await update_habit(habit_id, {"is_active": False})


async def delete_habit(habit_id: str) -> None:
    """Soft delete: the row and its logs stay for history."""
    now = _now_iso()
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"UPDATE {HABITS_TABLE} SET deleted_at = :now, is_active = 0, updated_at = :now WHERE id = :id"),
            {"now": now, "id": habit_id},
        )
        await session.commit()


# logs


async def list_habit_logs(habit_id: str) -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT id, user_habit_id, date, time_completed, notes FROM {LOGS_TABLE}
                WHERE user_habit_id = :habit_id
                ORDER BY date DESC, time_completed DESC
                """
            ),
            {"habit_id": habit_id},
        )).mappings().all()
    return [dict(row) for row in rows]


async def list_logs_for_day(habit_id: str, day: str | None = None) -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT id, user_habit_id, date, time_completed, notes FROM {LOGS_TABLE}
                WHERE user_habit_id = :habit_id AND date = :day
                ORDER BY time_completed DESC
                """
            ),
            {"habit_id": habit_id, "day": _date_key(day) or date.today().isoformat()},
        )).mappings().all()
    return [dict(row) for row in rows]


async def get_log(log_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT id, user_habit_id, date, time_completed, notes FROM {LOGS_TABLE} WHERE id = :id"),
            {"id": log_id},
        )).mappings().fetchone()
    return dict(row) if row else None


async def create_log(habit_id: str, payload: dict) -> dict:
    record = {
        "id": _new_id(),
        "user_habit_id": habit_id,
        "date": _date_key(payload.get("date")) or date.today().isoformat(),
        "time_completed": payload.get("time_completed") or _now_iso(),
        "notes": payload.get("notes"),
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {LOGS_TABLE} (id, user_habit_id, date, time_completed, notes)
                VALUES (:id, :user_habit_id, :date, :time_completed, :notes)
                """
            ),
            record,
        )
        await session.commit()
    return record


async def update_log(log_id: str, patch: dict) -> dict | None:
    values = _pick(patch, LOG_FIELDS)
    if "date" in values:
        values["date"] = _date_key(values["date"])
    if values:
        assignments = ", ".join(f"{key} = :{key}" for key in values)
        session_factory = get_sessionmaker()
        async with session_factory() as session:
            await session.execute(
                sql_text(f"UPDATE {LOGS_TABLE} SET {assignments} WHERE id = :id"),
                {**values, "id": log_id},
            )
            await session.commit()
    return await get_log(log_id)


async def delete_log(log_id: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(sql_text(f"DELETE FROM {LOGS_TABLE} WHERE id = :id"), {"id": log_id})
        await session.commit()


async def list_logs_for_range(user_id: str, start: str, end: str) -> list[dict]:
    """All logs of the user's habits (archived ones included) with start <= date <= end."""
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT l.id, l.user_habit_id, l.date, l.time_completed, l.notes
                FROM {LOGS_TABLE} l
                JOIN {HABITS_TABLE} h ON h.id = l.user_habit_id
                WHERE h.user_id = :user_id AND l.date >= :start AND l.date <= :end
                ORDER BY l.date, l.time_completed
                """
            ),
            {"user_id": user_id, "start": _date_key(start), "end": _date_key(end)},
        )).mappings().all()
    return [dict(row) for row in rows]
