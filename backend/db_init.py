from __future__ import annotations

from sqlalchemy import text as sql_text

from backend.db import get_engine


USERS_TABLE = "users"
CATEGORIES_TABLE = "categories"
TEMPLATES_TABLE = "habit_templates"
HABITS_TABLE = "user_habits"
LOGS_TABLE = "habit_logs"


async def init_db():
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {USERS_TABLE} (
                    id TEXT PRIMARY KEY,
                    auth_user_id TEXT NOT NULL UNIQUE,
                    username TEXT,
                    phone TEXT,
                    preferred_contact_method TEXT,
                    created_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {CATEGORIES_TABLE} (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    user_id TEXT,
                    created_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {TEMPLATES_TABLE} (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    description TEXT,
                    category_id TEXT,
                    times_per_day INTEGER DEFAULT 1
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {HABITS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    template_id TEXT,
                    name TEXT NOT NULL,
                    description TEXT,
                    category_id TEXT,
                    times_per_day INTEGER NOT NULL DEFAULT 1 CHECK (times_per_day >= 1),
                    is_active INTEGER DEFAULT 1,
                    create_date TEXT NOT NULL,
                    deleted_at TEXT,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {LOGS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_habit_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    time_completed TEXT,
                    notes TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(f"CREATE INDEX IF NOT EXISTS idx_{HABITS_TABLE}_user ON {HABITS_TABLE} (user_id)")
        )
        await conn.execute(
            sql_text(f"CREATE INDEX IF NOT EXISTS idx_{LOGS_TABLE}_habit_date ON {LOGS_TABLE} (user_habit_id, date)")
        )
        await conn.execute(
            sql_text(f"CREATE INDEX IF NOT EXISTS idx_{CATEGORIES_TABLE}_user ON {CATEGORIES_TABLE} (user_id)")
        )
