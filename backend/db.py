from __future__ import annotations

import logging
from urllib.parse import urlparse, urlunparse, parse_qsl, urlencode

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine

from backend.settings import get_settings

logger = logging.getLogger(__name__)

_ASYNC_SCHEMES = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
    "postgresql+psycopg2://": "postgresql+asyncpg://",
}


def normalize_database_url(database_url: str) -> str:
    """Rewrite hosted Postgres URLs (Supabase, Neon) for the asyncpg driver."""
    url = str(database_url or "").strip()
    if not url:
        return url
    for prefix, replacement in _ASYNC_SCHEMES.items():
        if url.startswith(prefix):
            url = replacement + url[len(prefix) :]
            break
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    clean = []
    ssl_requested = False
    for key, value in parse_qsl(parsed.query, keep_blank_values=True):
        # asyncpg rejects libpq-only options.
        if key == "sslmode":
            ssl_requested = value != "disable"
            continue
        if key in {"channel_binding", "ssl", "pgbouncer"}:
            continue
        clean.append((key, value))
    if ssl_requested:
        clean.append(("ssl", "true"))
    return urlunparse(parsed._replace(query=urlencode(clean)))


def _is_remote(db_url: str) -> bool:
    host = urlparse(db_url).hostname or ""
    return bool(host) and host not in {"localhost", "127.0.0.1"}


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker | None = None


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        settings = get_settings()
        db_url = normalize_database_url(settings.database_url)
        engine_kwargs = {"pool_pre_ping": True, "pool_size": settings.db_pool_size, "max_overflow": 10}
        if _is_remote(db_url):
            engine_kwargs["connect_args"] = {"ssl": True}
        logger.info("Connecting to database host %s", urlparse(db_url).hostname or "local")
        _engine = create_async_engine(db_url, **engine_kwargs)
    return _engine


def get_sessionmaker() -> async_sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory
