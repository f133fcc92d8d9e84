from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.db_init import init_db
from backend.routes import categories, habits, logs, session, templates, users


def create_app() -> FastAPI:
    logging.basicConfig(
        level=os.getenv("BACKEND_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    app = FastAPI(title="Happy Habits API", version="0.1.0")

    app.include_router(session.router)
    app.include_router(users.router)
    app.include_router(templates.router)
    app.include_router(categories.router)
    app.include_router(habits.router)
    app.include_router(logs.router)

    @app.on_event("startup")
    async def _startup():
        await init_db()

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logging.getLogger("backend").exception("Unhandled exception on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Internal error"})

    @app.get("/health")
    async def health():
        return {"ok": True}

    return app


app = create_app()
