from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError

from backend.db import dispose_engine
from backend.db_init import init_db
from backend.routes import auth, entries, profiles, quests, leads


def _db_error_payload(exc: DBAPIError) -> dict:
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return {"detail": str(orig or exc), "code": code}


def create_app() -> FastAPI:
    logging.basicConfig(
        level=os.getenv("BACKEND_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    app = FastAPI(title="Deltajournal API", version="0.1.0")

    app.include_router(auth.router)
    app.include_router(entries.router)
    app.include_router(profiles.router)
    app.include_router(quests.router)
    app.include_router(leads.router)

    @app.on_event("startup")
    async def _startup():
        await init_db()

    @app.on_event("shutdown")
    async def _shutdown():
        await dispose_engine()

    # Driver text and SQLSTATE go back verbatim so clients can spot schema problems.
    @app.exception_handler(DBAPIError)
    async def _database_exception_handler(request: Request, exc: DBAPIError):
        logging.getLogger("backend").error("Database error on %s %s: %s", request.method, request.url.path, exc.orig)
        return JSONResponse(status_code=500, content=_db_error_payload(exc))

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logging.getLogger("backend").exception("Unhandled exception: %s", exc)
        return JSONResponse(status_code=500, content={"detail": "Internal error"})

    @app.get("/health")
    async def health():
        return {"ok": True}

    return app


app = create_app()
