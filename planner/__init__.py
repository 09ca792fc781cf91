"""Application wiring for the Ticket Planner service.

This module brings together configuration, database setup, the JSON API
routers and error handling. Importing it creates the tables for a fresh
database, tops up indexes on an existing one and returns a ready FastAPI app.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.errors import http_exception_handler, validation_exception_handler
from .db.migrate import run_migrations
from .db.session import Base, engine
from .middlewares import RequestIdMiddleware

# Importing the models registers them with the metadata. Without this step
# ``Base.metadata.create_all`` would not know about our tables.
from . import models as _models  # noqa: F401

# ---------- App init ----------
app = FastAPI(title=settings.APP_NAME)

# ---------- DB init/migrations ----------
# ``create_all`` builds missing tables; ``run_migrations`` adds indexes that
# ``create_all`` leaves off tables it did not create.
Base.metadata.create_all(bind=engine)
run_migrations(engine)

# ---------- Middleware ----------
app.add_middleware(RequestIdMiddleware)

# ---------- Routers ----------
# Every API router carries the X-API-Key dependency itself.
from .routers import api_projects as api_projects_router  # noqa: E402

app.include_router(api_projects_router.router)

from .routers import api_tickets as api_tickets_router  # noqa: E402

app.include_router(api_tickets_router.router)

from .routers import api_assignees as api_assignees_router  # noqa: E402

app.include_router(api_assignees_router.router)

from .routers import api_dashboard as api_dashboard_router  # noqa: E402

app.include_router(api_dashboard_router.router)

# ---------- Exception handling ----------
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)


__all__ = ["app"]
