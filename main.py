# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Home Cell Service
=================
Maintains the church's District → Zone → HomeCell hierarchy and the
assignment of members to home cells.

    District ─► Zone ─► HomeCell ◄─ Member.home_cell (by name)

Deleting a district or zone cascades to everything below it; home-cell
renames are propagated to member references in the same transaction.

Port: 8005
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from churchcells.controllers import (
    assignment_controller, district_controller, homecell_controller,
    member_controller, system_controller, zone_controller,
)
from churchcells.core.config import settings
from churchcells.core.database import engine, init_schema
from churchcells.core.dependencies import (
    get_assignment_service, get_hierarchy_repo, get_hierarchy_service,
)
from churchcells.core.logging import get_logger
from churchcells.middleware import MetricsMiddleware, RequestIDMiddleware
from churchcells.schemas import ErrorResponse

logger = get_logger("homecell-service")


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Create tables, seed default districts, prime gauges; dispose pool on shutdown."""
    try:
        init_schema(engine)
        get_hierarchy_repo().verify_connection()
        logger.info("Database connection verified")
        if settings.SEED_DEFAULT_DISTRICTS:
            get_hierarchy_service().seed_default_districts()
        get_hierarchy_service().refresh_gauges()
        get_assignment_service().refresh_gauges()
    except Exception as exc:
        logger.warning("Database initialisation FAILED — service will start but DB calls will fail: %s", exc)
    yield
    engine.dispose()
    logger.info("Database connection pool disposed — shutting down")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Home Cell Service",
    description="District → Zone → HomeCell hierarchy and member assignment.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    responses={
        422: {"model": ErrorResponse, "description": "Validation error"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)


# ── Global exception handler ─────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    req_id = getattr(request.state, "request_id", None)
    logger.exception("Unhandled exception", extra={"request_id": req_id})
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "detail": str(exc), "request_id": req_id},
    )


app.include_router(system_controller.router)
app.include_router(district_controller.router)
app.include_router(zone_controller.router)
app.include_router(homecell_controller.router)
app.include_router(assignment_controller.router)
app.include_router(member_controller.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.SERVICE_PORT)
