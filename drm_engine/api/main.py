"""
FastAPI Application — Document Access Control Engine.

Architecture:
  - PostgreSQL (prod) / SQLite (dev) for documents, policies, sessions and views
  - ip-api.com geolocation with bounded timeout (degrades to "no location")
  - Policy evaluation with an atomic, quota-guarded view log
"""

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from drm_engine import __version__
from drm_engine.api.dependencies import AccessServices, get_services
from drm_engine.api.routes.access import router as access_router
from drm_engine.api.routes.owner import router as owner_router
from drm_engine.config.settings import Settings, get_settings
from drm_engine.core.errors import (
    DeviceLimitReached,
    InvalidPolicyError,
    NotFoundError,
    PersistenceError,
    ViewQuotaExceeded,
)
from drm_engine.infrastructure.db.database import init_db

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Document Access Control Engine",
    description="Policy-based admission control for protected documents: sessions, quotas, "
                "time/geo windows, watermark and protection directives, revocation.",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Startup ──
@app.on_event("startup")
async def startup():
    """Configure logging and create tables."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()
    logger.info(f"Access control engine started (env={settings.env})")


app.include_router(access_router, prefix="/api/v1", tags=["Access"])
app.include_router(owner_router, prefix="/api/v1", tags=["Owner"])


# ── Error mapping ──
@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ViewQuotaExceeded)
async def quota_handler(request: Request, exc: ViewQuotaExceeded):
    return JSONResponse(
        status_code=409,
        content={
            "detail": "maximum view limit reached",
            "reason_code": "VIEW_LIMIT_REACHED",
            "remaining_views": 0,
        },
    )


@app.exception_handler(DeviceLimitReached)
async def device_limit_handler(request: Request, exc: DeviceLimitReached):
    return JSONResponse(status_code=403, content={"detail": "maximum number of devices reached"})


@app.exception_handler(InvalidPolicyError)
async def invalid_policy_handler(request: Request, exc: InvalidPolicyError):
    return JSONResponse(status_code=422, content={"detail": exc.problems})


@app.exception_handler(PersistenceError)
async def persistence_handler(request: Request, exc: PersistenceError):
    return JSONResponse(status_code=503, content={"detail": "storage unavailable"})


# ── Health ──
@app.get("/health")
def health(
    services: AccessServices = Depends(get_services),
    settings: Settings = Depends(get_settings),
):
    return {
        "status": "ok",
        "version": __version__,
        "database": services.database.kind,
        "geo_provider": settings.geo_provider,
    }
