from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from sqlalchemy import text

from esg_api.core.config import settings
from esg_api.core.database import async_session_factory, close_db, init_db
from esg_api.core.errors import register_exception_handlers
from esg_api.middleware.security import (
    RequestBodySizeLimitMiddleware,
    SecurityHeadersMiddleware,
)

import esg_api.models  # noqa: F401  register all models at startup

from esg_api.auth.router import router as auth_router
from esg_api.modules.esg.router import router as esg_router
from esg_api.modules.reporting.router import router as reporting_router
from esg_api.core.sentry import init_sentry

# ── Sentry: must be initialised BEFORE the FastAPI app is created ────────────
init_sentry(settings.SENTRY_DSN, settings.SENTRY_ENVIRONMENT, settings.APP_VERSION)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    logger.info("Starting ESG API", env=settings.APP_ENV)
    if settings.DATABASE_AUTO_CREATE:
        await init_db()
    yield
    logger.info("Shutting down ESG API")
    await close_db()


_is_prod = settings.APP_ENV == "production"

app = FastAPI(
    title="ESG Questionnaire API",
    description="Collects ESG questionnaire responses and exports them as PDF or Excel.",
    version="0.1.0",
    docs_url=None if _is_prod else "/docs",
    redoc_url=None if _is_prod else "/redoc",
    openapi_url=None if _is_prod else "/openapi.json",
    lifespan=lifespan,
)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
    expose_headers=["Content-Disposition"],
)
# Security middleware (added last = outermost = first to see requests, last to touch responses)
app.add_middleware(
    RequestBodySizeLimitMiddleware,  # type: ignore[arg-type]
    max_bytes=settings.MAX_REQUEST_BODY_BYTES,
)
app.add_middleware(
    SecurityHeadersMiddleware,  # type: ignore[arg-type]
    is_production=_is_prod,
)


# ── X-API-Version response header ────────────────────────────────────────────


@app.middleware("http")
async def add_version_header(request: Request, call_next) -> Response:
    response = await call_next(request)
    response.headers["X-API-Version"] = "v1"
    return response


# ── Health check ─────────────────────────────────────────────────────────────


@app.get("/health")
async def health_check() -> dict:
    """Probe the database."""
    checks: dict[str, dict] = {}

    try:
        async with async_session_factory() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = {"status": "healthy"}
    except Exception as exc:  # noqa: BLE001
        logger.warning("health_check_failed", check="database", error=str(exc))
        checks["database"] = {"status": "unhealthy", "error": type(exc).__name__}

    overall = (
        "healthy"
        if all(c["status"] == "healthy" for c in checks.values())
        else "degraded"
    )
    return {"status": overall, "service": "esg-api", "checks": checks}


app.include_router(auth_router)
app.include_router(esg_router)
app.include_router(reporting_router)
