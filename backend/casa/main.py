"""Infiniti Casa — FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from casa.api.v1.admin import router as admin_router
from casa.api.v1.auth import router as auth_router
from casa.api.v1.bookings import router as bookings_router
from casa.api.v1.newsletter import router as newsletter_router
from casa.api.v1.payments import router as payments_router
from casa.api.v1.properties import router as properties_router
from casa.api.v1.suggestions import router as suggestions_router
from casa.api.v1.users import router as users_router
from casa.api.v1.webhooks import router as webhooks_router
from casa.config import settings
from casa.exceptions import CasaError

# Configure root logger so all casa.* loggers output to stderr (captured by Docker).
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    logger.info(
        "Starting %s %s (%s), gateways: %s",
        settings.app_name,
        settings.app_version,
        settings.environment,
        settings.payment_gateway_status(),
    )
    missing = settings.missing_settings()
    if missing:
        logger.warning("Not configured: %s", ", ".join(missing))
    yield
    # Shutdown: dispose engine connections
    from casa.database import engine

    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Booking backend for boutique stays in Mumbai.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CasaError)
async def casa_error_handler(request: Request, exc: CasaError) -> JSONResponse:
    """Render service-layer errors the same way as ``HTTPException``."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)


# Routers
app.include_router(auth_router)
app.include_router(properties_router)
app.include_router(bookings_router)
app.include_router(payments_router)
app.include_router(users_router)
app.include_router(newsletter_router)
app.include_router(suggestions_router)
app.include_router(admin_router)
app.include_router(webhooks_router)

# Uploaded property images
app.mount(settings.media_url, StaticFiles(directory=settings.media_root, check_dir=False), name="media")


@app.get("/health", tags=["health"])
async def health_check() -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "environment": settings.environment,
        "payments": settings.payment_gateway_status(),
        "whatsapp": settings.whatsapp_configured,
    }


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
