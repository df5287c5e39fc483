"""
Lookout FastAPI Application Entry Point.

This module initializes the FastAPI application with:
- Structured logging and OpenTelemetry tracer provider
- The process-wide observation registry (handlers registered once, here)
- Observed services
- Request ID injection and per-request observation middleware
- Router mounting
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from apps.core_api.middleware import ObservationMiddleware, RequestIDMiddleware
from apps.core_api.routers import health, metrics, users
from apps.core_api.services.user_service import UserService
from apps.core_api.telemetry import build_observation_registry, build_observed_aspect
from lookout_config.settings import Settings
from lookout_obs.logging import get_logger, setup_logging
from lookout_obs.tracing import setup_tracing

# Initialize settings
settings = Settings()

# Setup logging
setup_logging(settings)

# Setup OpenTelemetry tracer provider
setup_tracing(settings)

logger = get_logger(__name__)

# Registration completes before the first request is served
observation_registry = build_observation_registry(settings)
observed_aspect = build_observed_aspect(observation_registry)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Logs startup/shutdown; the registry and services are created at import
    time so they exist even when the lifespan is not run.
    """
    logger.info(
        "lookout_api_starting",
        environment=settings.ENVIRONMENT,
        handlers=[type(h).__name__ for h in observation_registry.handlers],
        observed_url_patterns=settings.observed_url_patterns,
    )

    yield

    logger.info("lookout_api_shutdown")


# Initialize FastAPI application
app = FastAPI(
    title="Lookout API",
    description="Observation-context propagation demo service",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.state.observation_registry = observation_registry
app.state.user_service = observed_aspect.apply(
    UserService(max_latency_ms=settings.USER_SERVICE_MAX_LATENCY_MS)
)

# ============================================================================
# MIDDLEWARE
# ============================================================================

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.API_CORS_ORIGINS.split(",") if settings.API_CORS_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

# Per-request observation (runs inside RequestIDMiddleware)
app.add_middleware(
    ObservationMiddleware,
    registry=observation_registry,
    url_patterns=settings.observed_url_patterns,
)

# Request ID middleware (added last so it wraps the observation middleware)
app.add_middleware(RequestIDMiddleware)

# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Global exception handler for unhandled exceptions.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        error=str(exc),
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred.",
        },
    )


# ============================================================================
# ROUTERS
# ============================================================================

app.include_router(users.router, prefix="", tags=["users"])

# Health and metrics
app.include_router(health.router, prefix="", tags=["health"])
app.include_router(metrics.router, prefix="", tags=["metrics"])


# ============================================================================
# ROOT ENDPOINT
# ============================================================================


@app.get("/", tags=["root"])
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "name": "Lookout API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/healthz",
        "metrics": "/metrics",
        "endpoints": {
            "user_name": "GET /user/{user_id}",
        },
    }


# ============================================================================
# DEVELOPMENT HELPERS
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "apps.core_api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True,
        log_level="info",
    )
