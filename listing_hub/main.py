"""FastAPI application factory and startup configuration.

Routers are protected with `dependencies=[RequireApiKey]` instead of a global
middleware so /health and /docs stay public.
"""
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from listing_hub.config import settings
from listing_hub.core.exceptions import ConfigurationError, SourceUnavailable
from listing_hub.core.logging import setup_logging, get_logger
from listing_hub.api.v1.listings import router as listings_router
from listing_hub.api.v1.currency import router as currency_router
from listing_hub.api.deps import RequireApiKey
from listing_hub.api.responses import fail, ok

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown events."""
    setup_logging()
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)

    if not settings.api_key:
        logger.warning(
            "API_KEY not configured — endpoints are unprotected. "
            "Set API_KEY in .env before going to production."
        )

    if settings.default_currency.upper() not in settings.currency_rates:
        raise ConfigurationError(
            f"default_currency '{settings.default_currency}' has no entry in currency_rates"
        )

    yield

    logger.info("Shutting down %s", settings.app_name)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Listing Hub API — aggregated, filtered and mapped property listings for agent pages.",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def add_trace_id(request: Request, call_next):
        request.state.trace_id = str(uuid4())
        response = await call_next(request)
        response.headers["X-Trace-Id"] = request.state.trace_id
        return response

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        trace_id = getattr(request.state, "trace_id", None)
        logger.exception("Unhandled exception [trace_id=%s]", trace_id, exc_info=exc)
        return fail(500, "Internal error", request, errors=["Internal server error"])

    @application.exception_handler(SourceUnavailable)
    async def source_unavailable_handler(request: Request, exc: SourceUnavailable):
        errors = [f.message for f in exc.failures] or [exc.message]
        return fail(503, exc.message, request, errors=errors)

    @application.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        return fail(400, exc.message, request)

    _auth = [RequireApiKey]

    application.include_router(listings_router, prefix="/api/v1/agents", tags=["listings"], dependencies=_auth)
    application.include_router(currency_router, prefix="/api/v1/currency", tags=["currency"], dependencies=_auth)

    @application.get("/health", tags=["system"])
    async def health_check(request: Request):
        from sqlalchemy import text
        from listing_hub.database import async_session_factory

        db_status = "ok"
        try:
            async with async_session_factory() as session:
                await session.execute(text("SELECT 1"))
        except Exception as e:
            db_status = f"error: {str(e)}"

        return ok(
            {
                "status": "healthy" if db_status == "ok" else "unhealthy",
                "version": settings.app_version,
                "database": db_status,
            },
            "Health check completed",
            request,
        )

    return application


app = create_app()
