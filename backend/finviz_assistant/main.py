"""
FastAPI application entry point for the financial visualization assistant.
Following Factor 11/12: Triggerable & Stateless design.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from . import __version__
from .agent import build_pipeline
from .agent.llm_client import DashScopeClient, OfflineGenerator, TextGenerator
from .api.chat import router as chat_router
from .api.dependencies.rate_limit import limiter
from .api.health import router as health_router
from .core.config import Settings, get_settings
from .core.exceptions import AppError, RateLimitError
from .database.factory import create_session_store
from .services.chat_service import ChatService

# Set the root logger level to INFO so we can see detailed logs
logging.basicConfig(level=logging.INFO)

logger = structlog.get_logger()


def create_text_generator(settings: Settings) -> TextGenerator:
    """DashScope client when configured, otherwise a generator that always fails over."""
    if not settings.llm_configured:
        logger.warning(
            "DASHSCOPE_API_KEY not set - all turns will use fallback behaviour"
        )
        return OfflineGenerator("DashScope API key not configured")

    try:
        return DashScopeClient(settings)
    except Exception as e:
        logger.warning(
            "Failed to initialize DashScope client - using fallback behaviour",
            error=str(e),
            error_type=type(e).__name__,
        )
        return OfflineGenerator(f"DashScope client unavailable: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan management for the session store and agent."""
    settings = get_settings()

    logger.info(
        "Starting financial visualization assistant",
        environment=settings.environment,
        session_backend=settings.session_backend,
    )

    store = create_session_store(settings)

    try:
        await store.load()

        llm = create_text_generator(settings)
        pipeline = build_pipeline(llm, settings)

        # Store in app state for dependency injection
        app.state.session_store = store
        app.state.chat_service = ChatService(store, pipeline)

        logger.info("Session store and agent initialized")

        yield

    finally:
        await store.close()
        logger.info("Session store closed")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Financial Visualization Assistant API",
        description="Conversational assistant producing table, chart and list data",
        version=__version__,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    # Security middleware - only in production
    if settings.is_production:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=settings.allowed_hosts,
        )

    # CORS middleware for frontend communication
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    # Rate limiting - SlowAPI integration
    app.state.limiter = limiter
    # Only add middleware in non-test environments (middleware breaks FastAPI TestClient)
    if settings.environment != "test":
        app.add_middleware(SlowAPIMiddleware)

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        """Return 429 with a Retry-After hint."""
        error = RateLimitError(f"Rate limit exceeded: {exc.detail}")
        logger.warning("Rate limit exceeded", path=request.url.path, limit=exc.detail)
        return JSONResponse(
            status_code=error.status_code,
            content={"detail": error.message, "error_type": error.error_type},
            headers={"Retry-After": str(60)},
        )

    # Global exception handler for custom app errors
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        """
        Handle all custom AppError exceptions with proper HTTP status codes.

        Missing session ids become 400, unknown sessions on delete 404, and
        failed turns 500, each with a machine-readable error_type.
        """
        error_dict = exc.to_dict()

        # Log error with full context
        logger.error(
            "Application error occurred",
            path=request.url.path,
            method=request.method,
            **error_dict,
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error_type": exc.error_type},
        )

    # Include routers
    app.include_router(health_router, prefix="/api", tags=["health"])
    app.include_router(chat_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint for basic connectivity check."""
        return {
            "message": "Financial Visualization Assistant API",
            "version": __version__,
            "environment": settings.environment,
        }

    return app


# Create app instance
app = create_app()

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "finviz_assistant.main:app",
        host="0.0.0.0",  # nosec B104 - Required for Docker container
        port=8000,
        reload=settings.is_development,
        log_config=None,  # Use structlog configuration
    )
