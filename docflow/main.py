"""Main FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docflow.api.v1.router import api_router
from docflow.config import settings
from docflow.core.exceptions import DocflowError
from docflow.core.metrics import MetricsMiddleware, snapshot
from docflow.core.rate_limiter import RateLimitMiddleware
from docflow.db.mongodb import close_mongodb, init_mongodb
from docflow.db.postgres import close_postgres, init_postgres
from docflow.db.redis import close_redis, init_redis
from docflow.services.generation import GenerationConfig, GenerationService

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    logger.info("Starting up Docflow API...")
    await init_postgres()
    await init_mongodb()
    await init_redis()
    logger.info(
        "All database connections established, text generation via %s",
        app.state.generation_service.config.provider.value,
    )

    yield

    # Shutdown
    logger.info("Shutting down Docflow API...")
    await app.state.generation_service.close()
    await close_postgres()
    await close_mongodb()
    await close_redis()
    logger.info("All database connections closed")


async def docflow_error_handler(request: Request, exc: DocflowError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors like any other: 400, not 422."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"detail": message, "errors": errors})


def create_app(generation_config: GenerationConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Docflow API",
        description="Document automation backend: templated documents, approval workflow and text generation",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # The provider is resolved once here, not per request
    app.state.generation_service = GenerationService(
        generation_config or GenerationConfig.from_settings(settings)
    )

    # CORS Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate Limiting Middleware
    app.add_middleware(RateLimitMiddleware)

    # Metrics Middleware
    app.add_middleware(MetricsMiddleware)

    app.add_exception_handler(DocflowError, docflow_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Include API routers
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy", "version": "1.0.0"}

    @app.get("/metrics", tags=["Observability"])
    async def get_metrics() -> dict:
        """Request and text-generation counters from Redis."""
        return await snapshot()

    return app


app = create_app()
