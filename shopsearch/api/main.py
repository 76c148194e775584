"""
FastAPI Application Factory

Creates and configures FastAPI application
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shopsearch.api.error_handlers import register_exception_handlers
from shopsearch.api.response_middleware import SuccessEnvelopeMiddleware
from shopsearch.core.config import settings
from shopsearch.core.dependencies import ServiceContainer, build_services, get_services
from shopsearch.core.logging import configure_logging, get_logger, get_metrics_snapshot
from shopsearch.routers import config, products, search

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: configure logging, wire services (unless injected).
    Shutdown: close backend HTTP clients.

    The vector-store collection is created lazily on first use.
    """
    configure_logging()
    logger.info(
        "application_startup",
        environment=settings.environment,
        llm_provider=settings.llm_provider,
        vectorstore_type=settings.vectorstore_type,
    )
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services()

    yield

    logger.info("application_shutdown")
    await app.state.services.aclose()


def create_app(services: ServiceContainer | None = None) -> FastAPI:
    """
    Create FastAPI application

    Args:
        services: pre-built container (tests); built at startup when omitted

    Usage:
        app = create_app()
        uvicorn.run(app, host="0.0.0.0", port=8080)
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Natural-language product search over LLM-generated variants",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.services = services

    app.add_middleware(SuccessEnvelopeMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_hosts,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for module in (search, products, config):
        app.include_router(module.router, prefix=settings.api_prefix)

    register_exception_handlers(app)

    @app.get("/health", tags=["health"])
    async def health_check(container: ServiceContainer = Depends(get_services)) -> dict:
        return {
            "status": "ok",
            "app": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "vectorstore": container.vectorstore.state.value,
        }

    @app.get(f"{settings.api_prefix}/stats", tags=["health"])
    async def stats(container: ServiceContainer = Depends(get_services)) -> dict:
        return {
            "vectorstore": await container.vectorstore.stats(),
            "embedding_cache_size": container.embedder.cache_size,
            "config": {
                "llm_provider": settings.llm_provider,
                "chat_model": settings.chat_model,
                "embedding_model": settings.embedding_model,
                "vectorstore_type": settings.vectorstore_type,
                "search_max_results": settings.search_max_results,
                "variant_default_count": settings.variant_default_count,
            },
            "features": {
                "function_calling": settings.enable_function_calling,
                "search_suggestions": settings.enable_search_suggestions,
                "batch_import": settings.enable_batch_import,
                "variant_generation": settings.enable_variant_generation,
            },
            "metrics": get_metrics_snapshot(),
        }

    logger.info("fastapi_app_created", routes=len(app.routes))
    return app


# Application instance
app = create_app()
