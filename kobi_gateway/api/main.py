"""FastAPI application factory"""

from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from kobi_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from kobi_gateway.api.v1 import score, offers
from kobi_gateway.infrastructure.observability.logging import setup_logging
from kobi_gateway.services.pipeline import ScoringPipeline
from kobi_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app(pipeline_factory: Callable[[], ScoringPipeline] = ScoringPipeline.from_settings) -> FastAPI:
    """Create and configure FastAPI application"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # One pipeline per process: shared cache and rate-limit state
        app.state.pipeline = pipeline_factory()
        try:
            yield
        finally:
            await app.state.pipeline.close()

    app = FastAPI(
        title="KOBI Credit Gateway",
        description="Small-business credit scoring and lender matching service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {
            "status": "ok",
            "service": settings.service_name,
            "cache": app.state.pipeline.cache.stats(),
        }

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(score.router, prefix="/v1", tags=["scores"])
    app.include_router(offers.router, prefix="/v1", tags=["offers"])

    return app


app = create_app()
