"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from loan_servicing.api.middleware import RequestIDMiddleware, MetricsMiddleware
from loan_servicing.api.v1 import clients, closures, loans, portfolio, simulations, tracking
from loan_servicing.infrastructure.cache import TTLCache
from loan_servicing.infrastructure.observability.logging import setup_logging
from loan_servicing.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Loan Servicing Gateway",
        description="Loan simulation, origination, collections, borrower tracking and daily closures",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Per-app cache for borrower tracking lookups
    app.state.tracking_cache = TTLCache(settings.tracking_cache_ttl_seconds)

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(simulations.router, prefix="/v1", tags=["simulations"])
    app.include_router(clients.router, prefix="/v1", tags=["clients"])
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(tracking.router, prefix="/v1", tags=["tracking"])
    app.include_router(portfolio.router, prefix="/v1", tags=["portfolio"])
    app.include_router(closures.router, prefix="/v1", tags=["daily-closures"])

    return app


app = create_app()
