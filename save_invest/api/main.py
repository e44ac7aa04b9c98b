"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from save_invest.api.middleware import RequestIDMiddleware, MetricsMiddleware
from save_invest.api.v1 import classify, expenses, savings, plan, vehicles
from save_invest.domain.classifier import OverrideTableRegistry
from save_invest.infrastructure.clients.market_data import MarketDataClient
from save_invest.infrastructure.database.models import Base
from save_invest.infrastructure.database.session import engine
from save_invest.infrastructure.observability.logging import setup_logging
from save_invest.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables before the first request is served"""
    Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="SaveToInvest Core",
        description="Expense classification, savings potential and investment planning service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Process-wide shared state
    app.state.override_tables = OverrideTableRegistry(refresh_seconds=settings.override_refresh_seconds)
    app.state.market_data = MarketDataClient()

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
    app.include_router(classify.router, prefix="/v1", tags=["classification"])
    app.include_router(expenses.router, prefix="/v1", tags=["expenses"])
    app.include_router(savings.router, prefix="/v1", tags=["savings"])
    app.include_router(plan.router, prefix="/v1", tags=["plans"])
    app.include_router(vehicles.router, prefix="/v1", tags=["vehicles"])

    return app


app = create_app()
