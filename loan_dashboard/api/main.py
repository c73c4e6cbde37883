"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from loan_dashboard.api.middleware import RequestIDMiddleware, MetricsMiddleware
from loan_dashboard.api.v1 import loans, npl, status
from loan_dashboard.infrastructure.database.session import (
    create_db_engine,
    create_session_factory,
    verify_connection,
)
from loan_dashboard.infrastructure.observability.logging import setup_logging
from loan_dashboard.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the connection pool on start-up and drain it on shutdown"""
    engine = create_db_engine(settings)
    if settings.verify_db_on_startup:
        verify_connection(engine)
    app.state.session_factory = create_session_factory(engine)
    try:
        yield
    finally:
        logging.info("Shutting down, disposing connection pool")
        engine.dispose()


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Loan Dashboard API",
        description="Read-only loan performance and NPL reporting for the dashboard",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Liveness only, never touches the database
    @app.get("/health")
    @app.get("/api/health")
    def health_check():
        return {
            "status": "ok",
            "service": settings.service_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(loans.router, prefix="/api", tags=["loan-data"])
    app.include_router(npl.router, prefix="/api", tags=["npl"])
    app.include_router(status.router, prefix="/api", tags=["status"])

    return app


app = create_app()


def run() -> None:
    """Console entry point"""
    uvicorn.run("loan_dashboard.api.main:app", host="0.0.0.0", port=settings.port)
