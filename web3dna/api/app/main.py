"""Main FastAPI application for the Web3DNA API."""

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
import structlog

from web3dna.alerts.fanout import AlertFanout
from web3dna.alerts.subscribers import SubscriberHub
from web3dna.api.app.routers import alerts, dna, health, signatures
from web3dna.api.config.settings import APISettings
from web3dna.core.exceptions import DuplicateFraudIdError, Web3DNAError
from web3dna.database.registry import FraudRegistry, InMemoryFraudRegistry
from web3dna.database.sql_registry import SqlFraudRegistry
from web3dna.utils.logging import setup_logging
from web3dna.utils.metrics import metrics

logger = structlog.get_logger(__name__)


def build_registry(settings: APISettings) -> FraudRegistry:
    """Persistent registry when a database is configured, in-memory otherwise."""
    if not settings.database_url:
        logger.warning("No database configured, using in-memory fraud registry")
        return InMemoryFraudRegistry()

    registry = SqlFraudRegistry(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )
    registry.create_tables()
    return registry


def error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": type(exc).__name__,
                "message": str(exc),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        }
    )


def create_app(settings: Optional[APISettings] = None,
               registry: Optional[FraudRegistry] = None,
               http_client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    """Create and configure FastAPI application."""

    settings = settings or APISettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan management."""
        setup_logging(settings)
        logger.info("Starting Web3DNA API")

        hub = SubscriberHub()
        app.state.settings = settings
        app.state.registry = registry if registry is not None else build_registry(settings)
        app.state.hub = hub
        app.state.fanout = AlertFanout(settings, hub=hub, client=http_client)
        app.state.startup_time = datetime.now(timezone.utc)

        logger.info("Web3DNA API started",
                   mattermost_enabled=settings.chat_webhook_enabled,
                   admin_webhook_enabled=settings.admin_webhook_enabled)

        yield

        logger.info("Shutting down Web3DNA API")
        await app.state.fanout.close()
        logger.info("Web3DNA API shutdown complete")

    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Request logging middleware."""
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error("Request failed",
                        method=request.method,
                        url=str(request.url),
                        error=str(e),
                        process_time=time.time() - start_time)
            raise

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        if settings.access_log:
            logger.info("Request completed",
                       method=request.method,
                       url=str(request.url),
                       status_code=response.status_code,
                       process_time=process_time)

        if settings.enable_metrics:
            metrics.request_count.labels(
                method=request.method,
                endpoint=request.url.path,
                status=response.status_code
            ).inc()
            metrics.request_duration.labels(
                method=request.method,
                endpoint=request.url.path
            ).observe(process_time)

        return response

    # Include routers
    app.include_router(dna.router, prefix="/api/v1/dna", tags=["dna"])
    app.include_router(signatures.router, prefix="/api/v1/fraud-signatures", tags=["signatures"])
    app.include_router(alerts.router, prefix="/api/v1/alerts", tags=["alerts"])
    app.include_router(health.router, tags=["health"])
    app.add_api_websocket_route(settings.alerts_ws_path, alerts.alert_stream)

    if settings.enable_metrics:
        @app.get("/metrics", include_in_schema=False)
        async def get_metrics():
            """Prometheus metrics endpoint."""
            return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.exception_handler(DuplicateFraudIdError)
    async def duplicate_fraud_id_handler(request: Request, exc: DuplicateFraudIdError):
        """Explicit fraud id already registered."""
        logger.warning("Rejected duplicate fraud id", fraud_id=exc.fraud_id, url=str(request.url))
        return error_response(409, exc)

    @app.exception_handler(Web3DNAError)
    async def web3dna_exception_handler(request: Request, exc: Web3DNAError):
        """Invalid identity/credential input."""
        logger.warning("Rejected input", error=str(exc), url=str(request.url))
        return error_response(422, exc)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = APISettings()

    uvicorn.run(
        "web3dna.api.app.main:app",
        host=settings.host,
        port=settings.port,
        workers=settings.workers if not settings.debug else 1,
        reload=settings.debug,
        access_log=settings.access_log,
        log_level=settings.log_level.lower()
    )
