"""
FastAPI application for the shipment tracking service.

Exposes shipment lifecycle, analytics and travel-estimate endpoints.
"""

import os
from contextlib import asynccontextmanager
from datetime import datetime

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from shiptrack import __version__
from shiptrack.api import dependencies
from shiptrack.api.errors import register_exception_handlers
from shiptrack.api.routers import analytics, estimates, shipments
from shiptrack.common.config_loader import get_config
from shiptrack.common.logging_utils import get_logger, setup_logging
from shiptrack.common.timeutils import utc_now

logger = get_logger(__name__)

config = get_config()
ENVIRONMENT = config.environment
API_PREFIX = config.api.prefix.rstrip("/")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    setup_logging(
        service_name="shiptrack-api",
        log_level=config.log_level,
        use_json=ENVIRONMENT != "dev",
    )
    logger.info(f"Starting Shipment Tracking API in {ENVIRONMENT} environment")

    # Tests may wire their own store before the app starts
    owns_services = dependencies._store is None
    if owns_services:
        dependencies.init_services(config)
        logger.info("Shipment store initialized", backend=config.storage.backend)

    yield

    # Shutdown
    if owns_services:
        dependencies.shutdown_services()
    logger.info("Shipment Tracking API shutdown complete")


app = FastAPI(
    title="Shipment Tracking API",
    description="Dispatch, track, verify and analyze shipments",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if ENVIRONMENT == "dev" else None,
    redoc_url="/redoc" if ENVIRONMENT == "dev" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.api.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
    expose_headers=["ETag"],
)

register_exception_handlers(app)

app.include_router(shipments.router, prefix=f"{API_PREFIX}/shipments", tags=["Shipments"])
app.include_router(analytics.router, prefix=f"{API_PREFIX}/analytics", tags=["Analytics"])
app.include_router(estimates.router, prefix=API_PREFIX, tags=["Estimates"])


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    environment: str
    timestamp: datetime


class InfoResponse(BaseModel):
    """API info response."""
    name: str
    version: str
    environment: str


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint for load balancers."""
    return HealthResponse(
        status="healthy",
        environment=ENVIRONMENT,
        timestamp=utc_now(),
    )


@app.get("/", response_model=InfoResponse)
async def root():
    """API root endpoint."""
    return InfoResponse(
        name="Shipment Tracking API",
        version=__version__,
        environment=ENVIRONMENT,
    )


def run() -> None:
    uvicorn.run(
        "shiptrack.api.main:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 8080)),
        reload=ENVIRONMENT == "dev",
    )


if __name__ == "__main__":
    run()
