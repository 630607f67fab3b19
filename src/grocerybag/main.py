"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from grocerybag.config import get_settings
from grocerybag.ingest.scrapers import get_available_scrapers, resolve_run_mode
from grocerybag.logging_config import configure_logging, get_logger
from grocerybag.routers import inventory_router

settings = get_settings()

# Configure logging on module load
configure_logging(log_level=settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Starting Grocerybag API")
    logger.info(
        f"Scrape run mode: {resolve_run_mode(settings).value}; "
        f"retailers: {', '.join(get_available_scrapers())}"
    )

    yield

    logger.info("Shutting down Grocerybag API")


app = FastAPI(
    title="Grocerybag API",
    description="Live grocery inventory from nearby retailers",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware; the API is read-only and cookie-free
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# Include routers
app.include_router(inventory_router)


@app.get("/health")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "ok", "service": "grocerybag-api"}


@app.get("/")
async def root() -> dict:
    """Root endpoint with API information."""
    return {
        "name": "Grocerybag API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }
