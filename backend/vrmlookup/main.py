"""
VRM Lookup FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vrmlookup.api.routes.lookup import router as lookup_router
from vrmlookup.config import settings
from vrmlookup.providers import get_all_providers

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info("Starting VRM Lookup API...")
    for provider in get_all_providers():
        if provider.is_configured:
            logger.info(f"Provider {provider.source_name} configured")
        else:
            logger.warning(f"Provider {provider.source_name} has no credentials (lookups will skip it)")

    yield

    logger.info("Shutting down VRM Lookup API...")


# Create FastAPI app
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Any origin may call the lookup from a browser
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With"],
)

app.include_router(lookup_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "VRM Lookup API",
        "version": settings.api_version,
        "endpoints": {
            "lookup": "/lookup?vrm=AB12CDE",
            "lookup_debug": "/lookup?vrm=AB12CDE&debug=1",
            "docs": "/docs",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
