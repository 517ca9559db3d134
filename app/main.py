import logging

from fastapi import FastAPI
from contextlib import asynccontextmanager
from app.api.routes import router
from app.cache import db as cache_db
from app.core.logging import configure_logging

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Initialize resources on startup, cleanup on shutdown.
    """
    # Startup
    configure_logging()
    logger.info("Initializing Link Metadata Service...")
    cache_db.init_db()
    purged = cache_db.purge_expired()
    logger.info("Cache initialized, %d expired entries purged", purged)

    yield

    # Shutdown
    logger.info("Shutting down Link Metadata Service...")

app = FastAPI(
    title="Link Metadata Service",
    description="API for extracting link preview metadata (title, image, description) from web pages",
    version="1.0.0",
    lifespan=lifespan
)

# Include API routes
app.include_router(router)

@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "service": "Link Metadata Service",
        "version": "1.0.0",
        "endpoints": {
            "link": "GET /link?url=...",
            "health": "GET /health",
            "cache_stats": "GET /cache/stats"
        }
    }
