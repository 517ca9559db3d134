import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from app.schemas import CacheStats, LinkMetadata
from app.services.link_preview import LinkNotFoundError, LinkPreviewService, get_link_service
from app.cache import db as cache_db

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/link", response_model=LinkMetadata)
async def parse_link(
    url: str = Query(..., description="The URL to process"),
    service: LinkPreviewService = Depends(get_link_service),
):
    """
    Return preview metadata (title, image, description) for a URL.

    Results, including failures, are cached per URL for one day.
    """
    if not url.startswith(("http://", "https://")):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="URL must start with http:// or https://"
        )

    try:
        return await service.get_metadata(url)
    except LinkNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Not Found"
        )

@router.get("/cache/stats", response_model=CacheStats)
async def cache_statistics():
    """Get cache statistics for debugging"""
    try:
        return cache_db.get_stats()
    except Exception as e:
        logger.exception("Failed to read cache statistics")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to read cache statistics: {str(e)}"
        )

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "Link Metadata Service"}
