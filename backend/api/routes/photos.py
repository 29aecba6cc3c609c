"""
Place photo proxy.

Card photo URLs point here so the Places API key stays on the server.
"""
import logging
from fastapi import APIRouter, HTTPException, Query, Response

from domain.errors import DetailFetchFailed
from services.places_client import get_default_places_client
from settings import settings

router = APIRouter()
logger = logging.getLogger(__name__)

# Largest width the Places photo endpoint serves.
MAX_PHOTO_WIDTH = 1600


@router.get("")
async def get_photo(
    reference: str = Query(..., min_length=1),
    maxwidth: int = Query(settings.PHOTO_MAX_WIDTH, ge=1, le=MAX_PHOTO_WIDTH),
):
    """Stream one place photo at the requested width."""
    try:
        content, media_type = await get_default_places_client().fetch_photo(reference, maxwidth)
    except DetailFetchFailed as exc:
        logger.warning("Photo %s unavailable: %s", reference, exc)
        raise HTTPException(status_code=502, detail="Photo unavailable")
    return Response(
        content=content,
        media_type=media_type,
        headers={"Cache-Control": "public, max-age=86400"},
    )
