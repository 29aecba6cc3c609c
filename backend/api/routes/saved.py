"""
Saved places API routes.
"""
from typing import List, Optional
from fastapi import APIRouter
from pydantic import BaseModel

from domain.models import SavedMarker
from services.saved_places import get_default_saved_place_store

router = APIRouter()


class SavedMarkerResponse(BaseModel):
    id: str
    lat: float
    lng: float
    name: str
    address: Optional[str] = None
    categories: List[str] = []


def marker_to_response(marker: SavedMarker) -> SavedMarkerResponse:
    return SavedMarkerResponse(**marker.to_dict())


@router.get("", response_model=List[SavedMarkerResponse])
async def list_saved():
    """Saved places in the order they were saved."""
    return [marker_to_response(m) for m in get_default_saved_place_store().all()]
