"""
Map session API routes.
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from api.database import sessions_db
from domain.models import PlacePrediction
from services.geolocation import ReportedPositionProvider
from services.map_session import MapSession
from services.map_surface import InMemoryMapSurface
from services.places_client import get_default_places_client
from services.saved_places import get_default_saved_place_store

router = APIRouter()
logger = logging.getLogger(__name__)


class LatLngModel(BaseModel):
    lat: float
    lng: float


class SessionCreate(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None


class PredictionSelect(BaseModel):
    place_id: str
    description: str = ""
    main_text: Optional[str] = None
    secondary_text: Optional[str] = None


class MapClick(BaseModel):
    place_id: Optional[str] = None


class PredictionResponse(BaseModel):
    place_id: str
    description: str
    main_text: Optional[str] = None
    secondary_text: Optional[str] = None


class PlaceCardResponse(BaseModel):
    place_id: str
    title: str
    icon: str
    address: Optional[str] = None
    rating_label: Optional[str] = None
    rating_count: Optional[int] = None
    open_label: Optional[str] = None
    open_now: Optional[bool] = None
    phone: Optional[str] = None
    phone_uri: Optional[str] = None
    website: Optional[str] = None
    map_url: Optional[str] = None
    photo_url: Optional[str] = None
    icon_url: Optional[str] = None
    icon_background: Optional[str] = None
    weekly_hours: List[str] = []
    action: str
    action_label: str


class MarkerResponse(BaseModel):
    handle_id: str
    lat: float
    lng: float
    kind: str
    place_id: Optional[str] = None


class SessionResponse(BaseModel):
    session_id: str
    center: LatLngModel
    my_location: Optional[LatLngModel] = None
    place_id: Optional[str] = None
    details_visible: bool
    card: Optional[PlaceCardResponse] = None
    markers: List[MarkerResponse]


def session_to_response(session: MapSession) -> SessionResponse:
    """Convert a MapSession to API response."""
    return SessionResponse(**session.snapshot())


def _get_session(session_id: str) -> MapSession:
    session = sessions_db.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(data: Optional[SessionCreate] = None):
    """Open a map session, optionally seeded with the client's position."""
    data = data or SessionCreate()
    session = MapSession(
        places=get_default_places_client(),
        saved=get_default_saved_place_store(),
        geolocation=ReportedPositionProvider(data.lat, data.lng),
    )
    session.start()
    sessions_db[session.session_id] = session
    return session_to_response(session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str):
    return session_to_response(_get_session(session_id))


@router.delete("/{session_id}", status_code=204)
async def end_session(session_id: str):
    session = _get_session(session_id)
    session.end()
    sessions_db.pop(session_id, None)


@router.get("/{session_id}/predictions", response_model=List[PredictionResponse])
async def search_predictions(session_id: str, q: str = ""):
    """Autocomplete predictions for the search box."""
    session = _get_session(session_id)
    predictions = await session.search(q)
    return [PredictionResponse(**p.to_dict()) for p in predictions]


@router.post("/{session_id}/select", response_model=SessionResponse)
async def select_prediction(session_id: str, data: PredictionSelect):
    """Search selection."""
    session = _get_session(session_id)
    prediction = PlacePrediction(
        place_id=data.place_id,
        description=data.description,
        main_text=data.main_text,
        secondary_text=data.secondary_text,
    )
    await session.select_prediction(prediction)
    return session_to_response(session)


@router.post("/{session_id}/map-click", response_model=SessionResponse)
async def click_map(session_id: str, data: MapClick):
    """Click on a POI (place_id set) or on empty map (place_id omitted)."""
    session = _get_session(session_id)
    await session.click_map(data.place_id)
    return session_to_response(session)


@router.post("/{session_id}/markers/{handle_id}/click", response_model=SessionResponse)
async def click_marker(session_id: str, handle_id: str):
    session = _get_session(session_id)
    await session.click_marker(handle_id)
    return session_to_response(session)


@router.post("/{session_id}/close", response_model=SessionResponse)
async def close_card(session_id: str):
    session = _get_session(session_id)
    session.close()
    return session_to_response(session)


@router.post("/{session_id}/save", response_model=SessionResponse)
async def save_place(session_id: str):
    session = _get_session(session_id)
    if not session.save_selected():
        logger.info("Save ignored or failed for session %s", session_id)
    return session_to_response(session)


@router.post("/{session_id}/delete", response_model=SessionResponse)
async def delete_place(session_id: str):
    session = _get_session(session_id)
    if not session.delete_selected():
        logger.info("Delete ignored or failed for session %s", session_id)
    return session_to_response(session)


@router.post("/{session_id}/remount", response_model=SessionResponse)
async def remount_map(session_id: str):
    """The client recreated its map; recreate every marker on a fresh surface."""
    session = _get_session(session_id)
    old_surface = session.markers.surface
    session.replace_surface(InMemoryMapSurface())
    if isinstance(old_surface, InMemoryMapSurface):
        old_surface.destroy()
    return session_to_response(session)
