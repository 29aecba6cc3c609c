"""
Map session: the single owner of interaction state.

A MapSession is created when a client opens the map and ended when it
leaves. It owns the selection, the map centre and the marker manager, and
holds a reference to the shared saved-place store. Every user interaction
(search selection, POI click, marker click, empty-map click, close, save,
delete) is a method here; each one leaves the markers reconciled with the
selection and the saved list.

Interactions run on one event loop. The only suspension point is the
detail fetch, and overlapping fetches are ordered by the fetch token.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from domain.models import LatLng, Place, PlacePrediction, SelectionState
from services.detail_fetch import DetailFetchCoordinator
from services.geolocation import GeolocationProvider, default_center, resolve_initial_center
from services.map_surface import InMemoryMapSurface, MapSurface
from services.marker_manager import (
    KIND_MY_LOCATION,
    KIND_SAVED,
    KIND_SELECTED,
    MY_LOCATION_KEY,
    MarkerManager,
    MarkerSpec,
)
from services.place_card import build_place_card
from services.places_client import PlacesService
from services.saved_places import SavedPlaceStore
from settings import settings

logger = logging.getLogger(__name__)


class MapSession:
    def __init__(
        self,
        places: PlacesService,
        saved: SavedPlaceStore,
        surface: Optional[MapSurface] = None,
        geolocation: Optional[GeolocationProvider] = None,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.selection = SelectionState()
        self.center: LatLng = default_center()
        self.my_location: Optional[LatLng] = None
        self.ended = False
        self._places = places
        self._saved = saved
        self._geolocation = geolocation
        self._fetcher = DetailFetchCoordinator(places, photo_max_width=settings.PHOTO_MAX_WIDTH)
        self._markers = MarkerManager(surface or InMemoryMapSurface())

    @property
    def markers(self) -> MarkerManager:
        return self._markers

    @property
    def saved(self) -> SavedPlaceStore:
        return self._saved

    def start(self) -> None:
        """Seed the centre from geolocation (once) and draw saved places."""
        self.center, self.my_location = resolve_initial_center(self._geolocation)
        self.refresh_markers()
        logger.info(
            "Session %s started at %.5f,%.5f with %d saved places",
            self.session_id,
            self.center.lat,
            self.center.lng,
            len(self._saved),
        )

    def end(self) -> None:
        self._fetcher.supersede()
        self.selection.clear()
        self.selection.fetch_token = None
        self._markers.teardown()
        self.ended = True

    def refresh_markers(self) -> None:
        """Reconcile markers with my location, the saved list and the selection."""
        desired: Dict[str, MarkerSpec] = {}
        if self.my_location is not None:
            desired[MY_LOCATION_KEY] = MarkerSpec(self.my_location, KIND_MY_LOCATION, clickable=False)
        for marker in self._saved.all():
            desired[marker.id] = MarkerSpec(LatLng(marker.lat, marker.lng), KIND_SAVED)
        place = self.selection.place
        if place is not None and place.location is not None:
            desired[place.id] = MarkerSpec(place.location, KIND_SELECTED)
        self._markers.reconcile(desired)

    def replace_surface(self, surface: MapSurface) -> None:
        self._markers.replace_surface(surface)

    async def _select(self, raw_ref: Any, *, show_details: bool) -> Optional[Place]:
        token = self._fetcher.begin()
        self.selection.fetch_token = token
        resolution = await self._fetcher.resolve(raw_ref, token)
        if resolution.stale:
            return None
        if resolution.place is None:
            self.selection.clear()
        else:
            self.selection.place = resolution.place
            self.selection.details_visible = show_details
        self.refresh_markers()
        return resolution.place

    async def search(self, text: str) -> List[PlacePrediction]:
        return await self._places.search_predictions(text)

    async def select_prediction(self, prediction: PlacePrediction) -> Optional[Place]:
        """Search selection: the map recentres on the place; the card stays hidden."""
        place = await self._select(prediction, show_details=False)
        if place is not None and place.location is not None:
            self.center = place.location
        return place

    async def click_map(self, place_id: Optional[str]) -> Optional[Place]:
        """A POI click opens its card; a click on empty map closes the card."""
        if not place_id:
            self.close()
            return None
        return await self._select(place_id, show_details=True)

    async def click_marker(self, handle_id: str) -> Optional[Place]:
        owner = self._markers.owner_of(handle_id)
        if owner is None:
            logger.debug("Ignoring click on non-place or unknown marker %s", handle_id)
            return None
        return await self._select(owner, show_details=True)

    def close(self) -> None:
        self._fetcher.supersede()
        self.selection.clear()
        self.selection.fetch_token = None
        self.refresh_markers()

    def is_selected_saved(self) -> bool:
        place = self.selection.place
        return place is not None and self._saved.contains(place.id)

    def save_selected(self) -> bool:
        place = self.selection.place
        if place is None or place.location is None:
            return False
        ok = self._saved.add(place)
        self.refresh_markers()
        return ok

    def delete_selected(self) -> bool:
        """
        Delete the selected place from the saved list and close the card.

        If the storage write fails, nothing changes and False is returned.
        """
        place = self.selection.place
        if place is None:
            return False
        if self._saved.contains(place.id) and not self._saved.remove(place.id):
            return False
        self.close()
        return True

    def snapshot(self) -> Dict[str, Any]:
        self.refresh_markers()
        place = self.selection.place
        card = asdict(build_place_card(place, self.is_selected_saved())) if place else None
        markers = []
        for key in self._markers:
            handle = self._markers.handle_for(key)
            markers.append(
                {
                    "handle_id": handle.handle_id,
                    "lat": handle.position.lat,
                    "lng": handle.position.lng,
                    "kind": handle.kind,
                    "place_id": handle.owner_id,
                }
            )
        return {
            "session_id": self.session_id,
            "center": self.center.to_dict(),
            "my_location": self.my_location.to_dict() if self.my_location else None,
            "place_id": place.id if place else None,
            "details_visible": self.selection.details_visible,
            "card": card,
            "markers": markers,
        }
