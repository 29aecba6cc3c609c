"""
Lightweight Places client for the Google Places web service.

Exposes the two operations the map session depends on: autocomplete
predictions and place details. Calls go through a shared requests session;
the async wrappers move the blocking call to a worker thread so the event
loop keeps serving other interactions while a lookup is in flight.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple
from urllib.parse import urlencode

import requests

from domain.errors import DetailFetchFailed
from domain.models import PlacePrediction
from services.place_normalizer import resolve_place_id
from settings import settings

# Field set requested for every detail lookup.
DETAIL_FIELDS: tuple = (
    "name",
    "formatted_address",
    "rating",
    "user_ratings_total",
    "price_level",
    "opening_hours",
    "photos",
    "formatted_phone_number",
    "website",
    "url",
    "place_id",
    "geometry",
    "icon",
    "icon_background_color",
    "types",
)

_session = requests.Session()


class PlacesService(Protocol):
    async def search_predictions(self, text: str) -> List[PlacePrediction]:
        ...

    async def fetch_details(self, ref: Any, fields: Sequence[str] = DETAIL_FIELDS) -> Dict[str, Any]:
        ...

    def photo_url(self, reference: str, max_width: int) -> str:
        ...

    async def fetch_photo(self, reference: str, max_width: int) -> Tuple[bytes, str]:
        ...


def _parse_prediction(item: dict) -> Optional[PlacePrediction]:
    place_id = item.get("place_id")
    if not place_id:
        return None
    formatting = item.get("structured_formatting") or {}
    return PlacePrediction(
        place_id=str(place_id),
        description=str(item.get("description") or ""),
        main_text=formatting.get("main_text"),
        secondary_text=formatting.get("secondary_text"),
    )


class GooglePlacesClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        language: Optional[str] = None,
        timeout: Optional[float] = None,
        photo_proxy_path: Optional[str] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_MAPS_API_KEY
        self.base_url = (base_url or settings.PLACES_BASE_URL).rstrip("/")
        self.language = language or settings.PLACES_LANGUAGE
        self.timeout = timeout if timeout is not None else settings.PLACES_TIMEOUT_SECONDS
        self.photo_proxy_path = (photo_proxy_path or settings.PHOTO_PROXY_PATH).rstrip("/")
        self.logger = logging.getLogger(__name__)
        if not self.api_key:
            self.logger.warning(
                "GOOGLE_MAPS_API_KEY not set in environment; place lookups will fail."
            )

    def _get_json(self, endpoint: str, params: Dict[str, str]) -> dict:
        if not self.api_key:
            raise DetailFetchFailed("GOOGLE_MAPS_API_KEY is not configured")
        query = dict(params)
        query["key"] = self.api_key
        query["language"] = self.language
        try:
            resp = _session.get(
                f"{self.base_url}/{endpoint}/json",
                params=query,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise DetailFetchFailed(f"{endpoint} request failed: {exc}") from exc
        if not isinstance(data, dict):
            raise DetailFetchFailed(f"{endpoint} returned a non-object payload")
        return data

    def get_predictions(self, text: str) -> List[PlacePrediction]:
        data = self._get_json("autocomplete", {"input": text})
        status = data.get("status")
        if status == "ZERO_RESULTS":
            return []
        if status != "OK":
            raise DetailFetchFailed(f"autocomplete status={status}")
        predictions: List[PlacePrediction] = []
        for item in data.get("predictions") or []:
            if not isinstance(item, dict):
                continue
            prediction = _parse_prediction(item)
            if prediction is not None:
                predictions.append(prediction)
        return predictions

    def get_details(self, place_id: str, fields: Sequence[str] = DETAIL_FIELDS) -> Dict[str, Any]:
        data = self._get_json("details", {"place_id": place_id, "fields": ",".join(fields)})
        status = data.get("status")
        if status != "OK":
            raise DetailFetchFailed(f"details status={status} for place_id={place_id}")
        result = data.get("result")
        if not isinstance(result, dict):
            raise DetailFetchFailed(f"details result missing for place_id={place_id}")
        return result

    async def search_predictions(self, text: str) -> List[PlacePrediction]:
        if not text or not text.strip():
            return []
        try:
            predictions = await asyncio.to_thread(self.get_predictions, text.strip())
        except DetailFetchFailed as exc:
            self.logger.warning("Autocomplete failed for %r: %s", text, exc)
            return []
        self.logger.debug("GooglePlacesClient.search_predictions: %r got %d results", text, len(predictions))
        return predictions

    async def fetch_details(self, ref: Any, fields: Sequence[str] = DETAIL_FIELDS) -> Dict[str, Any]:
        place_id = resolve_place_id(ref, None)
        if not place_id:
            raise DetailFetchFailed(f"cannot derive a place id from {ref!r}")
        return await asyncio.to_thread(self.get_details, place_id, fields)

    def photo_url(self, reference: str, max_width: int) -> str:
        """Browser-facing photo URL. It points at the /photos proxy and never carries the key."""
        query = urlencode({"reference": reference, "maxwidth": str(max_width)})
        return f"{self.photo_proxy_path}?{query}"

    def get_photo(self, reference: str, max_width: int) -> Tuple[bytes, str]:
        """Download photo bytes and their content type from the Places photo endpoint."""
        if not self.api_key:
            raise DetailFetchFailed("GOOGLE_MAPS_API_KEY is not configured")
        try:
            resp = _session.get(
                f"{self.base_url}/photo",
                params={"maxwidth": str(max_width), "photo_reference": reference, "key": self.api_key},
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise DetailFetchFailed(f"photo request failed: {exc}") from exc
        content_type = resp.headers.get("Content-Type", "")
        if not content_type.startswith("image/"):
            raise DetailFetchFailed(f"photo endpoint returned {content_type or 'no content type'}")
        return resp.content, content_type

    async def fetch_photo(self, reference: str, max_width: int) -> Tuple[bytes, str]:
        return await asyncio.to_thread(self.get_photo, reference, max_width)


_default_places_client: Optional[GooglePlacesClient] = None


def get_default_places_client() -> GooglePlacesClient:
    global _default_places_client
    if _default_places_client is None:
        _default_places_client = GooglePlacesClient()
    return _default_places_client
