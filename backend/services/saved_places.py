"""
Saved-place store.

Keeps the user's bookmarked places as an insertion-ordered mapping from
place id to SavedMarker, persisted as one JSON array under a single
storage key. Every mutation is written through to storage before it
returns; when the write fails the in-memory list is left as it was.
"""
from __future__ import annotations

import json
import logging
from typing import Dict, List, Optional, Union

from domain.errors import StorageReadFailed, StorageWriteFailed
from domain.models import Place, SavedMarker
from settings import settings
from storage.kv_storage import KeyValueStorage, SqlKeyValueStorage

logger = logging.getLogger(__name__)


class SavedPlaceStore:
    """
    Add/remove/contains over saved places.

    Ids are unique: adding a place that is already saved replaces its stored
    projection and keeps its position in the list.
    """

    def __init__(self, storage: KeyValueStorage, key: Optional[str] = None):
        self._storage = storage
        self._key = key or settings.SAVED_MARKERS_KEY
        self._markers: Dict[str, SavedMarker] = self._load()

    def _load(self) -> Dict[str, SavedMarker]:
        try:
            raw = self._storage.get(self._key)
        except StorageReadFailed as exc:
            logger.warning("Could not read saved places, starting empty: %s", exc)
            return {}
        if raw is None:
            return {}
        try:
            entries = json.loads(raw)
        except ValueError as exc:
            logger.warning("Saved places payload is not valid JSON, starting empty: %s", exc)
            return {}
        if not isinstance(entries, list):
            logger.warning("Saved places payload is not a list, starting empty")
            return {}

        markers: Dict[str, SavedMarker] = {}
        for index, entry in enumerate(entries):
            try:
                marker = SavedMarker.from_dict(entry)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed saved place #%d: %s", index, exc)
                continue
            if marker.id in markers:
                logger.warning("Skipping duplicate saved place id=%s", marker.id)
                continue
            markers[marker.id] = marker
        return markers

    def _commit(self, markers: Dict[str, SavedMarker]) -> bool:
        payload = json.dumps([m.to_dict() for m in markers.values()], ensure_ascii=False)
        try:
            self._storage.set(self._key, payload)
        except StorageWriteFailed as exc:
            logger.warning("Saved places write failed, keeping previous list: %s", exc)
            return False
        self._markers = markers
        return True

    def add(self, place: Union[Place, SavedMarker]) -> bool:
        """
        Save a place. Returns True once persisted, False if the write failed.

        Raises ValueError for a Place without a location.
        """
        marker = place if isinstance(place, SavedMarker) else SavedMarker.from_place(place)
        updated = dict(self._markers)
        updated[marker.id] = marker
        return self._commit(updated)

    def remove(self, place_id: str) -> bool:
        """Delete a saved place. Unknown ids are a no-op and return False."""
        if place_id not in self._markers:
            return False
        updated = {k: v for k, v in self._markers.items() if k != place_id}
        return self._commit(updated)

    def contains(self, place_id: str) -> bool:
        return place_id in self._markers

    def get(self, place_id: str) -> Optional[SavedMarker]:
        return self._markers.get(place_id)

    def all(self) -> List[SavedMarker]:
        return list(self._markers.values())

    def __len__(self) -> int:
        return len(self._markers)

    def __contains__(self, place_id: object) -> bool:
        return place_id in self._markers


_default_saved_place_store: Optional[SavedPlaceStore] = None


def get_default_saved_place_store() -> SavedPlaceStore:
    global _default_saved_place_store
    if _default_saved_place_store is None:
        _default_saved_place_store = SavedPlaceStore(SqlKeyValueStorage())
    return _default_saved_place_store
