import sys
from pathlib import Path

import pytest

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from domain.errors import DetailFetchFailed, StorageReadFailed, StorageWriteFailed  # noqa: E402
from services.saved_places import SavedPlaceStore  # noqa: E402


CAFE_A = {
    "place_id": "p1",
    "name": "Cafe A",
    "formatted_address": "1 Sejong-daero, Seoul",
    "geometry": {"location": {"lat": 37.5, "lng": 127.0}},
    "types": ["cafe", "food", "point_of_interest"],
    "icon": "https://icons.test/cafe.png",
    "icon_background_color": "#FF9E67",
}

MUSEUM_B = {
    "place_id": "p2",
    "name": "Museum B",
    "formatted_address": "2 Jongno, Seoul",
    "geometry": {"location": {"lat": 37.57, "lng": 126.98}},
    "rating": 4.6,
    "user_ratings_total": 1200,
    "opening_hours": {"open_now": True, "weekday_text": ["Monday: Closed"]},
    "types": ["museum"],
}


class FakePlacesService:
    """Places service double. Lookups for ids in `gates` wait until the gate is set."""

    def __init__(self, details=None):
        self.details = dict(details or {})
        self.gates = {}
        self.calls = []
        self.predictions = []
        self.photos = {}

    async def search_predictions(self, text):
        if not text.strip():
            return []
        return list(self.predictions)

    async def fetch_details(self, ref, fields=()):
        place_id = ref if isinstance(ref, str) else ref.place_id
        self.calls.append(place_id)
        gate = self.gates.get(place_id)
        if gate is not None:
            await gate.wait()
        result = self.details.get(place_id)
        if result is None:
            raise DetailFetchFailed(f"no details for {place_id}")
        if isinstance(result, Exception):
            raise result
        return result

    def photo_url(self, reference, max_width):
        return f"https://photos.test/{reference}?w={max_width}"

    async def fetch_photo(self, reference, max_width):
        photo = self.photos.get(reference)
        if photo is None:
            raise DetailFetchFailed(f"no photo {reference}")
        return photo


class MemoryStorage:
    def __init__(self, initial=None):
        self.data = dict(initial or {})
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0

    def get(self, key):
        if self.fail_reads:
            raise StorageReadFailed("read refused")
        return self.data.get(key)

    def set(self, key, value):
        if self.fail_writes:
            raise StorageWriteFailed("write refused")
        self.data[key] = value
        self.writes += 1


SAVED_KEY = "test.savedMarkers"


@pytest.fixture
def places():
    return FakePlacesService({"p1": CAFE_A, "p2": MUSEUM_B})


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return SavedPlaceStore(storage, key=SAVED_KEY)
