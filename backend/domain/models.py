"""
Core domain models for PinDiary.
These are framework-agnostic and can be used across all services.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional, Tuple


# Category membership test -> display icon. Order matters: first match wins.
CATEGORY_ICONS: Tuple[Tuple[FrozenSet[str], str], ...] = (
    (frozenset({"cafe", "bakery"}), "☕"),
    (frozenset({"bar", "night_club", "liquor_store"}), "🍺"),
    (frozenset({"restaurant", "food", "meal_takeaway", "meal_delivery"}), "🍽"),
    (frozenset({"lodging"}), "🏨"),
    (frozenset({"museum", "art_gallery", "library"}), "🏛"),
    (frozenset({"park", "campground", "natural_feature", "zoo"}), "🌳"),
    (frozenset({"tourist_attraction", "point_of_interest_landmark", "amusement_park", "aquarium"}), "📸"),
    (frozenset({"shopping_mall", "department_store", "clothing_store", "store", "supermarket", "convenience_store"}), "🛍"),
    (frozenset({"subway_station", "train_station", "transit_station", "bus_station", "light_rail_station", "airport"}), "🚉"),
    (frozenset({"hospital", "pharmacy", "doctor", "dentist"}), "🏥"),
    (frozenset({"school", "university", "primary_school", "secondary_school"}), "🎓"),
    (frozenset({"gym", "stadium", "bowling_alley"}), "🏟"),
)
DEFAULT_ICON = "📍"


def icon_for_categories(categories: FrozenSet[str]) -> str:
    """Return the display icon for a set of place categories."""
    for members, icon in CATEGORY_ICONS:
        if members & categories:
            return icon
    return DEFAULT_ICON


@dataclass(frozen=True)
class LatLng:
    """A plain numeric coordinate."""
    lat: float
    lng: float

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class PlacePrediction:
    """
    An autocomplete prediction.

    Carries enough to request details (the embedded place_id) but not the
    details themselves.
    """
    place_id: str
    description: str
    main_text: Optional[str] = None
    secondary_text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "place_id": self.place_id,
            "description": self.description,
            "main_text": self.main_text,
            "secondary_text": self.secondary_text,
        }


@dataclass(frozen=True)
class Place:
    """
    Canonical, normalized record for one point of interest.

    `id` is never empty for a resolved Place. A Place without a `location`
    is valid but is never rendered as a marker.
    """
    id: str
    name: str
    address: Optional[str] = None
    location: Optional[LatLng] = None
    rating: Optional[float] = None
    rating_count: Optional[int] = None
    price_level: Optional[int] = None
    open_now: Optional[bool] = None
    weekly_hours: Optional[Tuple[str, ...]] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    map_url: Optional[str] = None
    photo_url: Optional[str] = None
    icon_url: Optional[str] = None
    icon_background: Optional[str] = None
    categories: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Place id must not be empty")

    @property
    def icon(self) -> str:
        return icon_for_categories(self.categories)


def _coordinate(value: Any, limit: float) -> float:
    """Validate one persisted coordinate: a finite number within +/- limit."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"saved marker coordinate must be a number, got {value!r}")
    number = float(value)
    if not math.isfinite(number) or not -limit <= number <= limit:
        raise ValueError(f"saved marker coordinate out of range: {value!r}")
    return number


@dataclass(frozen=True)
class SavedMarker:
    """
    Durable projection of a Place, sufficient to re-render a pin without a
    network fetch.
    """
    id: str
    lat: float
    lng: float
    name: str
    address: Optional[str] = None
    categories: Tuple[str, ...] = ()

    @classmethod
    def from_place(cls, place: Place) -> "SavedMarker":
        if place.location is None:
            raise ValueError(f"Place {place.id} has no location to save")
        return cls(
            id=place.id,
            lat=place.location.lat,
            lng=place.location.lng,
            name=place.name or "",
            address=place.address,
            categories=tuple(sorted(place.categories)),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SavedMarker":
        """Parse a persisted entry. Raises ValueError/TypeError/KeyError on malformed input."""
        marker_id = data["id"]
        if not isinstance(marker_id, str) or not marker_id:
            raise ValueError("saved marker id must be a non-empty string")
        lat = _coordinate(data["lat"], 90.0)
        lng = _coordinate(data["lng"], 180.0)
        address = data.get("address")
        categories = data.get("categories") or []
        if not isinstance(categories, list):
            raise TypeError("saved marker categories must be a list")
        return cls(
            id=marker_id,
            lat=lat,
            lng=lng,
            name=str(data.get("name") or ""),
            address=str(address) if address is not None else None,
            categories=tuple(str(c) for c in categories),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "lat": self.lat,
            "lng": self.lng,
            "name": self.name,
            "address": self.address,
            "categories": list(self.categories),
        }

    def to_place(self) -> Place:
        """Reconstruct a Place-like record for rendering."""
        return Place(
            id=self.id,
            name=self.name,
            address=self.address,
            location=LatLng(self.lat, self.lng),
            categories=frozenset(self.categories),
        )


@dataclass
class SelectionState:
    """
    The place currently being viewed.

    `fetch_token` identifies the most recent in-flight detail request; only
    a response carrying that token may replace `place`.
    """
    place: Optional[Place] = None
    details_visible: bool = False
    fetch_token: Optional[int] = None

    def clear(self) -> None:
        self.place = None
        self.details_visible = False
