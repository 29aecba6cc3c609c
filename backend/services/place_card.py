"""
Place card projection.

Builds the bottom-sheet card the front end shows for the selected place.
"""
import re
from dataclasses import dataclass, field
from typing import List, Optional

from domain.models import Place

OPEN_LABEL = "🟢 영업중"
CLOSED_LABEL = "🔴 영업종료"
SAVE_LABEL = "📌 PinDiary 저장"
DELETE_LABEL = "🗑 PinDiary 삭제"

ACTION_SAVE = "save"
ACTION_DELETE = "delete"


@dataclass
class PlaceCard:
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
    weekly_hours: List[str] = field(default_factory=list)
    action: str = ACTION_SAVE
    action_label: str = SAVE_LABEL


def phone_dial_uri(phone: Optional[str]) -> Optional[str]:
    """Turn a display phone number into a tel: link (digits and '+' only)."""
    if not phone:
        return None
    digits = re.sub(r"[^0-9+]", "", phone)
    return f"tel:{digits}" if digits else None


def build_place_card(place: Place, saved: bool) -> PlaceCard:
    """Project a Place into card fields; `saved` switches the save/delete action."""
    if place.open_now is None:
        open_label = None
    else:
        open_label = OPEN_LABEL if place.open_now else CLOSED_LABEL
    return PlaceCard(
        place_id=place.id,
        title=place.name,
        icon=place.icon,
        address=place.address,
        rating_label=f"⭐ {place.rating:g}" if place.rating is not None else None,
        rating_count=place.rating_count,
        open_label=open_label,
        open_now=place.open_now,
        phone=place.phone,
        phone_uri=phone_dial_uri(place.phone),
        website=place.website,
        map_url=place.map_url,
        photo_url=place.photo_url,
        icon_url=place.icon_url,
        icon_background=place.icon_background if place.icon_url else None,
        weekly_hours=list(place.weekly_hours or ()),
        action=ACTION_DELETE if saved else ACTION_SAVE,
        action_label=DELETE_LABEL if saved else SAVE_LABEL,
    )
