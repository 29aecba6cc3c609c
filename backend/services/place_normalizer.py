"""
Place normalization.

Turns a raw place reference (bare id, autocomplete prediction or POI id)
plus a fetched detail payload into one canonical `Place`.

Detail payloads arrive in more than one shape: JSON dicts from the web
service, plain objects exposing attributes, and objects whose fields are
accessor callables (``geometry.location.lat()``). All field reads go
through `_read`, which applies one rule: if the field is callable, call it;
otherwise use it as is.
"""
from __future__ import annotations

import inspect
import logging
import math
from collections.abc import Mapping
from typing import Any, Callable, FrozenSet, Optional, Tuple

from domain.errors import DetailFetchFailed
from domain.models import LatLng, Place

logger = logging.getLogger(__name__)

DEFAULT_PHOTO_MAX_WIDTH = 400

PhotoUrlBuilder = Callable[[str, int], str]


def _lookup(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _resolve(value: Any) -> Any:
    """If the field is invocable, invoke it; otherwise use it directly."""
    if callable(value):
        return value()
    return value


def _read(obj: Any, *names: str) -> Any:
    """Return the first non-None field among `names`, resolving accessors."""
    for name in names:
        value = _lookup(obj, name)
        if value is None:
            continue
        try:
            value = _resolve(value)
        except Exception as exc:
            logger.debug("Accessor %s raised %r; treating as absent", name, exc)
            continue
        if value is not None:
            return value
    return None


def _as_str(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list, tuple)):
        return None
    text = str(value).strip()
    return text or None


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _as_int(value: Any) -> Optional[int]:
    number = _as_float(value)
    if number is None:
        return None
    return int(number)


def _as_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _as_text_tuple(value: Any) -> Optional[Tuple[str, ...]]:
    if not isinstance(value, (list, tuple)):
        return None
    return tuple(str(v) for v in value if v is not None)


def resolve_place_id(raw_ref: Any, raw_detail: Any) -> Optional[str]:
    """
    Pick the identifier for a place.

    Order: explicit id field on the detail, then the legacy `reference`
    field, then the place id embedded in the reference (a prediction or a
    bare id string). First present value wins.
    """
    if isinstance(raw_ref, str):
        ref_id = raw_ref
    else:
        ref_id = _read(raw_ref, "place_id", "placeId")
    for candidate in (
        _read(raw_detail, "place_id", "id"),
        _read(raw_detail, "reference"),
        ref_id,
    ):
        text = _as_str(candidate)
        if text:
            return text
    return None


def _location(detail: Any) -> Optional[LatLng]:
    geometry = _read(detail, "geometry")
    source = _read(geometry, "location") if geometry is not None else None
    if source is None:
        source = _read(detail, "location")
    if source is None:
        source = detail
    lat = _as_float(_read(source, "lat", "latitude"))
    lng = _as_float(_read(source, "lng", "lon", "longitude"))
    if lat is None or lng is None:
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        logger.warning("Discarding out-of-range location lat=%s lng=%s", lat, lng)
        return None
    return LatLng(lat=lat, lng=lng)


def _open_now(hours: Any) -> Optional[bool]:
    if hours is None:
        return None
    for name in ("is_open", "isOpen"):
        accessor = _lookup(hours, name)
        if not callable(accessor):
            continue
        try:
            result = accessor()
        except Exception as exc:
            logger.debug("Open-state query failed: %r", exc)
            return None
        if inspect.isawaitable(result):
            # Asynchronous queries are not awaited here.
            if inspect.iscoroutine(result):
                result.close()
            return None
        if isinstance(result, bool):
            return result
    return _as_bool(_read(hours, "open_now", "openNow"))


def _photo_url(
    detail: Any,
    photo_url_for: Optional[PhotoUrlBuilder],
    max_width: int,
) -> Optional[str]:
    photos = _read(detail, "photos")
    if not isinstance(photos, (list, tuple)) or not photos:
        return None
    first = photos[0]
    try:
        get_url = _lookup(first, "get_url")
        if callable(get_url):
            return _as_str(get_url(max_width))
        url = _as_str(_read(first, "url"))
        if url:
            return url
        reference = _as_str(_read(first, "photo_reference", "name"))
        if reference and photo_url_for is not None:
            return _as_str(photo_url_for(reference, max_width))
    except Exception as exc:
        logger.debug("Photo URL resolution failed: %r", exc)
    return None


def _categories(detail: Any) -> FrozenSet[str]:
    types = _read(detail, "types")
    if not isinstance(types, (list, tuple, set, frozenset)):
        return frozenset()
    return frozenset(str(t) for t in types if t)


def normalize(
    raw_ref: Any,
    raw_detail: Any,
    *,
    photo_url_for: Optional[PhotoUrlBuilder] = None,
    photo_max_width: int = DEFAULT_PHOTO_MAX_WIDTH,
) -> Place:
    """
    Build a canonical Place from a reference and its detail payload.

    Every optional field that is missing or unusable comes back as None.
    Raises DetailFetchFailed only when no identifier can be found.
    """
    if raw_detail is None:
        raise DetailFetchFailed("empty detail payload")
    place_id = resolve_place_id(raw_ref, raw_detail)
    if not place_id:
        raise DetailFetchFailed("detail payload carries no place identifier")

    name = (
        _as_str(_read(raw_detail, "name"))
        or _as_str(_read(raw_ref, "main_text"))
        or _as_str(_read(raw_ref, "description"))
        or ""
    )
    address = _as_str(_read(raw_detail, "formatted_address", "vicinity", "address")) or _as_str(
        _read(raw_ref, "secondary_text")
    )
    hours = _read(raw_detail, "opening_hours")

    return Place(
        id=place_id,
        name=name,
        address=address,
        location=_location(raw_detail),
        rating=_as_float(_read(raw_detail, "rating")),
        rating_count=_as_int(_read(raw_detail, "user_ratings_total")),
        price_level=_as_int(_read(raw_detail, "price_level")),
        open_now=_open_now(hours),
        weekly_hours=_as_text_tuple(_read(hours, "weekday_text")) if hours is not None else None,
        phone=_as_str(_read(raw_detail, "formatted_phone_number", "international_phone_number")),
        website=_as_str(_read(raw_detail, "website")),
        map_url=_as_str(_read(raw_detail, "url")),
        photo_url=_photo_url(raw_detail, photo_url_for, photo_max_width),
        icon_url=_as_str(_read(raw_detail, "icon", "icon_url")),
        icon_background=_as_str(_read(raw_detail, "icon_background_color")),
        categories=_categories(raw_detail),
    )
