"""
Tests for place normalization.
"""
from types import SimpleNamespace

import pytest

from domain.errors import DetailFetchFailed
from domain.models import DEFAULT_ICON, LatLng, PlacePrediction
from services.place_normalizer import normalize, resolve_place_id


def test_full_json_payload():
    detail = {
        "place_id": "p9",
        "name": "Gwanghwamun Cafe",
        "formatted_address": "Jongno-gu, Seoul",
        "geometry": {"location": {"lat": 37.5759, "lng": 126.9768}},
        "rating": 4.4,
        "user_ratings_total": "321",
        "price_level": 2,
        "opening_hours": {"open_now": False, "weekday_text": ["Monday: 9AM-6PM", "Tuesday: 9AM-6PM"]},
        "formatted_phone_number": "02-123-4567",
        "website": "https://cafe.example",
        "url": "https://maps.google.com/?cid=1",
        "photos": [{"photo_reference": "ref-1"}, {"photo_reference": "ref-2"}],
        "types": ["cafe", "food"],
    }
    place = normalize("p9", detail, photo_url_for=lambda ref, w: f"https://img/{ref}/{w}", photo_max_width=320)

    assert place.id == "p9"
    assert place.name == "Gwanghwamun Cafe"
    assert place.location == LatLng(37.5759, 126.9768)
    assert place.rating == 4.4
    assert place.rating_count == 321
    assert place.price_level == 2
    assert place.open_now is False
    assert place.weekly_hours == ("Monday: 9AM-6PM", "Tuesday: 9AM-6PM")
    assert place.phone == "02-123-4567"
    assert place.map_url == "https://maps.google.com/?cid=1"
    assert place.photo_url == "https://img/ref-1/320"
    assert place.categories == frozenset({"cafe", "food"})
    assert place.icon == "☕"


def test_missing_optional_fields_are_absent():
    place = normalize("p1", {"place_id": "p1"})

    assert place.name == ""
    for attr in (
        "address",
        "location",
        "rating",
        "rating_count",
        "price_level",
        "open_now",
        "weekly_hours",
        "phone",
        "website",
        "map_url",
        "photo_url",
        "icon_url",
        "icon_background",
    ):
        assert getattr(place, attr) is None, attr
    assert place.categories == frozenset()
    assert place.icon == DEFAULT_ICON


def test_garbage_optional_fields_are_absent():
    detail = {
        "place_id": "p1",
        "rating": "not-a-number",
        "user_ratings_total": None,
        "geometry": {"location": {"lat": "x", "lng": 127.0}},
        "opening_hours": {"open_now": "yes", "weekday_text": "Mon"},
        "photos": [],
        "types": "cafe",
    }
    place = normalize("p1", detail)

    assert place.rating is None
    assert place.location is None
    assert place.open_now is None
    assert place.weekly_hours is None
    assert place.photo_url is None
    assert place.categories == frozenset()


def test_accessor_location_is_invoked():
    location = SimpleNamespace(lat=lambda: 37.1, lng=lambda: 127.2)
    detail = SimpleNamespace(place_id="p3", name="Accessor", geometry=SimpleNamespace(location=location))

    place = normalize("p3", detail)

    assert place.location == LatLng(37.1, 127.2)


def test_plain_and_accessor_coordinates_agree():
    plain = normalize("p", {"place_id": "p", "geometry": {"location": {"lat": 1.5, "lng": 2.5}}})
    accessor = normalize(
        "p",
        {"place_id": "p", "geometry": {"location": SimpleNamespace(lat=lambda: 1.5, lng=lambda: 2.5)}},
    )
    assert plain.location == accessor.location


def test_out_of_range_location_is_dropped():
    place = normalize("p", {"place_id": "p", "geometry": {"location": {"lat": 137.0, "lng": 10.0}}})
    assert place.location is None


def test_is_open_accessor_wins_over_field():
    hours = SimpleNamespace(is_open=lambda: True, open_now=False)
    place = normalize("p", {"place_id": "p", "opening_hours": hours})
    assert place.open_now is True


def test_is_open_accessor_failure_is_absent():
    def boom():
        raise RuntimeError("utc_offset missing")

    hours = SimpleNamespace(isOpen=boom)
    place = normalize("p", {"place_id": "p", "opening_hours": hours})
    assert place.open_now is None


def test_async_is_open_accessor_is_absent():
    async def later():
        return True

    hours = SimpleNamespace(is_open=later)
    place = normalize("p", {"place_id": "p", "opening_hours": hours})
    assert place.open_now is None


def test_photo_get_url_accessor():
    photo = SimpleNamespace(get_url=lambda width: f"https://photo/{width}")
    place = normalize("p", {"place_id": "p", "photos": [photo]}, photo_max_width=80)
    assert place.photo_url == "https://photo/80"


def test_photo_reference_without_builder_is_absent():
    place = normalize("p", {"place_id": "p", "photos": [{"photo_reference": "abc"}]})
    assert place.photo_url is None


def test_photo_builder_failure_is_absent():
    def broken(ref, width):
        raise ValueError("bad reference")

    place = normalize("p", {"place_id": "p", "photos": [{"photo_reference": "abc"}]}, photo_url_for=broken)
    assert place.photo_url is None


@pytest.mark.parametrize(
    "ref, detail, expected",
    [
        ("ref-id", {"place_id": "explicit", "reference": "legacy"}, "explicit"),
        ("ref-id", {"reference": "legacy"}, "legacy"),
        ("ref-id", {"name": "no ids"}, "ref-id"),
        (PlacePrediction(place_id="from-prediction", description="x"), {}, "from-prediction"),
    ],
)
def test_identifier_resolution_order(ref, detail, expected):
    assert resolve_place_id(ref, detail) == expected


def test_prediction_text_fills_missing_name_and_address():
    prediction = PlacePrediction(
        place_id="p5",
        description="Cafe A, Jongno-gu, Seoul",
        main_text="Cafe A",
        secondary_text="Jongno-gu, Seoul",
    )
    place = normalize(prediction, {"geometry": {"location": {"lat": 37.5, "lng": 127.0}}})

    assert place.id == "p5"
    assert place.name == "Cafe A"
    assert place.address == "Jongno-gu, Seoul"


def test_missing_identifier_raises_fetch_failure():
    with pytest.raises(DetailFetchFailed):
        normalize(None, {"name": "anonymous"})
    with pytest.raises(DetailFetchFailed):
        normalize("p1", None)


def test_provider_icon_and_background_are_carried():
    detail = {
        "place_id": "p4",
        "icon": "https://maps.gstatic.com/mapfiles/place_api/icons/v1/png_71/cafe-71.png",
        "icon_background_color": "#FF9E67",
    }
    place = normalize("p4", detail)

    assert place.icon_url == "https://maps.gstatic.com/mapfiles/place_api/icons/v1/png_71/cafe-71.png"
    assert place.icon_background == "#FF9E67"


def test_provider_icon_accessor_is_invoked():
    detail = SimpleNamespace(place_id="p5", icon=lambda: "https://icons/park.png", icon_background_color=None)
    place = normalize("p5", detail)

    assert place.icon_url == "https://icons/park.png"
    assert place.icon_background is None
