from domain.models import LatLng, Place
from services.place_card import (
    ACTION_DELETE,
    ACTION_SAVE,
    CLOSED_LABEL,
    DELETE_LABEL,
    OPEN_LABEL,
    SAVE_LABEL,
    build_place_card,
    phone_dial_uri,
)


def _place(**overrides) -> Place:
    fields = dict(id="p1", name="Cafe A", location=LatLng(37.5, 127.0))
    fields.update(overrides)
    return Place(**fields)


def test_unsaved_place_offers_save():
    card = build_place_card(_place(), saved=False)
    assert card.action == ACTION_SAVE
    assert card.action_label == SAVE_LABEL


def test_saved_place_offers_delete():
    card = build_place_card(_place(), saved=True)
    assert card.action == ACTION_DELETE
    assert card.action_label == DELETE_LABEL


def test_open_state_labels():
    assert build_place_card(_place(open_now=True), saved=False).open_label == OPEN_LABEL
    assert build_place_card(_place(open_now=False), saved=False).open_label == CLOSED_LABEL
    assert build_place_card(_place(), saved=False).open_label is None


def test_rating_label_and_icon():
    card = build_place_card(_place(rating=4.5, categories=frozenset({"restaurant"})), saved=False)
    assert card.rating_label == "⭐ 4.5"
    assert card.icon == "🍽"


def test_phone_dial_uri_strips_formatting():
    assert phone_dial_uri("+82 2-123-4567") == "tel:+8221234567"
    assert phone_dial_uri("(02) 720 0000") == "tel:027200000"
    assert phone_dial_uri(None) is None
    assert phone_dial_uri("call us") is None


def test_weekly_hours_copied_as_list():
    card = build_place_card(_place(weekly_hours=("Mon: 9-5", "Tue: 9-5")), saved=False)
    assert card.weekly_hours == ["Mon: 9-5", "Tue: 9-5"]


def test_provider_icon_shown_on_its_background():
    card = build_place_card(_place(icon_url="https://icons/cafe.png", icon_background="#FF9E67"), saved=False)
    assert card.icon_url == "https://icons/cafe.png"
    assert card.icon_background == "#FF9E67"


def test_background_without_icon_is_dropped():
    card = build_place_card(_place(icon_background="#FF9E67"), saved=False)
    assert card.icon_url is None
    assert card.icon_background is None
