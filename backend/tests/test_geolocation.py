from domain.errors import GeolocationUnavailable
from domain.models import LatLng
from services.geolocation import ReportedPositionProvider, default_center, resolve_initial_center


class ExplodingProvider:
    def __init__(self):
        self.calls = 0

    def current_position(self):
        self.calls += 1
        raise GeolocationUnavailable("permission denied")


def test_reported_position_is_used():
    center, me = resolve_initial_center(ReportedPositionProvider(35.1796, 129.0756))
    assert center == LatLng(35.1796, 129.0756)
    assert me == center


def test_missing_report_falls_back_to_default():
    center, me = resolve_initial_center(ReportedPositionProvider())
    assert center == default_center()
    assert me is None


def test_out_of_range_report_falls_back_to_default():
    center, me = resolve_initial_center(ReportedPositionProvider(123.0, 10.0))
    assert center == default_center()
    assert me is None


def test_provider_error_is_absorbed_and_queried_once():
    provider = ExplodingProvider()
    center, me = resolve_initial_center(provider)
    assert center == default_center()
    assert me is None
    assert provider.calls == 1


def test_default_center_is_seoul_city_hall():
    assert default_center() == LatLng(37.5665, 126.978)
