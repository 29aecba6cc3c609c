"""
One-shot geolocation used to seed the initial map centre.

The browser owns the actual position lookup and reports it when it opens a
session; a missing or invalid report simply means "unavailable".
"""
import logging
from typing import Optional, Protocol, Tuple

from domain.errors import GeolocationUnavailable
from domain.models import LatLng
from settings import settings

logger = logging.getLogger(__name__)


class GeolocationProvider(Protocol):
    def current_position(self) -> LatLng:
        """Return the current position or raise GeolocationUnavailable."""
        ...


class ReportedPositionProvider:
    """Position reported by the client when it opened the session."""

    def __init__(self, lat: Optional[float] = None, lng: Optional[float] = None):
        self.lat = lat
        self.lng = lng

    def current_position(self) -> LatLng:
        if self.lat is None or self.lng is None:
            raise GeolocationUnavailable("client did not report a position")
        if not (-90.0 <= self.lat <= 90.0 and -180.0 <= self.lng <= 180.0):
            raise GeolocationUnavailable(f"reported position out of range: {self.lat},{self.lng}")
        return LatLng(lat=float(self.lat), lng=float(self.lng))


def default_center() -> LatLng:
    return LatLng(lat=settings.DEFAULT_CENTER_LAT, lng=settings.DEFAULT_CENTER_LNG)


def resolve_initial_center(
    provider: Optional[GeolocationProvider],
) -> Tuple[LatLng, Optional[LatLng]]:
    """
    Query the provider once.

    Returns (map centre, my location). When the position is unavailable the
    centre falls back to the configured default and my location is None.
    """
    if provider is None:
        return default_center(), None
    try:
        position = provider.current_position()
    except GeolocationUnavailable as exc:
        logger.info("Geolocation unavailable, using default centre: %s", exc)
        return default_center(), None
    return position, position
