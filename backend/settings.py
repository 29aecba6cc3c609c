import os
from pathlib import Path

# Basic settings helper to read environment configuration.

BACKEND_ROOT = Path(__file__).resolve().parent


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_float(val: str | None, default: float) -> float:
    if val is None or not val.strip():
        return default
    try:
        return float(val)
    except ValueError:
        return default


def _as_int(val: str | None, default: int) -> int:
    if val is None or not val.strip():
        return default
    try:
        return int(val)
    except ValueError:
        return default


class Settings:
    def __init__(self) -> None:
        self.GOOGLE_MAPS_API_KEY: str | None = os.getenv("GOOGLE_MAPS_API_KEY") or None
        self.PLACES_BASE_URL: str = os.getenv(
            "PLACES_BASE_URL", "https://maps.googleapis.com/maps/api/place"
        )
        self.PLACES_LANGUAGE: str = os.getenv("PLACES_LANGUAGE", "ko")
        self.PLACES_TIMEOUT_SECONDS: float = _as_float(os.getenv("PLACES_TIMEOUT_SECONDS"), 5.0)
        self.PHOTO_MAX_WIDTH: int = _as_int(os.getenv("PHOTO_MAX_WIDTH"), 400)
        # Where the browser fetches place photos; the proxy adds the API key server-side.
        self.PHOTO_PROXY_PATH: str = os.getenv("PHOTO_PROXY_PATH", "/photos")
        # Seoul City Hall
        self.DEFAULT_CENTER_LAT: float = _as_float(os.getenv("DEFAULT_CENTER_LAT"), 37.5665)
        self.DEFAULT_CENTER_LNG: float = _as_float(os.getenv("DEFAULT_CENTER_LNG"), 126.978)
        self.PINDIARY_DB_PATH: str = os.getenv(
            "PINDIARY_DB_PATH", str(BACKEND_ROOT / "data" / "pindiary.sqlite")
        )
        self.SAVED_MARKERS_KEY: str = os.getenv("SAVED_MARKERS_KEY", "pindiary.savedMarkers")
        self.SQL_ECHO: bool = _as_bool(os.getenv("SQL_ECHO"), False)


settings = Settings()
