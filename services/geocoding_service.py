import logging

import requests

from core.config import get_geocoder_settings

log = logging.getLogger(__name__)


def format_coordinates(latitude: float, longitude: float) -> str:
    return f"{latitude:.6f}, {longitude:.6f}"


def format_gps_label(latitude: float, longitude: float) -> str:
    return f"GPS: {format_coordinates(latitude, longitude)}"


class GeocodingService:
    """Reverse geocoding against a Nominatim-compatible endpoint."""

    def __init__(self, url: str, timeout: float = 5.0, user_agent: str = "", session: requests.Session | None = None) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        if user_agent:
            self.session.headers["User-Agent"] = user_agent

    @classmethod
    def from_env(cls) -> "GeocodingService":
        settings = get_geocoder_settings()
        return cls(url=settings["url"], timeout=settings["timeout"], user_agent=settings["user_agent"])

    def reverse(self, latitude: float, longitude: float) -> str:
        """
        Resolve coordinates to a place name.
        Never raises: on failure the coordinates themselves are returned as a GPS label.
        """
        params = {
            "lat": latitude,
            "lon": longitude,
            "format": "json",
            "zoom": 10,
            "addressdetails": 1,
        }
        try:
            response = self.session.get(self.url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            log.warning("Reverse geocoding failed for %s: %s", format_coordinates(latitude, longitude), exc)
            return format_gps_label(latitude, longitude)

        label = data.get("display_name") if isinstance(data, dict) else None
        return label or format_coordinates(latitude, longitude)

    def close(self) -> None:
        self.session.close()
