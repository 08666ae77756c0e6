"""
Location resolution for new incidents.

Precedence: explicit coordinates, then photo geotags, then nothing. Free text
always wins over a computed label; a reverse-geocoded label wins over the bare
coordinates; the bare coordinates are used only when nothing else is available.
"""
import logging
import math
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from fastapi import HTTPException

from services.exif_service import Coordinates, extract_gps_from_photos
from services.geocoding_service import format_gps_label
from services.photo_service import IncomingPhoto

log = logging.getLogger(__name__)

LOCATION_REQUIRED_MESSAGE = "Provide location text, coordinates, or a geotagged photo."


class LocationRequiredError(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=400, detail=LOCATION_REQUIRED_MESSAGE)


@dataclass(frozen=True)
class ResolvedCoordinates:
    coordinates: Optional[Coordinates]
    source: str


@dataclass(frozen=True)
class ResolvedLocation:
    latitude: Optional[float]
    longitude: Optional[float]
    location_text: str
    source: str


def _parse_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_coordinates(latitude: Any, longitude: Any) -> Optional[Coordinates]:
    """
    Explicit coordinates count only when both parse to finite numbers and neither is exactly 0.
    0 is what unset map pickers send, so it is read as absent.
    """
    lat = _parse_float(latitude)
    lng = _parse_float(longitude)
    if lat is None or lng is None or lat == 0 or lng == 0:
        return None
    return Coordinates(latitude=lat, longitude=lng)


def has_location_text(location_text: Optional[str]) -> bool:
    return isinstance(location_text, str) and len(location_text.strip()) > 0


def resolve_coordinates(
    latitude: Any,
    longitude: Any,
    location_text: Optional[str],
    photos: Sequence[IncomingPhoto],
) -> ResolvedCoordinates:
    """Pick the final coordinates and reject requests with no usable location at all."""
    explicit = parse_coordinates(latitude, longitude)
    from_photos = None
    if explicit is None and photos:
        from_photos = extract_gps_from_photos(photos)

    if explicit is None and from_photos is None and not has_location_text(location_text):
        raise LocationRequiredError()

    if explicit is not None:
        return ResolvedCoordinates(coordinates=explicit, source="input")
    if from_photos is not None:
        return ResolvedCoordinates(coordinates=from_photos, source="exif")
    return ResolvedCoordinates(coordinates=None, source="none")


def resolve_location_text(location_text: Optional[str], coordinates: Optional[Coordinates], geocoder) -> str:
    if has_location_text(location_text):
        return location_text  # verbatim

    if coordinates is None:
        return ""

    try:
        resolved = geocoder.reverse(coordinates.latitude, coordinates.longitude)
    except Exception as exc:
        log.warning("Reverse geocoding raised for %s, %s: %s", coordinates.latitude, coordinates.longitude, exc)
        resolved = format_gps_label(coordinates.latitude, coordinates.longitude)

    return resolved or format_gps_label(coordinates.latitude, coordinates.longitude)


def resolve_location(
    latitude: Any,
    longitude: Any,
    location_text: Optional[str],
    photos: Sequence[IncomingPhoto],
    geocoder,
) -> ResolvedLocation:
    resolved = resolve_coordinates(latitude, longitude, location_text, photos)
    text = resolve_location_text(location_text, resolved.coordinates, geocoder)
    coordinates = resolved.coordinates
    return ResolvedLocation(
        latitude=coordinates.latitude if coordinates else None,
        longitude=coordinates.longitude if coordinates else None,
        location_text=text,
        source=resolved.source,
    )
