import logging
import math
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Iterable, Optional

from PIL import Image

from services.photo_service import IncomingPhoto

log = logging.getLogger(__name__)

GPS_IFD = 0x8825
GPS_LATITUDE_REF = 1
GPS_LATITUDE = 2
GPS_LONGITUDE_REF = 3
GPS_LONGITUDE = 4


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


def _to_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) or math.isinf(number) else number


def dms_to_decimal(value: Any) -> Optional[float]:
    """Convert a (degrees, minutes, seconds) tuple or a plain number to decimal degrees."""
    if isinstance(value, (tuple, list)):
        if not value:
            return None
        parts = [_to_float(part) for part in value[:3]]
        if any(part is None for part in parts):
            return None
        while len(parts) < 3:
            parts.append(0.0)
        degrees, minutes, seconds = parts
        return degrees + minutes / 60.0 + seconds / 3600.0
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore").strip("\x00 ")
    return _to_float(value)


def _hemisphere_sign(ref: Any) -> int:
    if isinstance(ref, bytes):
        ref = ref.decode("ascii", errors="ignore")
    return -1 if str(ref).strip("\x00 ").upper() in {"S", "W"} else 1


def _usable(latitude: Optional[float], longitude: Optional[float]) -> Optional[Coordinates]:
    if latitude is None or longitude is None:
        return None
    if latitude == 0 or longitude == 0:
        return None
    return Coordinates(latitude=latitude, longitude=longitude)


def gps_from_tags(gps_tags: dict) -> Optional[Coordinates]:
    """
    Read coordinates out of a GPS IFD mapping.

    Signed decimal degrees built from the hemisphere references are preferred;
    without references the bare latitude/longitude values are used as-is.
    """
    if not gps_tags:
        return None

    raw_lat = gps_tags.get(GPS_LATITUDE)
    raw_lng = gps_tags.get(GPS_LONGITUDE)
    lat_ref = gps_tags.get(GPS_LATITUDE_REF)
    lng_ref = gps_tags.get(GPS_LONGITUDE_REF)

    if lat_ref is not None and lng_ref is not None:
        latitude = dms_to_decimal(raw_lat)
        longitude = dms_to_decimal(raw_lng)
        if latitude is not None and longitude is not None:
            return _usable(latitude * _hemisphere_sign(lat_ref), longitude * _hemisphere_sign(lng_ref))

    return _usable(dms_to_decimal(raw_lat), dms_to_decimal(raw_lng))


def extract_gps(content: bytes, filename: str = "") -> Optional[Coordinates]:
    try:
        with Image.open(BytesIO(content)) as image:
            gps_tags = dict(image.getexif().get_ifd(GPS_IFD))
    except Exception as exc:
        log.warning("Could not read EXIF from %s: %s", filename or "<upload>", exc)
        return None

    if not gps_tags:
        log.debug("No GPS tags in %s", filename or "<upload>")
        return None

    try:
        return gps_from_tags(gps_tags)
    except Exception as exc:
        log.warning("Invalid GPS tags in %s: %s", filename or "<upload>", exc)
        return None


def extract_gps_from_photos(photos: Iterable[IncomingPhoto]) -> Optional[Coordinates]:
    """First usable geotag in upload order; unreadable photos are skipped."""
    for index, photo in enumerate(photos, start=1):
        coordinates = extract_gps(photo.content, photo.filename)
        if coordinates:
            log.info("GPS %s, %s taken from photo %s (%s)", coordinates.latitude, coordinates.longitude, index, photo.filename)
            return coordinates
    log.info("No GPS data found in any uploaded photo")
    return None
