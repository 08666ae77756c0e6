import logging
import math
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Optional, Sequence

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import MAX_PHOTOS
from models.incident import Incident, utc_now
from services.geocoding_service import GeocodingService
from services.location_service import resolve_location
from services.photo_service import IncomingPhoto
from services.storage_service import StorageService

log = logging.getLogger(__name__)

SEVERITY_BUCKETS = ("Low", "Medium", "High")


def _present(value: Optional[str]) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def _capture_date_time(now: datetime) -> tuple[str, str]:
    date = f"{now.month}/{now.day}/{now.year}"
    time = now.strftime("%I:%M:%S %p").lstrip("0")
    return date, time


def upload_photos(photos: Sequence[IncomingPhoto], storage: StorageService) -> list[dict]:
    """
    Upload every photo concurrently and return the records in upload order.
    The first failure propagates; blobs already stored are left in place.
    """
    if not photos:
        return []

    with ThreadPoolExecutor(max_workers=min(len(photos), MAX_PHOTOS)) as pool:
        stored = list(pool.map(lambda photo: storage.upload(photo.filename, photo.content, photo.content_type), photos))

    return [
        {"url": item.url, "key": item.key, "name": photo.filename or ""}
        for item, photo in zip(stored, photos)
    ]


def stored_photo_keys(incident: Incident) -> list[str]:
    photos = list(incident.photos or [])
    if photos:
        return [photo.get("key") for photo in photos if photo.get("key")]
    if incident.photo_key:
        return [str(incident.photo_key)]
    return []


def delete_stored_photos(incident: Incident, storage: StorageService) -> int:
    keys = stored_photo_keys(incident)
    for key in keys:
        storage.delete(key)
    return len(keys)


def _assign_photos(incident: Incident, photos: list[dict]) -> None:
    incident.photos = photos  # type: ignore[assignment]
    incident.photo_url = photos[0]["url"] if photos else None  # type: ignore[assignment]
    incident.photo_key = photos[0]["key"] if photos else None  # type: ignore[assignment]


def _parse_update_coordinate(value: str) -> float:
    try:
        number = float(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Latitude and longitude must be numbers") from exc
    if not math.isfinite(number):
        raise HTTPException(status_code=400, detail="Latitude and longitude must be numbers")
    return number


class IncidentService:
    @staticmethod
    def list_incidents(db: Session) -> list[Incident]:
        return db.query(Incident).order_by(Incident.created_at.desc()).all()

    @staticmethod
    def get_incident(incident_id: str | uuid.UUID, db: Session) -> Incident:
        try:
            parsed_id = incident_id if isinstance(incident_id, uuid.UUID) else uuid.UUID(str(incident_id))
        except ValueError as exc:
            raise HTTPException(status_code=404, detail="Incident not found") from exc
        incident = db.query(Incident).filter(Incident.id == parsed_id).first()
        if not incident:
            raise HTTPException(status_code=404, detail="Incident not found")
        return incident

    @staticmethod
    def create_incident(
        type: Optional[str],
        description: Optional[str],
        severity: Optional[str],
        latitude: Any,
        longitude: Any,
        location_text: Optional[str],
        location_mode: Optional[str],
        photos: Sequence[IncomingPhoto],
        db: Session,
        storage: StorageService,
        geocoder: GeocodingService,
    ) -> Incident:
        log.info(
            "New incident: mode=%s photos=%s latitude=%r longitude=%r location_text=%r",
            location_mode or "unknown", len(photos), latitude, longitude, location_text,
        )

        if not (_present(type) and _present(description) and _present(severity)):
            log.info("Rejected incident: type, description and severity are required")
            raise HTTPException(status_code=400, detail="Type, description and severity are required.")

        resolved = resolve_location(latitude, longitude, location_text, photos, geocoder)
        log.info(
            "Resolved location: source=%s latitude=%s longitude=%s text=%r",
            resolved.source, resolved.latitude, resolved.longitude, resolved.location_text,
        )

        try:
            uploaded = upload_photos(photos, storage)
        except Exception as exc:
            log.error("Photo upload failed (create): %s", exc, exc_info=True)
            raise HTTPException(status_code=500, detail="Image upload failed.") from exc

        date, time = _capture_date_time(datetime.now())
        incident = Incident(
            type=type,
            description=description,
            location=resolved.location_text,
            location_text=resolved.location_text,
            latitude=resolved.latitude,
            longitude=resolved.longitude,
            severity=severity,
            date=date,
            time=time,
            status="Open",
        )
        _assign_photos(incident, uploaded)

        try:
            db.add(incident)
            db.commit()
            db.refresh(incident)
        except SQLAlchemyError as exc:
            db.rollback()
            log.error("Error creating incident: %s", exc, exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to create incident") from exc

        log.info("Incident saved with ID: %s", incident.id)
        return incident

    @staticmethod
    def update_incident(
        incident: Incident,
        type: Optional[str],
        description: Optional[str],
        location: Optional[str],
        severity: Optional[str],
        status: Optional[str],
        latitude: Optional[str],
        longitude: Optional[str],
        photos: Sequence[IncomingPhoto],
        db: Session,
        storage: StorageService,
    ) -> Incident:
        """Apply only the fields that were sent; new photos replace the stored ones."""
        coordinates = None
        if latitude and longitude:
            coordinates = (_parse_update_coordinate(latitude), _parse_update_coordinate(longitude))

        if type:
            incident.type = type  # type: ignore[assignment]
        if description:
            incident.description = description  # type: ignore[assignment]
        if location:
            incident.location = location  # type: ignore[assignment]
        if severity:
            incident.severity = severity  # type: ignore[assignment]
        if status:
            incident.status = status  # type: ignore[assignment]

        if coordinates:
            incident.latitude, incident.longitude = coordinates  # type: ignore[assignment]

        if photos:
            try:
                uploaded = upload_photos(photos, storage)
            except Exception as exc:
                log.error("Photo upload failed (update): %s", exc, exc_info=True)
                raise HTTPException(status_code=500, detail="Image upload failed.") from exc

            removed = delete_stored_photos(incident, storage)
            log.info("Replaced %s stored photo(s) on incident %s", removed, incident.id)
            _assign_photos(incident, uploaded)

        incident.updated_at = utc_now()  # type: ignore[assignment]
        try:
            db.commit()
            db.refresh(incident)
        except SQLAlchemyError as exc:
            db.rollback()
            log.error("Error updating incident: %s", exc, exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to update incident") from exc
        return incident

    @staticmethod
    def delete_incident(incident: Incident, db: Session, storage: StorageService) -> None:
        incident_id = incident.id
        removed = delete_stored_photos(incident, storage)
        try:
            db.delete(incident)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            log.error("Error deleting incident: %s", exc, exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to delete incident") from exc
        log.info("Deleted incident %s and %s stored photo(s)", incident_id, removed)

    @staticmethod
    def stats(db: Session) -> dict:
        incidents = db.query(Incident.severity, Incident.type).all()
        by_severity: dict[str, int] = {bucket: 0 for bucket in SEVERITY_BUCKETS}
        by_type: dict[str, int] = {}
        for severity, incident_type in incidents:
            by_severity[severity] = by_severity.get(severity, 0) + 1
            by_type[incident_type] = by_type.get(incident_type, 0) + 1
        return {
            "total": len(incidents),
            "by_severity": by_severity,
            "by_type": by_type,
        }
