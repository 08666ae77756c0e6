from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from api.dependencies import get_geocoder, get_storage
from core.database import get_db
from schemas.incident import IncidentResponse, MessageResponse
from services.geocoding_service import GeocodingService
from services.incident_service import IncidentService
from services.photo_service import read_photos
from services.storage_service import StorageService

router = APIRouter(prefix="/incidents", tags=["incidents"])


@router.get("", response_model=list[IncidentResponse])
def list_incidents(db: Session = Depends(get_db)):
    return IncidentService.list_incidents(db)


@router.get("/{incident_id}", response_model=IncidentResponse)
def get_incident(incident_id: str, db: Session = Depends(get_db)):
    return IncidentService.get_incident(incident_id, db)


@router.post("", response_model=IncidentResponse, status_code=status.HTTP_201_CREATED)
def create_incident(
    incident_type: Optional[str] = Form(None, alias="type"),
    description: Optional[str] = Form(None),
    severity: Optional[str] = Form(None),
    latitude: Optional[str] = Form(None),
    longitude: Optional[str] = Form(None),
    location_text: Optional[str] = Form(None, alias="locationText"),
    location_mode: Optional[str] = Form(None, alias="locationMode"),
    photos: list[UploadFile] = File(default=[]),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
    geocoder: GeocodingService = Depends(get_geocoder),
):
    """Report a new incident; photos are optional and may carry the location."""
    loaded = read_photos(photos)
    return IncidentService.create_incident(
        type=incident_type,
        description=description,
        severity=severity,
        latitude=latitude,
        longitude=longitude,
        location_text=location_text,
        location_mode=location_mode,
        photos=loaded,
        db=db,
        storage=storage,
        geocoder=geocoder,
    )


@router.put("/{incident_id}", response_model=IncidentResponse)
def update_incident(
    incident_id: str,
    incident_type: Optional[str] = Form(None, alias="type"),
    description: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    severity: Optional[str] = Form(None),
    incident_status: Optional[str] = Form(None, alias="status"),
    latitude: Optional[str] = Form(None),
    longitude: Optional[str] = Form(None),
    photos: list[UploadFile] = File(default=[]),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    incident = IncidentService.get_incident(incident_id, db)
    loaded = read_photos(photos)
    return IncidentService.update_incident(
        incident=incident,
        type=incident_type,
        description=description,
        location=location,
        severity=severity,
        status=incident_status,
        latitude=latitude,
        longitude=longitude,
        photos=loaded,
        db=db,
        storage=storage,
    )


@router.delete("/{incident_id}", response_model=MessageResponse)
def delete_incident(
    incident_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    incident = IncidentService.get_incident(incident_id, db)
    IncidentService.delete_incident(incident, db, storage)
    return {"message": "Incident deleted."}
