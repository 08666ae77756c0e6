from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel


class IncidentPhotoResponse(BaseModel):
    url: str
    key: str
    name: str = ""


class IncidentResponse(BaseModel):
    id: UUID
    type: str
    description: str
    location: Optional[str] = None
    location_text: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    severity: str
    date: Optional[str] = None
    time: Optional[str] = None
    status: str
    photos: list[IncidentPhotoResponse] = []
    photo_url: Optional[str] = None
    photo_key: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    @field_serializer("created_at", "updated_at")
    def serialize_timestamp(self, value: datetime) -> str:
        # Naive values come back from SQLite and are stored as UTC
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class IncidentStatsResponse(BaseModel):
    total: int
    # Open string domain: any severity/type value becomes a key
    by_severity: dict[str, int]
    by_type: dict[str, int]

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str
