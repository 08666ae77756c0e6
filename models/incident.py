from datetime import datetime, timezone
import uuid

from sqlalchemy import JSON, Column, DateTime, Float, String, Text
from sqlalchemy.dialects.postgresql import UUID

from core.database import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Incident(Base):
    __tablename__ = "incidents"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    type = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    location = Column(String(255), nullable=True)
    location_text = Column(String(255), nullable=True)
    # Both set or both null
    latitude = Column(Float, nullable=True, default=None)
    longitude = Column(Float, nullable=True, default=None)
    severity = Column(String(40), nullable=False)
    date = Column(String(40), nullable=True)
    time = Column(String(40), nullable=True)
    status = Column(String(40), nullable=False, default="Open")

    # Ordered [{"url", "key", "name"}]; first entry mirrored in photo_url/photo_key
    photos = Column(JSON, nullable=False, default=list)
    photo_url = Column(String, nullable=True)
    photo_key = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)
