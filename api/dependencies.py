from fastapi import Request

from services.geocoding_service import GeocodingService
from services.storage_service import StorageService


def get_storage(request: Request) -> StorageService:
    """Process-wide storage gateway created at startup."""
    return request.app.state.storage


def get_geocoder(request: Request) -> GeocodingService:
    return request.app.state.geocoder
