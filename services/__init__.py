"""
Services module - incident handling, location resolution and the storage/geocoding gateways.
"""
from services.incident_service import IncidentService

__all__ = ["IncidentService"]
