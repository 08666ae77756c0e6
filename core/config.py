"""
Runtime settings read from the environment (.env is loaded for local runs).
"""
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

MAX_PHOTOS = 5
MAX_PHOTO_SIZE = 5 * 1024 * 1024

_DEFAULT_GEOCODER_URL = "https://nominatim.openstreetmap.org/reverse"
_DEFAULT_USER_AGENT = "TrailIncidentBackend/1.0"


def get_port() -> int:
    try:
        return int(os.getenv("PORT", "3001"))
    except ValueError:
        return 3001


def get_log_level() -> str:
    return (os.getenv("LOG_LEVEL") or "INFO").strip().upper()


def get_cors_origins() -> list[str]:
    env_value = os.getenv("CORS_ALLOWED_ORIGINS")
    if not env_value:
        return ["*"]

    values = [item.strip() for item in env_value.split(",") if item.strip()]
    return values or ["*"]


def get_storage_settings() -> dict:
    """Return the S3 settings; region and bucket are mandatory."""
    region = (os.getenv("AWS_REGION") or "").strip()
    bucket = (os.getenv("AWS_S3_BUCKET") or "").strip()
    if not region or not bucket:
        raise ValueError("AWS_REGION and AWS_S3_BUCKET must be set in .env file")

    public_base_url: Optional[str] = (os.getenv("AWS_S3_PUBLIC_BASE_URL") or "").strip().rstrip("/") or None
    return {
        "region": region,
        "bucket": bucket,
        "access_key_id": os.getenv("AWS_ACCESS_KEY_ID") or None,
        "secret_access_key": os.getenv("AWS_SECRET_ACCESS_KEY") or None,
        "public_base_url": public_base_url,
    }


def get_geocoder_settings() -> dict:
    timeout_value = os.getenv("GEOCODER_TIMEOUT")
    timeout = 5.0
    if timeout_value:
        try:
            timeout = float(timeout_value)
        except ValueError:
            timeout = 5.0

    return {
        "url": (os.getenv("GEOCODER_URL") or _DEFAULT_GEOCODER_URL).strip(),
        "timeout": timeout,
        "user_agent": (os.getenv("GEOCODER_USER_AGENT") or _DEFAULT_USER_AGENT).strip(),
    }
