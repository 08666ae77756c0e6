import os
import sys
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_S3_BUCKET", "test-bucket")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from services.photo_service import IncomingPhoto  # noqa: E402
from services.storage_service import StoredPhoto  # noqa: E402


class FakeStorage:
    def __init__(self, fail_upload: bool = False) -> None:
        self.fail_upload = fail_upload
        self.uploaded: list[str] = []
        self.deleted: list[str] = []
        self.bucket = "fake-bucket"

    def upload(self, filename: str, content: bytes, content_type: str) -> StoredPhoto:
        if self.fail_upload:
            raise RuntimeError("S3 unavailable")
        key = f"incidents/{filename}"
        self.uploaded.append(key)
        return StoredPhoto(key=key, url=f"https://cdn.example.com/{key}")

    def delete(self, key) -> None:
        self.deleted.append(key)


class RecordingS3Client:
    def __init__(self, fail_delete: bool = False) -> None:
        self.fail_delete = fail_delete
        self.put_calls: list[dict] = []
        self.delete_calls: list[dict] = []

    def put_object(self, **kwargs):
        self.put_calls.append(kwargs)
        return {}

    def delete_object(self, **kwargs):
        self.delete_calls.append(kwargs)
        if self.fail_delete:
            raise RuntimeError("AccessDenied")
        return {}


class FakeGeocoder:
    def __init__(self, label: str = "Mount Rainier, Pierce County, Washington", fail: bool = False) -> None:
        self.label = label
        self.fail = fail
        self.calls: list[tuple[float, float]] = []
        self.url = "fake://geocoder"

    def reverse(self, latitude: float, longitude: float) -> str:
        self.calls.append((latitude, longitude))
        if self.fail:
            raise RuntimeError("geocoder down")
        return self.label

    def close(self) -> None:
        pass


def make_jpeg(gps: dict | None = None) -> bytes:
    image = Image.new("RGB", (8, 8), "white")
    buffer = BytesIO()
    if gps is None:
        image.save(buffer, format="JPEG")
    else:
        exif = Image.Exif()
        exif[0x8825] = gps
        image.save(buffer, format="JPEG", exif=exif)
    return buffer.getvalue()


def geotag(lat_dms, lat_ref, lng_dms, lng_ref) -> dict:
    return {1: lat_ref, 2: lat_dms, 3: lng_ref, 4: lng_dms}


def incoming(content: bytes, filename: str = "photo.jpg") -> IncomingPhoto:
    return IncomingPhoto(filename=filename, content_type="image/jpeg", content=content)


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
def fake_geocoder():
    return FakeGeocoder()
