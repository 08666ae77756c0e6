import logging
import os
import secrets
import time
from dataclasses import dataclass
from typing import Any, Optional

import boto3

from core.config import get_storage_settings

log = logging.getLogger(__name__)

KEY_PREFIX = "incidents"


@dataclass(frozen=True)
class StoredPhoto:
    key: str
    url: str


def create_object_key(filename: str = "") -> str:
    _, ext = os.path.splitext(filename or "")
    unique = secrets.token_hex(6)
    return f"{KEY_PREFIX}/{int(time.time() * 1000)}-{unique}{ext}"


class StorageService:
    """Thin gateway over the S3 bucket holding incident photos."""

    def __init__(self, client: Any, bucket: str, region: str, public_base_url: Optional[str] = None) -> None:
        self.client = client
        self.bucket = bucket
        self.region = region
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None

    @classmethod
    def from_env(cls) -> "StorageService":
        settings = get_storage_settings()
        client = boto3.client(
            "s3",
            region_name=settings["region"],
            aws_access_key_id=settings["access_key_id"],
            aws_secret_access_key=settings["secret_access_key"],
        )
        return cls(
            client=client,
            bucket=settings["bucket"],
            region=settings["region"],
            public_base_url=settings["public_base_url"],
        )

    def build_public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def upload(self, filename: str, content: bytes, content_type: str) -> StoredPhoto:
        key = create_object_key(filename)
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=content,
            ContentType=content_type,
        )
        log.info("Uploaded %s (%s bytes) to s3://%s/%s", filename, len(content), self.bucket, key)
        return StoredPhoto(key=key, url=self.build_public_url(key))

    def delete(self, key: Optional[str]) -> None:
        if not key:
            return
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except Exception as exc:
            log.warning("Failed to delete s3://%s/%s: %s", self.bucket, key, exc)
