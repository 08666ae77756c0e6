from dataclasses import dataclass
from typing import Iterable, Optional

from fastapi import HTTPException, UploadFile

from core.config import MAX_PHOTO_SIZE, MAX_PHOTOS


@dataclass(frozen=True)
class IncomingPhoto:
    filename: str
    content_type: str
    content: bytes


def read_photos(photos: Optional[Iterable[UploadFile]]) -> list[IncomingPhoto]:
    """
    Validate multipart photo uploads and load them into memory.
    Order is preserved; it decides which geotag wins and which photo is primary.
    """
    uploads = [photo for photo in (photos or []) if photo is not None and photo.filename]
    if len(uploads) > MAX_PHOTOS:
        raise HTTPException(status_code=413, detail="File too large or upload error.")

    loaded: list[IncomingPhoto] = []
    for photo in uploads:
        content_type = (photo.content_type or "").lower()
        if not content_type.startswith("image/"):
            raise HTTPException(status_code=400, detail="File must be an image.")
        contents = photo.file.read()
        if len(contents) > MAX_PHOTO_SIZE:
            raise HTTPException(status_code=413, detail="File too large or upload error.")
        loaded.append(IncomingPhoto(filename=photo.filename or "", content_type=content_type, content=contents))

    return loaded
