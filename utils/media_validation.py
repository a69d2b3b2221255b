"""Helpers for turning uploaded media into transportable encodings."""

import base64
import mimetypes
import os
from typing import Optional, Union

import aiofiles

from models.conversation import UploadedFile

DATA_URL_PREFIX = "data:"
DEFAULT_IMAGE_TYPE = "image/jpeg"


def ensure_base64_image(raw: bytes) -> bytes:
    """Return base64-encoded image bytes, encoding binary input when necessary."""
    try:
        raw.decode("utf-8")
        return raw
    except UnicodeDecodeError:
        return base64.b64encode(raw)


def is_image_media_type(media_type: Optional[str]) -> bool:
    """Return True when the media type names an image."""
    return (media_type or "").lower().startswith("image/")


def guess_media_type(filename: str) -> str:
    """Guess a media type from a filename, defaulting to a generic binary type."""
    media_type, _ = mimetypes.guess_type(filename)
    return media_type or "application/octet-stream"


def to_data_url(payload: Union[str, bytes], media_type: str = DEFAULT_IMAGE_TYPE) -> str:
    """Return `payload` as a data URL.

    Data URLs pass through untouched. Bare base64 text is wrapped; raw binary
    is base64-encoded first.
    """
    if isinstance(payload, bytes):
        payload = ensure_base64_image(payload).decode("utf-8")
    payload = payload.strip()
    if not payload:
        raise ValueError("Image payload is required.")
    if payload.startswith(DATA_URL_PREFIX):
        return payload
    return f"data:{media_type};base64,{payload}"


async def read_file_bytes(upload: UploadedFile) -> bytes:
    """Return the bytes of an uploaded file, reading from disk when needed."""
    if upload.data is not None:
        return upload.data
    if not upload.path:
        raise ValueError(f"No content available for {upload.name!r}.")
    async with aiofiles.open(upload.path, "rb") as fh:
        return await fh.read()


async def read_as_data_url(upload: UploadedFile) -> str:
    """Read an uploaded file into a `data:<type>;base64,...` string."""
    raw = await read_file_bytes(upload)
    if not raw:
        raise ValueError(f"Uploaded file {upload.name!r} is empty.")
    encoded = base64.b64encode(raw).decode("utf-8")
    return f"data:{upload.media_type or 'application/octet-stream'};base64,{encoded}"


def upload_from_path(path: str) -> UploadedFile:
    """Describe a file on disk as an upload, guessing its media type from the name."""
    name = os.path.basename(path)
    return UploadedFile(name=name, media_type=guess_media_type(name), path=path)
