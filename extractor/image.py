from __future__ import annotations

import base64
import binascii
from typing import Optional

from pydantic import BaseModel, Field

from config.settings import get_settings
from extractor.errors import ImageInputError


class ImagePayload(BaseModel):
    mime_type: str = Field(..., description="Image MIME type, e.g. image/png")
    data: str = Field(..., description="Base64-encoded image bytes")
    size: int = Field(..., description="Decoded size in bytes")

    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


def _check_mime(mime_type: Optional[str]) -> str:
    mime = (mime_type or "").strip().lower()
    if not mime.startswith("image/"):
        raise ImageInputError(f"Unsupported content type: {mime_type or 'unknown'}")
    return mime


def _check_size(size: int, max_bytes: Optional[int]) -> None:
    if size == 0:
        raise ImageInputError("Image is empty")
    limit = max_bytes if max_bytes is not None else get_settings().max_image_bytes
    if size > limit:
        raise ImageInputError(f"Image is {size} bytes, limit is {limit}")


def from_bytes(raw: bytes, mime_type: Optional[str], max_bytes: Optional[int] = None) -> ImagePayload:
    """Wrap uploaded file bytes for the model call."""
    mime = _check_mime(mime_type)
    _check_size(len(raw or b""), max_bytes)
    encoded = base64.b64encode(raw).decode("ascii")
    return ImagePayload(mime_type=mime, data=encoded, size=len(raw))


def from_data_url(url: str, max_bytes: Optional[int] = None) -> ImagePayload:
    """Parse a pasted ``data:<mime>;base64,<payload>`` string.

    Clipboard images reach us this way: the mime type sits between ``data:``
    and the first ``;``, the payload follows the first comma.
    """
    text = (url or "").strip()
    if not text.startswith("data:") or "," not in text:
        raise ImageInputError("Expected a data URL like data:image/png;base64,...")

    meta, payload = text.split(",", 1)
    parts = meta[len("data:"):].split(";")
    if "base64" not in [p.strip().lower() for p in parts[1:]]:
        raise ImageInputError("Only base64 data URLs are supported")
    mime = _check_mime(parts[0])

    payload = "".join(payload.split())
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageInputError(f"Invalid base64 image data: {exc}") from exc

    _check_size(len(raw), max_bytes)
    return ImagePayload(mime_type=mime, data=payload, size=len(raw))
