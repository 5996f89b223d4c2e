from __future__ import annotations

import base64
import binascii
import math
import re
from dataclasses import dataclass
from typing import Any

from ..core.constants import ALLOWED_PHOTO_TYPES, MAX_PHOTO_BYTES
from ..core.exceptions import ValidationError

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<payload>.*)$", re.DOTALL)


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_float(value: Any, field_name: str) -> float:
    # bool is an int subclass; "true" is never a coordinate
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a finite number")
    return number


def require_coordinates(latitude: Any, longitude: Any) -> tuple[float, float]:
    lat = require_float(latitude, "latitude")
    lng = require_float(longitude, "longitude")
    if not -90.0 <= lat <= 90.0:
        raise ValidationError("latitude must be between -90 and 90")
    if not -180.0 <= lng <= 180.0:
        raise ValidationError("longitude must be between -180 and 180")
    return lat, lng


def require_positive(value: Any, field_name: str) -> float:
    number = require_float(value, field_name)
    if number <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return number


@dataclass(frozen=True)
class Photo:
    """A captured image, normalized to a data URL."""

    mime_type: str
    size_bytes: int
    data_url: str


def require_photo(value: Any, *, max_bytes: int = MAX_PHOTO_BYTES) -> Photo:
    """Validate a client-supplied photo (data URL or bare base64).

    Bare base64 is taken as JPEG.
    """
    raw = require_non_empty(value, "photo")

    match = _DATA_URL_RE.match(raw)
    if match:
        mime_type = match.group("mime").lower()
        payload = match.group("payload")
    else:
        mime_type = "image/jpeg"
        payload = raw

    if mime_type not in ALLOWED_PHOTO_TYPES:
        raise ValidationError(f"Unsupported photo type: {mime_type}")

    payload = "".join(payload.split())
    try:
        decoded = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("photo is not valid base64")

    if not decoded:
        raise ValidationError("photo is empty")
    if len(decoded) > max_bytes:
        raise ValidationError(f"photo exceeds {max_bytes} bytes")

    return Photo(mime_type=mime_type, size_bytes=len(decoded), data_url=f"data:{mime_type};base64,{payload}")
