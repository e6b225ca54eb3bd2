# services/image_payload.py
# -*- coding: utf-8 -*-
"""
Boundary check for submitted images.

The browser compresses and base64-encodes images into data URLs before
upload. Here we only check the declared type against the allow-list and the
decoded size against the ceiling; the complaint service stores the string
untouched.
"""

import base64
import binascii
import re
from typing import List

from core.config import IMAGE_ALLOWED_TYPES, IMAGE_MAX_BYTES
from core.errors import ValidationError

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<body>.+)$", re.DOTALL)


def validate_image(payload: str, max_bytes: int = IMAGE_MAX_BYTES) -> None:
    match = _DATA_URL_RE.match(payload.strip())
    if match is None:
        raise ValidationError("Images must be base64 data URLs")

    mime = match.group("mime").lower()
    if mime not in IMAGE_ALLOWED_TYPES:
        raise ValidationError("Please upload a valid image file (JPEG, PNG, GIF, WebP)")

    try:
        raw = base64.b64decode(match.group("body"), validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Image data is not valid base64")

    if len(raw) > max_bytes:
        raise ValidationError(f"Image size should be less than {max_bytes // (1024 * 1024)}MB")


def validate_images(payloads: List[str], max_bytes: int = IMAGE_MAX_BYTES) -> None:
    for payload in payloads:
        validate_image(payload, max_bytes=max_bytes)
