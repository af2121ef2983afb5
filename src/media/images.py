# src/media/images.py — v1
"""Image payload checks: base64 validation and magic-number signatures.

The declared MIME type of an upload is never trusted on its own; the
leading bytes must match one of the known signatures for that type.
"""

from __future__ import annotations

import base64
import binascii
import re

_DATA_URL_PREFIX = re.compile(r"^data:[^;,]+;base64,")
_BASE64_BODY = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")

_CLOUDINARY_HOST = "res.cloudinary.com"
_CLOUDINARY_TRANSFORM = "f_auto,q_auto,w_1024,h_1024,c_limit/"

_HEIF_FTYP = bytes([0x00, 0x00, 0x00, 0x18, 0x66, 0x74, 0x79, 0x70])

# Known signatures per MIME type; WebP additionally needs "WEBP" at offset 8.
FILE_SIGNATURES: dict[str, tuple[bytes, ...]] = {
    "image/jpeg": (
        bytes([0xFF, 0xD8, 0xFF, 0xE0]),  # JFIF
        bytes([0xFF, 0xD8, 0xFF, 0xE1]),  # EXIF
        bytes([0xFF, 0xD8, 0xFF, 0xE2]),  # ICC
        bytes([0xFF, 0xD8, 0xFF, 0xDB]),  # raw
    ),
    "image/png": (bytes([0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A]),),
    "image/gif": (b"GIF87a", b"GIF89a"),
    "image/webp": (b"RIFF",),
    "image/bmp": (b"BM",),
    "image/tiff": (
        bytes([0x49, 0x49, 0x2A, 0x00]),  # little-endian
        bytes([0x4D, 0x4D, 0x00, 0x2A]),  # big-endian
    ),
    "image/x-icon": (bytes([0x00, 0x00, 0x01, 0x00]),),
    "image/heic": (_HEIF_FTYP,),
    "image/heif": (_HEIF_FTYP,),
}

_BLOCKED_TYPES = frozenset({"image/svg+xml"})


def strip_data_url(value: str) -> str:
    """Remove a leading ``data:<mime>;base64,`` prefix, if present."""
    return _DATA_URL_PREFIX.sub("", value, count=1)


def data_url_mime(value: str) -> str | None:
    """MIME type declared by a data URL prefix, or None."""
    match = _DATA_URL_PREFIX.match(value)
    if not match:
        return None
    return match.group(0)[len("data:"):].split(";", 1)[0]


def is_valid_base64(value: str) -> bool:
    """True for non-empty base64 (optionally data-URL prefixed)."""
    if not isinstance(value, str) or not value:
        return False
    body = strip_data_url(value)
    return bool(body) and bool(_BASE64_BODY.match(body))


def decode_base64(value: str) -> bytes:
    """Decode base64 (optionally data-URL prefixed).

    Raises:
        ValueError: If the payload is not valid base64.
    """
    if not is_valid_base64(value):
        raise ValueError("Payload is not valid base64")
    try:
        return base64.b64decode(strip_data_url(value), validate=True)
    except binascii.Error as exc:
        raise ValueError(f"Payload is not valid base64: {exc}") from exc


def _is_webp(data: bytes) -> bool:
    return len(data) >= 12 and data[8:12] == b"WEBP"


def validate_file_signature(data: bytes, mime_type: str) -> bool:
    """Check that *data* starts with a signature of *mime_type*.

    SVG is always rejected. Image types without a known signature pass;
    anything else that is not ``image/*`` fails.
    """
    if mime_type in _BLOCKED_TYPES:
        return False

    signatures = FILE_SIGNATURES.get(mime_type)
    if signatures is None:
        return mime_type.startswith("image/")

    for signature in signatures:
        if data.startswith(signature):
            if mime_type == "image/webp":
                return _is_webp(data)
            return True
    return False


def detect_file_type_from_signature(data: bytes) -> str | None:
    """Return the MIME type whose signature *data* starts with, or None."""
    for mime_type, signatures in FILE_SIGNATURES.items():
        for signature in signatures:
            if not data.startswith(signature):
                continue
            if mime_type == "image/webp" and not _is_webp(data):
                continue
            return mime_type
    return None


def optimize_cloudinary_url(url: str) -> str:
    """Ask Cloudinary for a resized, auto-format rendition of the image.

    Non-Cloudinary URLs and URLs without an ``/upload/`` segment are
    returned unchanged.
    """
    if _CLOUDINARY_HOST not in url or "/upload/" not in url:
        return url
    if f"/upload/{_CLOUDINARY_TRANSFORM}" in url:
        return url
    return url.replace("/upload/", f"/upload/{_CLOUDINARY_TRANSFORM}", 1)
