# tests/unit/media/test_unit_images.py — v1
"""Tests for media/images.py — base64 checks, signatures, Cloudinary URLs."""

from __future__ import annotations

import pytest

from chatrouter.media.images import (
    data_url_mime,
    decode_base64,
    detect_file_type_from_signature,
    is_valid_base64,
    optimize_cloudinary_url,
    strip_data_url,
    validate_file_signature,
)

WEBP_BYTES = b"RIFF\x00\x00\x00\x00WEBPVP8 "
RIFF_WAV_BYTES = b"RIFF\x00\x00\x00\x00WAVEfmt "


class TestDataUrl:
    def test_strip(self):
        assert strip_data_url("data:image/png;base64,AAAA") == "AAAA"

    def test_strip_raw_unchanged(self):
        assert strip_data_url("AAAA") == "AAAA"

    def test_mime(self):
        assert data_url_mime("data:image/webp;base64,AAAA") == "image/webp"
        assert data_url_mime("AAAA") is None


class TestBase64:
    @pytest.mark.parametrize("value", ["AAAA", "aGVsbG8=", "data:image/png;base64,aGk="])
    def test_valid(self, value):
        assert is_valid_base64(value)

    @pytest.mark.parametrize("value", ["", "data:image/png;base64,", "not base64!!", "abc==="])
    def test_invalid(self, value):
        assert not is_valid_base64(value)

    def test_decode(self, png_b64, png_bytes):
        assert decode_base64(f"data:image/png;base64,{png_b64}") == png_bytes

    def test_decode_bad_padding(self):
        with pytest.raises(ValueError):
            decode_base64("abc")

    def test_decode_rejects_garbage(self):
        with pytest.raises(ValueError, match="not valid base64"):
            decode_base64("%%%")


class TestFileSignature:
    def test_png(self, png_bytes):
        assert validate_file_signature(png_bytes, "image/png")
        assert not validate_file_signature(png_bytes, "image/jpeg")

    @pytest.mark.parametrize("marker", [0xE0, 0xE1, 0xE2, 0xDB])
    def test_jpeg_variants(self, marker):
        assert validate_file_signature(bytes([0xFF, 0xD8, 0xFF, marker]) + b"\x00" * 8, "image/jpeg")

    def test_gif(self):
        assert validate_file_signature(b"GIF89a....", "image/gif")

    def test_webp_requires_marker(self):
        assert validate_file_signature(WEBP_BYTES, "image/webp")
        assert not validate_file_signature(RIFF_WAV_BYTES, "image/webp")

    def test_svg_blocked(self):
        assert not validate_file_signature(b"<svg xmlns='...'/>", "image/svg+xml")

    def test_unknown_image_type_passes(self):
        assert validate_file_signature(b"\x00\x01", "image/avif")

    def test_non_image_rejected(self):
        assert not validate_file_signature(b"%PDF-1.7", "application/pdf")

    def test_short_payload(self):
        assert not validate_file_signature(b"\x89P", "image/png")


class TestDetectFileType:
    def test_png(self, png_bytes):
        assert detect_file_type_from_signature(png_bytes) == "image/png"

    def test_webp(self):
        assert detect_file_type_from_signature(WEBP_BYTES) == "image/webp"

    def test_riff_non_webp(self):
        assert detect_file_type_from_signature(RIFF_WAV_BYTES) is None

    def test_unknown(self):
        assert detect_file_type_from_signature(b"hello world") is None


class TestCloudinary:
    def test_inserts_transform(self):
        url = "https://res.cloudinary.com/demo/image/upload/v123/sample.jpg"
        assert optimize_cloudinary_url(url) == (
            "https://res.cloudinary.com/demo/image/upload/"
            "f_auto,q_auto,w_1024,h_1024,c_limit/v123/sample.jpg"
        )

    def test_idempotent(self):
        url = "https://res.cloudinary.com/demo/image/upload/v123/sample.jpg"
        once = optimize_cloudinary_url(url)
        assert optimize_cloudinary_url(once) == once

    @pytest.mark.parametrize("url", [
        "https://example.com/upload/a.png",
        "https://res.cloudinary.com/demo/image/fetch/a.png",
    ])
    def test_untouched(self, url):
        assert optimize_cloudinary_url(url) == url
