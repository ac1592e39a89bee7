"""
Input validation utilities for the Storefront backend.

Provides slug derivation and base64 photo decoding for catalog writes.
"""
import base64
import binascii
import re
import unicodedata
import uuid

from domain.errors import ValidationError


def slugify(value: str | None) -> str:
    """
    Derive a URL-safe slug from a display name.

    Deterministic for any name with at least one ASCII letter or digit;
    names that reduce to nothing get a random hex slug.
    """
    condensed = " ".join(str(value or "").split()).lower()
    ascii_name = (
        unicodedata.normalize("NFKD", condensed)
        .encode("ascii", "ignore")
        .decode("ascii")
    )
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_name).strip("-")
    if not slug:
        slug = uuid.uuid4().hex
    return slug


def fix_base64_padding(data: str) -> str:
    """Pad a base64 string to a multiple of 4 characters."""
    missing = len(data) % 4
    if missing:
        data += "=" * (4 - missing)
    return data


def decode_base64(data: str, field: str = "photo") -> bytes:
    """
    Decode base64 (standard alphabet, padding optional).

    Raises:
        ValidationError(400) if the payload is not valid base64
    """
    try:
        return base64.b64decode(fix_base64_padding(data.strip()), validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Invalid base64 encoding", field=field)


def validate_photo(data: str, max_bytes: int) -> bytes:
    """Decode a base64 photo and enforce the size cap (inclusive)."""
    raw = decode_base64(data)
    if len(raw) > max_bytes:
        raise ValidationError(
            f"Photo must be at most {max_bytes} bytes, got {len(raw)}",
            field="photo",
        )
    return raw
