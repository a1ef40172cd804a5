"""Content hashes used to tell whether stored phrase hints still apply."""
from __future__ import annotations

import hashlib

CONTENT_HASH_LENGTH = 16


def content_hash(text: str) -> str:
    """Compute a deterministic content digest of a document's text.

    Uses SHA-256 of the UTF-8 text and truncates to 16 hex chars.
    """
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:CONTENT_HASH_LENGTH]


def legacy_content_hash(text: str) -> str:
    """Digest written by older reader clients (32-bit rolling hash, base 36).

    Operates on UTF-16 code units so values match what those clients stored.
    """
    h = 0
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 1 << 32
    return _to_base36(abs(h))


def hash_matches(stored: str | None, text: str) -> bool:
    """Return True if *stored* is either digest scheme of *text*."""
    if not stored:
        return False
    return stored in (content_hash(text), legacy_content_hash(text))


def _to_base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))
