"""
Device identifier utilities.

Device ids are opaque strings generated by the client. They are an
idempotency key for supports, not a credential, so they are hashed before
being used as storage keys and masked before being logged.
"""

import hashlib
from typing import Optional


def support_document_id(issue_id: int, device_id: str) -> str:
    """
    Deterministic storage key for the (issue_id, device_id) pair.

    Uses SHA-256 so arbitrary client strings (slashes, unicode, very long
    ids) map to a safe, fixed-length document id.
    """
    return hashlib.sha256(f"{issue_id}:{device_id}".encode("utf-8")).hexdigest()


def mask_device_id(device_id: Optional[str]) -> Optional[str]:
    """
    Mask device id for log lines.

    "a1b2c3d4e5f6" → "a1b2…"
    """
    if not device_id or not device_id.strip():
        return None
    if len(device_id) <= 4:
        return "…"
    return f"{device_id[:4]}…"
