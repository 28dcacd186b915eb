from __future__ import annotations

import uuid


def new_id() -> str:
    """Opaque 32-char record id (fits the VARCHAR(32) keys)."""
    return uuid.uuid4().hex
