"""Application-wide identifier utilities."""

from __future__ import annotations

import uuid


def generate_id() -> str:
    """Generate a 32-char lowercase hex primary key."""
    return uuid.uuid4().hex


def new_request_id(prefix: str) -> str:
    """Build a stateless, human-readable request id such as `cat-3f2a...`."""
    return f"{prefix}-{uuid.uuid4().hex}"
