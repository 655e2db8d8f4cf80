"""Session token helpers for town players."""

from __future__ import annotations

import hashlib
import secrets


TOKEN_BYTES = 24
ID_BYTES = 8


def generate_token() -> str:
    """Generate a URL-safe session token for a joining player."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def generate_id() -> str:
    """Generate a short URL-safe identifier for towns and players."""
    return secrets.token_urlsafe(ID_BYTES)


def hash_token(token: str, server_salt: str) -> str:
    """Create deterministic token hash via sha256(token + server_salt)."""
    payload = f"{token}{server_salt}".encode("utf-8")
    return hashlib.sha256(payload).hexdigest()
