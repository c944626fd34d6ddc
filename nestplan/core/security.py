"""Workspace API token helpers."""

import hashlib
import secrets


def hash_api_token(raw_token: str) -> str:
    """One-way SHA-256 hash for API token storage.

    Tokens are looked up by their hash on every request, so the hash must be
    deterministic. The raw token carries 256 bits of entropy.
    """
    return hashlib.sha256(raw_token.encode()).hexdigest()


def generate_api_token() -> str:
    """Generate a cryptographically secure 256-bit API token."""
    return secrets.token_urlsafe(32)


def token_prefix(raw_token: str) -> str:
    """Short, non-secret prefix used to tell tokens apart in listings."""
    return raw_token[:8]
