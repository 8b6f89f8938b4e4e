"""
Keyed pseudonyms for recipient emails in log lines.

A gift's recipient usually has no account yet, so their address stays out of
logs; log lines carry ``recipient_hash`` instead. The key is HASHING_SECRET, so
the same recipient maps to the same pseudonym across gifts and restarts.
"""

from __future__ import annotations

import hashlib
import hmac

from app.config import settings
from app.models.domain.gift_domain import recipient_key

MIN_SECRET_LENGTH = 16

__all__ = ["PseudonymError", "pseudonymize", "recipient_hash"]


class PseudonymError(RuntimeError):
    """HASHING_SECRET is missing or too weak to key pseudonyms."""


def _key() -> bytes:
    secret = settings.HASHING_SECRET
    if not secret:
        raise PseudonymError("HASHING_SECRET is not configured")
    if len(secret) < MIN_SECRET_LENGTH:
        raise PseudonymError(
            f"HASHING_SECRET must be at least {MIN_SECRET_LENGTH} characters"
        )
    return secret.encode("utf-8")


def pseudonymize(value: str, *, scope: str) -> str:
    """Hex HMAC-SHA256 of ``scope:value``; scopes keep equal values in different fields apart."""
    message = f"{scope}:{value or ''}".encode("utf-8")
    return hmac.new(_key(), message, hashlib.sha256).hexdigest()


def recipient_hash(email: str | None) -> str:
    return pseudonymize(recipient_key(email), scope="recipient")
