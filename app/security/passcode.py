"""
Salted one-way hashing for gift passcodes.

Stored format: ``pbkdf2_sha256$<iterations>$<salt_hex>$<hash_hex>``. The
iteration count travels with the hash so PASSCODE_HASH_ITERATIONS can be raised
without invalidating existing gifts.
"""

from __future__ import annotations

import secrets

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from app.config import settings

ALGORITHM = "pbkdf2_sha256"
SALT_BYTES = 16
KEY_LENGTH = 32

__all__ = ["hash_passcode", "verify_passcode", "PasscodeFormatError"]


class PasscodeFormatError(ValueError):
    """Raised when a stored passcode hash cannot be parsed."""


def _kdf(salt: bytes, iterations: int) -> PBKDF2HMAC:
    # A PBKDF2HMAC instance is single-use: one derive() or verify() call.
    return PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )


def hash_passcode(passcode: str, *, iterations: int | None = None) -> str:
    """Hash a plaintext passcode with a fresh random salt."""
    if not passcode:
        raise ValueError("passcode must be non-empty")

    rounds = iterations or settings.PASSCODE_HASH_ITERATIONS
    salt = secrets.token_bytes(SALT_BYTES)
    digest = _kdf(salt, rounds).derive(passcode.encode("utf-8"))
    return f"{ALGORITHM}${rounds}${salt.hex()}${digest.hex()}"


def _parse(encoded: str) -> tuple[int, bytes, bytes]:
    parts = (encoded or "").split("$")
    if len(parts) != 4:
        raise PasscodeFormatError("Malformed passcode hash")
    algorithm, rounds, salt_hex, digest_hex = parts
    if algorithm != ALGORITHM:
        raise PasscodeFormatError(f"Unsupported passcode algorithm: {algorithm}")
    try:
        return int(rounds), bytes.fromhex(salt_hex), bytes.fromhex(digest_hex)
    except ValueError as e:
        raise PasscodeFormatError("Malformed passcode hash") from e


def verify_passcode(passcode: str, encoded: str) -> bool:
    """
    Check a plaintext passcode against a stored hash.

    ``PBKDF2HMAC.verify`` compares in constant time. An empty passcode never
    matches.
    """
    rounds, salt, expected = _parse(encoded)
    if not passcode:
        return False
    try:
        _kdf(salt, rounds).verify(passcode.encode("utf-8"), expected)
    except InvalidKey:
        return False
    return True
