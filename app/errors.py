"""
Error taxonomy shared by services and routes.

Every failure a caller can see is one of these. Routes never build error
responses by hand; the handler in app.main renders ChronoGiftError into
{"error": message, "code": code, ...extra} with the class status code.
"""

from datetime import datetime
from typing import Any


class ChronoGiftError(Exception):
    """Base class for errors surfaced to API callers."""

    code = "error"
    status_code = 400

    def __init__(self, message: str, extra: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code, **self.extra}


class InvalidCredentialError(ChronoGiftError):
    """Identity provider rejected the credential."""

    code = "invalid_credential"
    status_code = 401


class ValidationError(ChronoGiftError):
    code = "validation_error"
    status_code = 422


class NotFoundError(ChronoGiftError):
    code = "not_found"
    status_code = 404


class ForbiddenError(ChronoGiftError):
    """Caller is not allowed to act on this resource (e.g. wrong recipient)."""

    code = "forbidden"
    status_code = 403


class NotYetUnlockedError(ChronoGiftError):
    code = "not_yet_unlocked"
    status_code = 403

    def __init__(self, unlock_at: datetime, message: str = "Gift is not yet unlocked"):
        super().__init__(message, extra={"unlock_at": unlock_at.isoformat()})
        self.unlock_at = unlock_at


class InvalidPasscodeError(ChronoGiftError):
    code = "invalid_passcode"
    status_code = 401


class EmailInUseError(ChronoGiftError):
    """Another Google account already owns this email address."""

    code = "email_in_use"
    status_code = 409


class AlreadyOpenedError(ChronoGiftError):
    code = "already_opened"
    status_code = 409


class UnavailableError(ChronoGiftError):
    """A dependency timed out or is down. Safe for the caller to retry."""

    code = "unavailable"
    status_code = 503

    def __init__(self, message: str, dependency: str, retry_after: int = 1):
        super().__init__(message, extra={"dependency": dependency})
        self.dependency = dependency
        self.retry_after = retry_after
