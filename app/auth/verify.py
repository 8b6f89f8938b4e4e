"""
verify.py
---------
Purpose:
    Bearer-credential authentication for protected routes.

Notes:
    - The bearer value is a Google access token or ID token.
    - It is resolved through the identity resolver, which also creates the
      ChronoGift user on first sight.
    - `auth_dependency` requires a user; `optional_auth_dependency` lets
      routes that also accept other proof (email-only open) run without one.
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.errors import InvalidCredentialError
from app.models.domain.user_domain import User
from app.services.identity_service import resolve_identity

_security = HTTPBearer(auto_error=False)


async def auth_dependency(
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
) -> User:
    if credentials is None or not credentials.credentials:
        raise InvalidCredentialError("Authorization bearer credential is required")
    return await resolve_identity(credentials.credentials)


async def optional_auth_dependency(
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
) -> User | None:
    if credentials is None or not credentials.credentials:
        return None
    return await resolve_identity(credentials.credentials)
