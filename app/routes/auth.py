"""
auth.py
-------
Purpose:
    Sign-in endpoints. The browser obtains a Google credential itself and
    hands it to us; we resolve it to a ChronoGift user (creating one on
    first sight) and return that user.

Usage:
    1. POST /auth/identity {"credential": "<google access or ID token>"}
    2. POST /auth/google {"accessToken": "..."} - same thing, older client shape
    3. GET /auth/me with Authorization: Bearer <credential>
"""

from fastapi import APIRouter, Depends

from app.auth.verify import auth_dependency
from app.models.api.auth_request import IdentityRequest
from app.models.api.auth_response import IdentityResponse, UserResponse
from app.models.domain.user_domain import User
from app.services.identity_service import resolve_identity

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/identity", response_model=IdentityResponse)
async def identity(body: IdentityRequest):
    """
    Resolve a Google credential to a user.

    Raises:
        401: credential rejected by Google
        409: email already linked to another Google account
        503: Google or the database unreachable
    """
    user = await resolve_identity(body.credential)
    return IdentityResponse(user=UserResponse.from_domain(user))


@router.post("/google", response_model=IdentityResponse)
async def google_login(body: IdentityRequest):
    user = await resolve_identity(body.credential)
    return IdentityResponse(message="Login successful", user=UserResponse.from_domain(user))


@router.get("/me", response_model=IdentityResponse)
async def me(user: User = Depends(auth_dependency)):
    return IdentityResponse(message="Authenticated", user=UserResponse.from_domain(user))
