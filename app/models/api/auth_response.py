# app/models/api/auth_response.py
from pydantic import BaseModel, Field

from app.models.domain.user_domain import User


class UserResponse(BaseModel):
    """Public shape of a user."""

    id: str
    email: str
    name: str | None = None
    picture: str | None = None

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.user_id,
            email=user.email,
            name=user.display_name,
            picture=user.avatar_url,
        )


class IdentityResponse(BaseModel):
    """Response for POST /auth/identity and GET /auth/me"""

    message: str = "Authentication successful"
    user: UserResponse = Field(..., description="Resolved ChronoGift user")
