# app/models/api/auth_request.py
from pydantic import AliasChoices, BaseModel, Field


class IdentityRequest(BaseModel):
    """Body for POST /auth/identity (and the /auth/google alias)."""

    credential: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("credential", "accessToken", "access_token"),
        description="Google access token or ID token",
    )
