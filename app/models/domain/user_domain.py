from datetime import datetime

from pydantic import BaseModel


class GoogleProfile(BaseModel):
    """Verified profile returned by the identity provider."""

    sub: str
    email: str
    name: str | None = None
    picture: str | None = None


class User(BaseModel):
    """A person known to ChronoGift, keyed by their Google subject id."""

    user_id: str
    google_sub: str
    email: str
    display_name: str | None = None
    avatar_url: str | None = None
    created_at: datetime
    updated_at: datetime
