"""
Persistence for users keyed by Google subject id.
"""

from typing import Any

from app.db.helpers import DatabaseError, fetch_one
from app.errors import EmailInUseError
from app.infrastructure.observability.logging import get_logger
from app.models.domain.user_domain import GoogleProfile, User

logger = get_logger(__name__)

EMAIL_CONSTRAINT = "users_email_key"


def _row_to_user(row: dict[str, Any]) -> User:
    return User(
        user_id=str(row["id"]),
        google_sub=row["google_sub"],
        email=row["email"],
        display_name=row.get("display_name"),
        avatar_url=row.get("avatar_url"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class UserRepository:
    """Persistence helpers for users."""

    @classmethod
    async def upsert_from_profile(cls, profile: GoogleProfile) -> tuple[User, bool]:
        """
        Create the user for an unseen subject id, or refresh display fields.

        The UNIQUE constraint on google_sub makes this safe under concurrent
        first logins: one INSERT wins, the other turns into the UPDATE branch.
        Emails are unique case-insensitively; a new subject arriving with an
        email another account already holds is refused.

        Returns:
            (user, created)

        Raises:
            EmailInUseError: email belongs to a different Google account
        """
        query = """
            INSERT INTO users (google_sub, email, display_name, avatar_url)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (google_sub)
            DO UPDATE SET
                display_name = EXCLUDED.display_name,
                avatar_url = EXCLUDED.avatar_url,
                updated_at = NOW()
            RETURNING id, google_sub, email, display_name, avatar_url,
                      created_at, updated_at, (xmax = 0) AS inserted
        """
        try:
            row = await fetch_one(
                query, (profile.sub, profile.email.strip(), profile.name, profile.picture)
            )
        except DatabaseError as e:
            if e.constraint != EMAIL_CONSTRAINT:
                raise
            logger.warning("Sign-in refused, email owned by another account", google_sub=profile.sub)
            raise EmailInUseError(
                "This email address is already linked to another Google account"
            ) from e
        return _row_to_user(row), bool(row["inserted"])

    @classmethod
    async def get_by_id(cls, user_id: str) -> User | None:
        query = """
            SELECT id, google_sub, email, display_name, avatar_url, created_at, updated_at
            FROM users
            WHERE id = %s
        """
        row = await fetch_one(query, (user_id,))
        return _row_to_user(row) if row else None
