"""
Identity resolver: bearer credential -> ChronoGift user.

The first successful verification of a Google subject creates the user;
later ones only refresh display name and avatar.
"""

from app.db.helpers import translate_db_errors
from app.errors import InvalidCredentialError
from app.infrastructure.observability.logging import get_logger
from app.models.domain.user_domain import User
from app.repositories.user_repository import UserRepository
from app.services.google_identity_service import get_google_identity_service

logger = get_logger(__name__)


@translate_db_errors
async def resolve_identity(credential: str | None) -> User:
    """
    Resolve (or lazily create) the user behind a credential.

    Args:
        credential: Google access token or ID token

    Returns:
        The stored User

    Raises:
        InvalidCredentialError: missing or rejected credential
        UnavailableError: identity provider or database unavailable
    """
    credential = (credential or "").strip()
    if not credential:
        raise InvalidCredentialError("Credential is required")

    profile = await get_google_identity_service().fetch_profile(credential)

    user, created = await UserRepository.upsert_from_profile(profile)

    if created:
        logger.info("User created from first sign-in", user_id=user.user_id)
    else:
        logger.debug("User resolved", user_id=user.user_id)

    return user
