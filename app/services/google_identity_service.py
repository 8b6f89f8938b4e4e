"""
Google identity provider client.

Turns an opaque credential from the browser into a verified GoogleProfile.
Two credential shapes are accepted:

- OAuth access tokens (what useGoogleLogin hands the client): exchanged at the
  userinfo endpoint.
- Google ID tokens (what the Sign-In button hands the client): verified
  locally against Google's JWKS, audience GOOGLE_CLIENT_ID.

No retries here; timeouts surface as UnavailableError and the caller decides.
"""

import asyncio

import httpx
import jwt
from jwt import PyJWKClient
from jwt.exceptions import InvalidTokenError, PyJWKClientConnectionError, PyJWKClientError

from app.config import settings
from app.errors import InvalidCredentialError, UnavailableError
from app.infrastructure.observability.logging import get_logger
from app.models.domain.user_domain import GoogleProfile

logger = get_logger(__name__)

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")
REJECTED_STATUS_CODES = {400, 401, 403}


def looks_like_jwt(credential: str) -> bool:
    parts = credential.split(".")
    return len(parts) == 3 and all(parts)


class GoogleIdentityService:
    """
    Verify Google credentials and return the caller's profile.

    Args:
        userinfo_url: OAuth2 userinfo endpoint
        jwks_url: Google signing keys endpoint (ID tokens)
        client_id: Expected ID token audience; ID tokens are refused when unset
        timeout: Seconds allowed for each provider call
        transport: Optional httpx transport (tests)
    """

    def __init__(
        self,
        userinfo_url: str | None = None,
        jwks_url: str | None = None,
        client_id: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.userinfo_url = userinfo_url or settings.GOOGLE_USERINFO_URL
        self.jwks_url = jwks_url or settings.GOOGLE_JWKS_URL
        self.client_id = client_id if client_id is not None else settings.GOOGLE_CLIENT_ID
        self.timeout = timeout or settings.IDENTITY_PROVIDER_TIMEOUT
        self._transport = transport
        self._jwk_client: PyJWKClient | None = None

    async def fetch_profile(self, credential: str) -> GoogleProfile:
        """
        Exchange a credential for a verified profile.

        Raises:
            InvalidCredentialError: provider rejected the credential
            UnavailableError: provider timed out or failed
        """
        if looks_like_jwt(credential) and self.client_id:
            claims = await self._verify_id_token(credential)
        else:
            claims = await self._fetch_userinfo(credential)

        return self._profile_from_claims(claims)

    async def _fetch_userinfo(self, access_token: str) -> dict:
        headers = {"Authorization": f"Bearer {access_token}"}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.get(self.userinfo_url, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning("Google userinfo timed out", timeout=self.timeout)
            raise UnavailableError(
                "Identity provider timed out", dependency="identity_provider"
            ) from e
        except httpx.RequestError as e:
            logger.warning(
                "Google userinfo request failed", error=str(e), error_type=type(e).__name__
            )
            raise UnavailableError(
                "Identity provider is unreachable", dependency="identity_provider"
            ) from e

        if response.status_code in REJECTED_STATUS_CODES:
            logger.info("Google rejected access token", status_code=response.status_code)
            raise InvalidCredentialError("Invalid access token")

        if response.status_code != 200:
            logger.warning("Google userinfo unexpected status", status_code=response.status_code)
            raise UnavailableError(
                f"Identity provider returned {response.status_code}",
                dependency="identity_provider",
            )

        try:
            return response.json()
        except ValueError as e:
            raise UnavailableError(
                "Identity provider returned an unreadable response",
                dependency="identity_provider",
            ) from e

    def _get_jwk_client(self) -> PyJWKClient:
        if self._jwk_client is None:
            self._jwk_client = PyJWKClient(self.jwks_url, timeout=self.timeout)
        return self._jwk_client

    async def _verify_id_token(self, id_token: str) -> dict:
        try:
            # PyJWKClient does blocking I/O on a cache miss
            signing_key = await asyncio.to_thread(
                self._get_jwk_client().get_signing_key_from_jwt, id_token
            )
            claims = jwt.decode(
                id_token,
                signing_key.key,
                algorithms=["RS256"],
                audience=self.client_id,
                options={"verify_exp": True},
            )
        except PyJWKClientConnectionError as e:
            logger.warning("Google JWKS fetch failed", error=str(e))
            raise UnavailableError(
                "Identity provider keys are unavailable", dependency="identity_provider"
            ) from e
        except (PyJWKClientError, InvalidTokenError) as e:
            logger.info("Google ID token rejected", error=str(e), error_type=type(e).__name__)
            raise InvalidCredentialError(f"Invalid ID token: {e}") from e

        if claims.get("iss") not in GOOGLE_ISSUERS:
            raise InvalidCredentialError("Invalid ID token: unexpected issuer")

        return claims

    @staticmethod
    def _profile_from_claims(claims: dict) -> GoogleProfile:
        sub = claims.get("sub")
        email = (claims.get("email") or "").strip()
        if not sub or not email:
            raise InvalidCredentialError("Identity provider profile is missing subject or email")

        if claims.get("email_verified") in (False, "false"):
            raise InvalidCredentialError("Google account email is not verified")

        return GoogleProfile(
            sub=str(sub),
            email=email,
            name=claims.get("name"),
            picture=claims.get("picture"),
        )


_google_identity_service: GoogleIdentityService | None = None


def get_google_identity_service() -> GoogleIdentityService:
    """Process-wide client so the JWKS cache is shared between requests."""
    global _google_identity_service
    if _google_identity_service is None:
        _google_identity_service = GoogleIdentityService()
    return _google_identity_service
