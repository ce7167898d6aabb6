from typing import Optional, Dict, Any
import asyncio
import logging

import aiohttp

from quickcare.core.config import settings
from quickcare.application.ports.identity_provider import FederatedIdentity, IdentityProvider

logger = logging.getLogger(__name__)

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


def extract_identity_from_claims(claims: Dict[str, Any]) -> FederatedIdentity:
    """Extract subject, email, display name and picture from Google token claims."""
    return FederatedIdentity(
        subject=claims.get("sub"),
        email=claims.get("email"),
        name=claims.get("name"),
        picture=claims.get("picture"),
    )


def claims_are_acceptable(claims: Dict[str, Any], client_id: str = "") -> bool:
    if claims.get("error") or claims.get("error_description"):
        return False
    if not claims.get("sub"):
        return False
    issuer = claims.get("iss")
    if issuer and issuer not in GOOGLE_ISSUERS:
        return False
    if client_id and claims.get("aud") != client_id:
        return False
    # tokeninfo returns booleans as strings
    if str(claims.get("email_verified", "true")).lower() == "false":
        return False
    return True


class GoogleIdentityProvider(IdentityProvider):
    """Verifies Google Sign-In ID tokens against Google's tokeninfo endpoint."""

    def __init__(self, tokeninfo_url: Optional[str] = None, client_id: Optional[str] = None, timeout: Optional[float] = None):
        self.tokeninfo_url = tokeninfo_url or settings.GOOGLE_TOKENINFO_URL
        self.client_id = settings.GOOGLE_CLIENT_ID if client_id is None else client_id
        self.timeout = timeout or settings.GOOGLE_VERIFY_TIMEOUT

    async def verify(self, credential: str) -> Optional[FederatedIdentity]:
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.get(self.tokeninfo_url, params={"id_token": credential}) as response:
                    claims = await response.json(content_type=None)
                    status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning(f"Google token verification failed: {e}")
            return None

        if status != 200 or not isinstance(claims, dict):
            logger.warning(f"Google tokeninfo rejected credential with status {status}")
            return None
        if not claims_are_acceptable(claims, self.client_id):
            logger.warning("Google credential claims did not pass verification")
            return None
        return extract_identity_from_claims(claims)
