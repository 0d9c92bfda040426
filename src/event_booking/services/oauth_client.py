"""
Google OAuth 2.0 client (authorization-code flow)
"""
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import httpx

from event_booking.core.config import settings
import logging

logger = logging.getLogger(__name__)

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class OAuthError(Exception):
    """Raised when the provider rejects the code or returns an unusable profile"""
    pass


@dataclass(frozen=True)
class OAuthProfile:
    email: str
    name: str
    image: Optional[str] = None
    provider: str = "google"


class GoogleOAuthClient:
    """Thin wrapper over Google's authorization, token and userinfo endpoints"""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.http_client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": "openid profile email",
            "state": state,
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTHORIZE_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> OAuthProfile:
        """Exchange an authorization code and return the user's profile"""
        try:
            token_response = await self.http_client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                    "grant_type": "authorization_code",
                },
            )
            token_response.raise_for_status()
            access_token = token_response.json().get("access_token")
            if not access_token:
                raise OAuthError("Token response did not contain an access token")

            userinfo_response = await self.http_client.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            userinfo_response.raise_for_status()
            userinfo = userinfo_response.json()
        except httpx.HTTPError as e:
            logger.warning(f"Google OAuth request failed: {e}")
            raise OAuthError("OAuth provider request failed") from e

        email = userinfo.get("email")
        if not email:
            raise OAuthError("OAuth profile has no email")

        return OAuthProfile(
            email=email,
            name=userinfo.get("name") or email.split("@")[0],
            image=userinfo.get("picture"),
        )

    async def close(self):
        await self.http_client.aclose()


def build_google_client() -> GoogleOAuthClient:
    return GoogleOAuthClient(
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        redirect_uri=settings.GOOGLE_CALLBACK_URL,
        timeout=settings.OAUTH_HTTP_TIMEOUT_SECONDS,
    )
