"""Google OAuth 2.0 client: consent URL, code exchange and profile lookup."""

from __future__ import annotations

from urllib.parse import urlencode

import httpx

from studentms.core.config import Settings
from studentms.core.errors import AuthenticationFailure
from studentms.core.federation import ProviderProfile
from studentms.core.logging import get_logger

logger = get_logger(__name__)

AUTHORIZATION_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
USERINFO_ENDPOINT = "https://openidconnect.googleapis.com/v1/userinfo"


class GoogleOAuthClient:
    """Authorization-code flow against Google.

    One instance is built per application from settings and closed on
    shutdown; the underlying httpx client is created on first use.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        callback_url: str,
        scopes: str = "openid email profile",
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.callback_url = callback_url
        self.scopes = scopes
        self._timeout = timeout
        self._http = http_client

    @classmethod
    def from_settings(cls, settings: Settings) -> GoogleOAuthClient:
        return cls(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            callback_url=settings.google_callback_url,
            scopes=settings.google_scopes,
        )

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._timeout)
        return self._http

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": self.callback_url,
            "scope": self.scopes,
            "state": state,
            "access_type": "online",
            "prompt": "select_account",
        }
        return f"{AUTHORIZATION_ENDPOINT}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> ProviderProfile:
        """Exchange an authorization *code* and return the signed-in user's profile."""
        if not self.configured:
            raise AuthenticationFailure("Google OAuth is not configured")

        client = self._client()
        try:
            token_resp = await client.post(
                TOKEN_ENDPOINT,
                data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.callback_url,
                    "grant_type": "authorization_code",
                },
            )
            token_resp.raise_for_status()
            access_token = token_resp.json().get("access_token")
            if not access_token:
                raise AuthenticationFailure("token response carried no access_token")

            info_resp = await client.get(
                USERINFO_ENDPOINT,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            info_resp.raise_for_status()
            info = info_resp.json()
        except httpx.HTTPStatusError as exc:
            raise AuthenticationFailure(
                f"Google returned {exc.response.status_code} for {exc.request.url}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise AuthenticationFailure(f"Google request failed: {exc}") from exc

        profile = profile_from_userinfo(info)
        logger.debug("Google profile fetched", email=profile.email)
        return profile

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None


def profile_from_userinfo(info: dict) -> ProviderProfile:
    """Validate a Google userinfo document and reduce it to a ProviderProfile."""
    subject = info.get("sub") or info.get("id")
    email = info.get("email")
    if not subject or not email:
        raise AuthenticationFailure("userinfo is missing sub or email")
    if info.get("email_verified") is False:
        raise AuthenticationFailure(f"Google email {email} is not verified")
    return ProviderProfile(id=str(subject), name=info.get("name") or "", email=email.lower())
