"""
Discord OAuth2 authorization-code flow: build the authorize URL, exchange the
returned code for a token, and fetch the account it belongs to.
"""

from typing import Any, Dict, Optional
from urllib.parse import urlencode
import logging

import httpx

from timerboard.modules.auth.errors import DiscordLoginFailed

logger = logging.getLogger(__name__)

OAUTH_SCOPES = "identify guilds"


class DiscordOAuthClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        api_base_url: str = "https://discord.com/api",
        transport: Optional[httpx.BaseTransport] = None
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.api_base_url = api_base_url.rstrip("/")
        self.transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(transport=self.transport, timeout=10.0)

    def authorize_url(self, state: str) -> str:
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": OAUTH_SCOPES,
            "state": state,
        }
        return f"{self.api_base_url}/oauth2/authorize?{urlencode(params)}"

    def exchange_code(self, code: str) -> str:
        """Exchange an authorization code for an access token"""
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri,
        }
        with self._client() as client:
            try:
                response = client.post(
                    f"{self.api_base_url}/oauth2/token",
                    data=data,
                    auth=(self.client_id, self.client_secret),
                )
            except httpx.HTTPError as exc:
                raise DiscordLoginFailed("Token exchange request failed") from exc

        if response.status_code != 200:
            logger.warning("Discord token exchange returned %s", response.status_code)
            raise DiscordLoginFailed("Token exchange failed")
        try:
            payload = response.json()
        except ValueError as exc:
            raise DiscordLoginFailed("Token exchange returned invalid JSON") from exc
        if "access_token" not in payload:
            raise DiscordLoginFailed("Token response missing access_token")
        return payload["access_token"]

    def fetch_user(self, access_token: str) -> Dict[str, Any]:
        """The Discord account behind access_token (/users/@me)"""
        with self._client() as client:
            try:
                response = client.get(
                    f"{self.api_base_url}/users/@me",
                    headers={"Authorization": f"Bearer {access_token}"},
                )
            except httpx.HTTPError as exc:
                raise DiscordLoginFailed("User lookup request failed") from exc

        if response.status_code != 200:
            raise DiscordLoginFailed("User lookup failed")
        try:
            payload = response.json()
        except ValueError as exc:
            raise DiscordLoginFailed("User lookup returned invalid JSON") from exc
        if "id" not in payload:
            raise DiscordLoginFailed("User lookup missing id")
        return payload
