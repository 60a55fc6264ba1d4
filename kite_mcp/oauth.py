"""
GitHub OAuth app authentication – builds the authorization URL and exchanges
authorization codes for user access tokens.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlencode

import httpx

from .config import KiteSettings, settings as default_settings

logger = logging.getLogger(__name__)


class OAuthExchangeError(Exception):
    """GitHub refused or failed the code-for-token exchange."""


@dataclass
class OAuthToken:
    token: str
    token_type: str = "bearer"
    scopes: List[str] = field(default_factory=list)


class GitHubOAuth:
    """OAuth app client for the authorization-code flow."""

    def __init__(
        self,
        settings: Optional[KiteSettings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.settings = settings or default_settings
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.github_client_id and self.settings.github_client_secret)

    def default_redirect_uri(self) -> str:
        return f"{self.settings.next_public_base_url.rstrip('/')}/api/auth/callback"

    def authorization_url(self, redirect_uri: Optional[str] = None, state: Optional[str] = None) -> str:
        """URL that sends the user to GitHub's consent screen."""
        if not self.settings.github_client_id:
            raise RuntimeError("GITHUB_CLIENT_ID is not set.")
        query = urlencode({
            "client_id": self.settings.github_client_id,
            "redirect_uri": redirect_uri or self.default_redirect_uri(),
            "scope": self.settings.github_oauth_scope,
            "state": state or f"oauth_state_{int(time.time() * 1000)}",
        })
        return f"{self.settings.github_oauth_base.rstrip('/')}/authorize?{query}"

    def exchange_code(self, code: str, state: Optional[str] = None) -> OAuthToken:
        """
        Exchange an authorization code for an access token.

        Raises:
            OAuthExchangeError: on transport failure or an error payload.
        """
        payload = {
            "client_id": self.settings.github_client_id,
            "client_secret": self.settings.github_client_secret,
            "code": code,
        }
        if state:
            payload["state"] = state

        url = f"{self.settings.github_oauth_base.rstrip('/')}/access_token"
        try:
            with httpx.Client(timeout=10, transport=self._transport) as client:
                resp = client.post(url, headers={"Accept": "application/json"}, data=payload)
                resp.raise_for_status()
                body = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise OAuthExchangeError(f"Token request failed: {exc}") from exc

        if body.get("error"):
            raise OAuthExchangeError(body.get("error_description") or body["error"])
        access_token = body.get("access_token")
        if not access_token:
            raise OAuthExchangeError("No access_token in GitHub response")

        scopes = [s for s in (body.get("scope") or "").split(",") if s]
        logger.info("Exchanged OAuth code for token (scopes: %s)", ",".join(scopes) or "none")
        return OAuthToken(
            token=access_token,
            token_type=body.get("token_type") or "bearer",
            scopes=scopes,
        )
