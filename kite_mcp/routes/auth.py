"""
GitHub OAuth routes.

    GET /api/oauth           – start the web flow (redirect to GitHub)
    GET /api/auth/callback   – finish the flow, redirect to the dashboard with the token
    GET /api/auth            – finish the flow, return the token as JSON
"""
from typing import Optional
from urllib.parse import quote, urlencode

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, RedirectResponse

from ..config import KiteSettings
from ..dependencies import get_oauth, get_settings_dep
from ..logger import get_logger
from ..oauth import GitHubOAuth, OAuthExchangeError
from ..schemas import OAuthTokenResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])


@router.get("/oauth")
def oauth_start(
    redirect_uri: Optional[str] = Query(None),
    oauth: GitHubOAuth = Depends(get_oauth),
):
    """Redirect the browser to GitHub's authorization page."""
    try:
        url = oauth.authorization_url(redirect_uri=redirect_uri)
    except RuntimeError as exc:
        logger.error(f"OAuth initiation error: {exc}")
        return JSONResponse({"error": "Failed to initiate OAuth flow"}, status_code=500)
    return RedirectResponse(url)


@router.get("/auth/callback")
def oauth_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    oauth: GitHubOAuth = Depends(get_oauth),
    settings: KiteSettings = Depends(get_settings_dep),
):
    """
    OAuth callback that hands the token to the dashboard page.

    The token travels in the query string; the JSON variant at /api/auth
    keeps it out of the URL.
    """
    base = settings.next_public_base_url.rstrip("/")

    if error:
        logger.error(f"OAuth error: {error}")
        return RedirectResponse(f"{base}/?error={quote(error, safe='')}")

    if not code:
        return RedirectResponse(f"{base}/?error=no_code")

    try:
        user_auth = oauth.exchange_code(code, state)
    except OAuthExchangeError as exc:
        logger.error(f"OAuth authentication error: {exc}")
        return RedirectResponse(f"{base}/?error=auth_failed")

    query = urlencode({"token": user_auth.token, "scopes": ",".join(user_auth.scopes)})
    return RedirectResponse(f"{base}/dashboard?{query}")


@router.get("/auth")
def oauth_exchange(
    action: Optional[str] = Query(None),
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    oauth: GitHubOAuth = Depends(get_oauth),
):
    """Exchange an authorization code and return the token as JSON."""
    if action == "login":
        return RedirectResponse("/api/oauth")

    if error:
        return JSONResponse({"error": f"OAuth error: {error}"}, status_code=400)

    if not code:
        return JSONResponse({"error": "Authorization code not provided"}, status_code=400)

    try:
        user_auth = oauth.exchange_code(code, state)
    except OAuthExchangeError as exc:
        logger.error(f"OAuth authentication error: {exc}")
        return JSONResponse({"error": "Failed to authenticate with GitHub"}, status_code=500)

    return OAuthTokenResponse(
        token=user_auth.token,
        tokenType=user_auth.token_type,
        scopes=user_auth.scopes,
    )
