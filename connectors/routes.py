"""
Provider OAuth routes — auth URL, callback.

Route prefix: /api/connectors
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Dict, Optional
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, RedirectResponse

from auth.dependencies import get_session_user
from auth.models import SessionUser
from config.settings import config
from connectors.base import BaseConnector, OAuthExchangeError
from connectors.encryption import encrypt_token
from connectors.registry import ConnectorRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["oauth"])

# ── State token helpers (CSRF protection) ──────────────────────────────


def create_state(email: str) -> str:
    """Create an opaque state string encoding the user + expiry."""
    payload = json.dumps({"email": email, "exp": int(time.time()) + config.oauth_state_ttl_seconds})
    raw = payload.encode()
    sig = hmac.new(config.oauth_state_secret.encode(), raw, hashlib.sha256).hexdigest()[:16]
    return urlsafe_b64encode(raw).decode() + "." + sig


def verify_state(state: str) -> str:
    """Verify state token, return the email it was issued for. Raises on failure."""
    try:
        parts = state.split(".", 1)
        if len(parts) != 2:
            raise ValueError("bad format")
        raw = urlsafe_b64decode(parts[0])
        expected_sig = hmac.new(config.oauth_state_secret.encode(), raw, hashlib.sha256).hexdigest()[:16]
        if not hmac.compare_digest(parts[1], expected_sig):
            raise ValueError("bad signature")
        payload = json.loads(raw)
        if payload.get("exp", 0) < time.time():
            raise ValueError("state expired")
        return payload["email"]
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid or expired OAuth state: {exc}",
        )


def get_provider(provider: str) -> BaseConnector:
    connector = ConnectorRegistry().get(provider)
    if not connector:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Provider '{provider}' not found or not configured",
        )
    return connector


def provider_token_redirect(provider: str, access_token: str) -> RedirectResponse:
    """
    Send the browser back to the create-connector page for ``provider``.

    With ``oauth_token_in_url`` the token rides in the ``accessToken`` query
    parameter; otherwise it is stored encrypted in an HttpOnly cookie.
    """
    target = f"{config.redirect_base()}/connectors/{provider}"
    if config.oauth_token_in_url:
        return RedirectResponse(
            f"{target}?{urlencode({'accessToken': access_token})}",
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
        )

    response = RedirectResponse(target, status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        config.oauth_token_cookie_name,
        encrypt_token(access_token),
        max_age=3600,
        httponly=True,
        samesite="lax",
        secure=config.app_host.startswith("https://"),
    )
    return response


# ── Routes ─────────────────────────────────────────────────────────────


@router.get("/providers")
async def list_providers() -> list[dict]:
    """All known providers and whether they are configured."""
    return ConnectorRegistry().list_providers()


@router.get("/{provider}/auth-url")
async def get_auth_url(
    provider: str,
    user: SessionUser = Depends(get_session_user),
) -> Dict[str, str]:
    connector = get_provider(provider)
    return {"auth_url": connector.get_auth_url(create_state(user.email)), "provider": provider}


@router.get("/{provider}/callback")
async def oauth_callback(
    provider: str,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
):
    """
    OAuth callback — the provider redirects here after consent.

    Exchanges the code for an access token and redirects back into the app.
    A missing code and a recognized exchange failure both answer
    ``{"error": ...}`` with 400; anything else propagates as a 500.
    """
    if not code:
        return JSONResponse({"error": "code is required"}, status_code=status.HTTP_400_BAD_REQUEST)

    connector = get_provider(provider)
    if state is not None:
        verify_state(state)

    try:
        token_data = await connector.handle_callback(code)
    except (OAuthExchangeError, httpx.HTTPError) as exc:
        logger.error("OAuth callback failed for %s: %s", provider, exc)
        return JSONResponse(
            {"error": str(exc) or exc.__class__.__name__},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    logger.info(
        "OAuth connected: provider=%s account=%s",
        provider,
        token_data.get("account_label", provider),
    )
    return provider_token_redirect(provider, token_data["access_token"])
