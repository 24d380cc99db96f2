"""
Session token creation and verification.

Tokens are base64-encoded JSON payloads ``{"email", "exp"}`` signed with
HMAC-SHA256. Secret is loaded from ``config.session_secret``
(env var: ``SESSION_SECRET``).
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Optional

from fastapi import HTTPException, status

from auth.models import SessionUser
from config.settings import config


def _sign(raw: bytes) -> str:
    return hmac.new(config.session_secret.encode(), raw, hashlib.sha256).hexdigest()


def create_session_token(email: str, expires_in: Optional[int] = None) -> str:
    """Create a signed token for ``email``."""
    ttl = config.session_expiry_seconds if expires_in is None else expires_in
    payload = {"email": email, "exp": int(time.time()) + ttl}
    raw = json.dumps(payload).encode()
    return urlsafe_b64encode(raw).decode() + "." + _sign(raw)


def verify_session_token(token: str) -> SessionUser:
    """
    Verify token and return the session user.

    Raises ``HTTPException(401)`` on invalid or expired tokens.
    """
    try:
        parts = token.split(".", 1)
        if len(parts) != 2:
            raise ValueError("bad format")
        raw = urlsafe_b64decode(parts[0])
        if not hmac.compare_digest(parts[1], _sign(raw)):
            raise ValueError("bad signature")
        payload = json.loads(raw)
        if payload.get("exp", 0) < time.time():
            raise ValueError("session expired")
        return SessionUser(email=payload["email"])
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid or expired session: {exc}",
        )
