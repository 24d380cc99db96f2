"""
Session API routes — who am I, sign out.

Route prefix: /api/v1/auth
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response

from auth.dependencies import get_session_user
from auth.models import SessionUser
from config.settings import config

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.get("/me", response_model=SessionUser)
async def me(user: SessionUser = Depends(get_session_user)) -> SessionUser:
    return user


@router.post("/logout")
async def logout(response: Response, user: SessionUser = Depends(get_session_user)) -> dict:
    response.delete_cookie(config.session_cookie_name)
    response.delete_cookie(config.oauth_token_cookie_name)
    logger.info("Logout: %s", user.email)
    return {"status": "signed_out"}
