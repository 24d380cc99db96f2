"""
FastAPI dependencies for sessions.

Provides ``db_session``, ``get_session_user`` and ``get_request_context``,
used across all protected routes.
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth.models import RequestContext, SessionUser
from auth.session import verify_session_token
from config.settings import config
from database.session import get_db_session

_bearer_scheme = HTTPBearer(auto_error=False)


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


def session_token_from(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Bearer header wins over the session cookie."""
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(config.session_cookie_name)


async def get_session_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> SessionUser:
    token = session_token_from(request, credentials)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in",
        )
    return verify_session_token(token)


async def get_request_context(
    user: SessionUser = Depends(get_session_user),
    session: AsyncSession = Depends(db_session),
) -> RequestContext:
    return RequestContext(user=user, db=session)
