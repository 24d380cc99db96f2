"""
Page request pipeline: resolve session → fetch → render.

Each stage either yields a value or a :class:`PageFailure`. Pages turn a
failure into an error page with the failure's status code instead of letting
an exception escape to the framework.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from fastapi import HTTPException, Request, status
from fastapi.responses import HTMLResponse
from fastapi.security import HTTPAuthorizationCredentials
from fastapi.security.utils import get_authorization_scheme_param

from auth.dependencies import session_token_from
from auth.models import SessionUser
from auth.session import verify_session_token

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Stage(str, Enum):
    SESSION = "session"
    FETCH = "fetch"


@dataclass
class PageFailure:
    stage: Stage
    status_code: int
    message: str


@dataclass
class PageResult(Generic[T]):
    value: Optional[T] = None
    failure: Optional[PageFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T) -> "PageResult[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, stage: Stage, status_code: int, message: str) -> "PageResult[T]":
        return cls(failure=PageFailure(stage=stage, status_code=status_code, message=message))


def resolve_session(request: Request) -> PageResult[SessionUser]:
    """Session cookie (or bearer header) → user."""
    scheme, param = get_authorization_scheme_param(request.headers.get("Authorization"))
    credentials = None
    if scheme.lower() == "bearer" and param:
        credentials = HTTPAuthorizationCredentials(scheme=scheme, credentials=param)
    token = session_token_from(request, credentials)
    if not token:
        return PageResult.fail(Stage.SESSION, status.HTTP_401_UNAUTHORIZED, "Sign in to continue.")
    try:
        return PageResult.success(verify_session_token(token))
    except HTTPException as exc:
        return PageResult.fail(Stage.SESSION, exc.status_code, str(exc.detail))


async def fetch(stage_fn: Callable[[], Awaitable[Optional[T]]], not_found: str = "Not found.") -> PageResult[T]:
    """
    Run one fetch step. ``None`` becomes a 404 failure; ``HTTPException``
    keeps its status; anything else is logged and becomes a 502.
    """
    try:
        value = await stage_fn()
    except HTTPException as exc:
        return PageResult.fail(Stage.FETCH, exc.status_code, str(exc.detail))
    except Exception as exc:
        logger.exception("Page fetch failed")
        return PageResult.fail(Stage.FETCH, status.HTTP_502_BAD_GATEWAY, f"Upstream request failed: {exc}")
    if value is None:
        return PageResult.fail(Stage.FETCH, status.HTTP_404_NOT_FOUND, not_found)
    return PageResult.success(value)


def render(result: PageResult[str], on_failure: Callable[[PageFailure], str]) -> HTMLResponse:
    """Turn the final stage into a response."""
    if result.ok:
        return HTMLResponse(result.value)
    failure = result.failure
    logger.info("Page failed at %s stage: %s %s", failure.stage.value, failure.status_code, failure.message)
    return HTMLResponse(on_failure(failure), status_code=failure.status_code)
