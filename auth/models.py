"""
Session user and per-request context.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession


class SessionUser(BaseModel):
    email: str


@dataclass
class RequestContext:
    """Everything a handler needs about the caller, passed explicitly."""

    user: SessionUser
    db: AsyncSession
