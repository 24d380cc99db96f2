"""
Pydantic schemas for connector records, previews and collections.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from connectors.schedule import is_valid_timezone, parse_cron


# ═══════════════════════════════════════════════════════════════════════════════
# Third-party preview
# ═══════════════════════════════════════════════════════════════════════════════


class PreviewKind(str, Enum):
    PAGE = "page"
    DATABASE = "database"
    TICKET = "ticket"
    ARTICLE = "article"


class PreviewItem(BaseModel):
    """A selectable third-party item shown before a connector is created."""

    id: str
    kind: PreviewKind
    title: str = ""
    url: str = ""


# ═══════════════════════════════════════════════════════════════════════════════
# Destination collections
# ═══════════════════════════════════════════════════════════════════════════════


class Collection(BaseModel):
    id: str
    name: str


# ═══════════════════════════════════════════════════════════════════════════════
# Connector records
# ═══════════════════════════════════════════════════════════════════════════════


class ConnectorCreate(BaseModel):
    """
    Input for ``connectors.create``.

    ``cron_job`` is always the daily shape produced by
    :func:`connectors.schedule.to_cron`.
    """

    provider: str = Field(..., min_length=1, max_length=32)
    name: str = Field(..., min_length=1, max_length=255)
    collection_ids: List[str] = Field(..., min_length=1)
    cron_job: str
    cron_job_timezone: str = "UTC"
    access_token: str = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value

    @field_validator("cron_job")
    @classmethod
    def _daily_cron(cls, value: str) -> str:
        parse_cron(value)
        return value

    @field_validator("cron_job_timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if not is_valid_timezone(value):
            raise ValueError(f"unknown timezone: {value}")
        return value


class SyncedFile(BaseModel):
    id: str
    url: str


class ConnectorOut(BaseModel):
    """Connector as returned by the API. The provider token is never exposed."""

    id: str
    provider: str
    name: str
    collection_ids: List[str] = Field(default_factory=list)
    cron_job: str
    cron_job_timezone: str
    error: Optional[str] = None
    files: List[SyncedFile] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    last_synced_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return not self.error


class SyncResultIn(BaseModel):
    """Report from the background sync executor after a run."""

    error: Optional[str] = None
    file_urls: List[str] = Field(default_factory=list)
