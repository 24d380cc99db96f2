"""
Connector REST API — the ``connectors.create / get / delete`` surface.

Route prefix: /api/v1
"""

from __future__ import annotations

import hmac
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import db_session, get_request_context
from auth.models import RequestContext
from config.settings import config
from connectors.routes import get_provider
from connectors.schemas import Collection, ConnectorCreate, ConnectorOut, PreviewItem, SyncResultIn
from connectors.store import (
    create_connector,
    delete_connector,
    get_connector,
    get_job,
    list_connectors,
    record_sync_result,
)
from destinations.client import CollectionsClient, get_collections_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["connectors"])


async def require_worker_key(
    x_worker_key: Optional[str] = Header(None, alias="X-Worker-Key"),
) -> None:
    """Gate for routes called by the background sync executor."""
    expected = config.worker_api_key
    if not expected or not x_worker_key or not hmac.compare_digest(x_worker_key, expected):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid worker key",
        )


# ── connectors.* ───────────────────────────────────────────────────────


@router.post("/connectors", response_model=ConnectorOut, status_code=status.HTTP_201_CREATED)
async def create(
    req: ConnectorCreate,
    ctx: RequestContext = Depends(get_request_context),
) -> ConnectorOut:
    """Create a connector for the signed-in user."""
    get_provider(req.provider)
    connector = await create_connector(ctx.user.email, req, db_session=ctx.db)
    await ctx.db.commit()
    return connector


@router.get("/connectors", response_model=List[ConnectorOut])
async def list_all(ctx: RequestContext = Depends(get_request_context)) -> List[ConnectorOut]:
    return await list_connectors(ctx.user.email, db_session=ctx.db)


@router.get("/connectors/{connector_id}", response_model=ConnectorOut)
async def get(
    connector_id: str,
    ctx: RequestContext = Depends(get_request_context),
) -> ConnectorOut:
    connector = await get_connector(ctx.user.email, connector_id, db_session=ctx.db)
    if connector is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Connector not found")
    return connector


@router.delete("/connectors/{connector_id}")
async def delete(
    connector_id: str,
    ctx: RequestContext = Depends(get_request_context),
) -> Dict[str, Any]:
    """Delete a connector; its synced-file records go with it."""
    deleted = await delete_connector(ctx.user.email, connector_id, db_session=ctx.db)
    if not deleted:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Connector not found")
    await ctx.db.commit()
    return {"status": "deleted", "connector_id": connector_id}


# ── Form data sources ──────────────────────────────────────────────────


@router.get("/collections", response_model=List[Collection])
async def collections(
    ctx: RequestContext = Depends(get_request_context),
    client: CollectionsClient = Depends(get_collections_client),
) -> List[Collection]:
    """Destination collections the user can sync into."""
    return await client.list_collections()


@router.get("/connectors/{provider}/preview", response_model=List[PreviewItem])
async def preview(
    provider: str,
    ctx: RequestContext = Depends(get_request_context),
    x_provider_token: str = Header(..., alias="X-Provider-Token"),
) -> List[PreviewItem]:
    """Live listing of what a new ``provider`` connector would sync."""
    connector = get_provider(provider)
    return await connector.list_preview_items(x_provider_token)


# ── Sync executor hooks ────────────────────────────────────────────────


@router.get("/connectors/{connector_id}/job", dependencies=[Depends(require_worker_key)])
async def job(
    connector_id: str,
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    """Everything the executor needs to run one connector."""
    job_spec = await get_job(connector_id, db_session=session)
    if job_spec is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Connector not found")
    return job_spec


@router.post(
    "/connectors/{connector_id}/sync-result",
    response_model=ConnectorOut,
    dependencies=[Depends(require_worker_key)],
)
async def sync_result(
    connector_id: str,
    result: SyncResultIn,
    session: AsyncSession = Depends(db_session),
) -> ConnectorOut:
    updated = await record_sync_result(connector_id, result, db_session=session)
    if updated is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Connector not found")
    await session.commit()
    return updated

