"""
Connector store — create / get / list / delete connector records.

This is the persistence side of the ``connectors.*`` API. Every function
is a single round trip on the given session; callers own the commit when
they pass a session in.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from connectors.encryption import decrypt_token, encrypt_token
from connectors.schemas import ConnectorCreate, ConnectorOut, SyncedFile, SyncResultIn
from database.models import Connector, ConnectorFile
from database.session import async_session_factory

logger = logging.getLogger(__name__)


def _to_uuid(value: str | uuid.UUID) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(value)
    except (ValueError, AttributeError, TypeError):
        return None


def to_out(conn: Connector) -> ConnectorOut:
    return ConnectorOut(
        id=str(conn.connector_id),
        provider=conn.provider,
        name=conn.name,
        collection_ids=list(conn.collection_ids or []),
        cron_job=conn.cron_job,
        cron_job_timezone=conn.cron_job_timezone,
        error=conn.error,
        files=[SyncedFile(id=str(f.file_id), url=f.url) for f in conn.files],
        created_at=conn.created_at,
        last_synced_at=conn.last_synced_at,
    )


async def create_connector(
    owner_email: str,
    data: ConnectorCreate,
    *,
    db_session: Optional[AsyncSession] = None,
) -> ConnectorOut:
    """Persist a new connector. The provider token is encrypted at rest."""
    own_session = db_session is None
    session = db_session or async_session_factory()
    try:
        now = datetime.now(timezone.utc)
        conn = Connector(
            connector_id=uuid.uuid4(),
            owner_email=owner_email,
            provider=data.provider,
            name=data.name,
            collection_ids=list(data.collection_ids),
            cron_job=data.cron_job,
            cron_job_timezone=data.cron_job_timezone,
            access_token=encrypt_token(data.access_token),
            created_at=now,
            updated_at=now,
            files=[],
        )
        session.add(conn)
        if own_session:
            await session.commit()
        else:
            await session.flush()

        logger.info(
            "Created %s connector %s for %s (cron=%r tz=%s)",
            data.provider,
            conn.connector_id,
            owner_email,
            data.cron_job,
            data.cron_job_timezone,
        )
        return to_out(conn)

    except Exception as exc:
        logger.error("create_connector error: %s", exc)
        if own_session:
            await session.rollback()
        raise
    finally:
        if own_session:
            await session.close()


async def _load(session: AsyncSession, owner_email: str, connector_id: str) -> Optional[Connector]:
    cid = _to_uuid(connector_id)
    if cid is None:
        return None
    result = await session.execute(
        select(Connector).where(
            Connector.connector_id == cid,
            Connector.owner_email == owner_email,
        )
    )
    return result.scalar_one_or_none()


async def get_connector(
    owner_email: str,
    connector_id: str,
    *,
    db_session: Optional[AsyncSession] = None,
) -> Optional[ConnectorOut]:
    """Return the connector, or None if it does not exist for this user."""
    own_session = db_session is None
    session = db_session or async_session_factory()
    try:
        conn = await _load(session, owner_email, connector_id)
        return to_out(conn) if conn else None
    finally:
        if own_session:
            await session.close()


async def list_connectors(
    owner_email: str,
    *,
    db_session: Optional[AsyncSession] = None,
) -> List[ConnectorOut]:
    own_session = db_session is None
    session = db_session or async_session_factory()
    try:
        result = await session.execute(
            select(Connector)
            .where(Connector.owner_email == owner_email)
            .order_by(Connector.created_at.desc())
        )
        return [to_out(c) for c in result.scalars().all()]
    finally:
        if own_session:
            await session.close()


async def delete_connector(
    owner_email: str,
    connector_id: str,
    *,
    db_session: Optional[AsyncSession] = None,
) -> bool:
    """
    Delete a connector and its synced-file records.
    Returns True if deleted, False if not found.
    """
    own_session = db_session is None
    session = db_session or async_session_factory()
    try:
        conn = await _load(session, owner_email, connector_id)
        if not conn:
            return False

        await session.delete(conn)
        if own_session:
            await session.commit()
        else:
            await session.flush()

        logger.info("Deleted %s connector %s for %s", conn.provider, connector_id, owner_email)
        return True

    except Exception as exc:
        logger.error("delete_connector error: %s", exc)
        if own_session:
            await session.rollback()
        raise
    finally:
        if own_session:
            await session.close()


async def record_sync_result(
    connector_id: str,
    result: SyncResultIn,
    *,
    db_session: Optional[AsyncSession] = None,
) -> Optional[ConnectorOut]:
    """
    Store the outcome of a background sync run: the error (or its absence)
    and any newly synced files. Returns None for an unknown connector.
    """
    own_session = db_session is None
    session = db_session or async_session_factory()
    try:
        cid = _to_uuid(connector_id)
        if cid is None:
            return None
        row = await session.execute(select(Connector).where(Connector.connector_id == cid))
        conn = row.scalar_one_or_none()
        if not conn:
            return None

        now = datetime.now(timezone.utc)
        conn.error = result.error or None
        conn.last_synced_at = now
        conn.updated_at = now
        known = {f.url for f in conn.files}
        for url in result.file_urls:
            if url in known:
                continue
            conn.files.append(ConnectorFile(file_id=uuid.uuid4(), url=url, created_at=now))
            known.add(url)

        if own_session:
            await session.commit()
        else:
            await session.flush()

        if conn.error:
            logger.warning("Sync of connector %s failed: %s", connector_id, conn.error)
        else:
            logger.info("Sync of connector %s stored %d files", connector_id, len(conn.files))
        return to_out(conn)

    except Exception as exc:
        logger.error("record_sync_result error: %s", exc)
        if own_session:
            await session.rollback()
        raise
    finally:
        if own_session:
            await session.close()


async def get_job(
    connector_id: str,
    *,
    db_session: Optional[AsyncSession] = None,
) -> Optional[Dict[str, Any]]:
    """
    Everything the sync executor needs to run one connector, including the
    decrypted provider token. None for an unknown connector.
    """
    own_session = db_session is None
    session = db_session or async_session_factory()
    try:
        cid = _to_uuid(connector_id)
        if cid is None:
            return None
        row = await session.execute(select(Connector).where(Connector.connector_id == cid))
        conn = row.scalar_one_or_none()
        if not conn:
            return None
        return {
            "connector_id": str(conn.connector_id),
            "provider": conn.provider,
            "collection_ids": list(conn.collection_ids or []),
            "cron_job": conn.cron_job,
            "cron_job_timezone": conn.cron_job_timezone,
            "access_token": decrypt_token(conn.access_token),
        }
    finally:
        if own_session:
            await session.close()
