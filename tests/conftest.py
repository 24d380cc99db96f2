"""
Shared fixtures: an app without a database, an in-memory connector store,
and providers backed by ``httpx.MockTransport``.
"""

from __future__ import annotations

import uuid
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from auth.dependencies import db_session
from auth.session import create_session_token
from connectors.notion import NotionConnector
from connectors.registry import ConnectorRegistry
from connectors.schemas import Collection, ConnectorCreate, ConnectorOut, SyncResultIn, SyncedFile
from connectors.zendesk import ZendeskConnector
from destinations.client import get_collections_client
from main import create_app
from support import mock_transport, notion_routes

USER_EMAIL = "ada@example.com"


class InMemoryStore:
    """Stand-in for ``connectors.store`` keyed by (owner, id)."""

    def __init__(self) -> None:
        self.rows: Dict[str, ConnectorOut] = {}
        self.owners: Dict[str, str] = {}
        self.tokens: Dict[str, str] = {}
        self.calls: List[str] = []

    def add(self, owner: str, **fields) -> ConnectorOut:
        data = {
            "id": str(uuid.uuid4()),
            "provider": "notion",
            "name": "Docs",
            "collection_ids": ["col-1"],
            "cron_job": "30 6 * * *",
            "cron_job_timezone": "UTC",
        }
        data.update(fields)
        row = ConnectorOut(**data)
        self.rows[row.id] = row
        self.owners[row.id] = owner
        self.tokens[row.id] = "secret-token"
        return row

    async def create_connector(self, owner_email: str, data: ConnectorCreate, *, db_session=None) -> ConnectorOut:
        self.calls.append("create")
        row = self.add(
            owner_email,
            provider=data.provider,
            name=data.name,
            collection_ids=data.collection_ids,
            cron_job=data.cron_job,
            cron_job_timezone=data.cron_job_timezone,
        )
        self.tokens[row.id] = data.access_token
        return row

    async def get_connector(self, owner_email: str, connector_id: str, *, db_session=None) -> Optional[ConnectorOut]:
        self.calls.append("get")
        if self.owners.get(connector_id) != owner_email:
            return None
        return self.rows.get(connector_id)

    async def list_connectors(self, owner_email: str, *, db_session=None) -> List[ConnectorOut]:
        self.calls.append("list")
        return [row for cid, row in self.rows.items() if self.owners[cid] == owner_email]

    async def delete_connector(self, owner_email: str, connector_id: str, *, db_session=None) -> bool:
        self.calls.append("delete")
        if self.owners.get(connector_id) != owner_email:
            return False
        del self.rows[connector_id]
        del self.owners[connector_id]
        return True

    async def record_sync_result(self, connector_id: str, result: SyncResultIn, *, db_session=None):
        self.calls.append("sync-result")
        row = self.rows.get(connector_id)
        if row is None:
            return None
        files = list(row.files) + [
            SyncedFile(id=str(uuid.uuid4()), url=url) for url in result.file_urls
        ]
        row = row.model_copy(update={"error": result.error, "files": files})
        self.rows[connector_id] = row
        return row

    async def get_job(self, connector_id: str, *, db_session=None):
        row = self.rows.get(connector_id)
        if row is None:
            return None
        return {
            "connector_id": row.id,
            "provider": row.provider,
            "collection_ids": row.collection_ids,
            "cron_job": row.cron_job,
            "cron_job_timezone": row.cron_job_timezone,
            "access_token": self.tokens[row.id],
        }


_STORE_TARGETS = {
    "api.connectors": [
        "create_connector", "get_connector", "list_connectors",
        "delete_connector", "record_sync_result", "get_job",
    ],
    "web.pages": ["create_connector", "get_connector", "list_connectors", "delete_connector"],
}


@pytest.fixture
def store():
    fake = InMemoryStore()
    patchers = [
        patch(f"{module}.{name}", new=getattr(fake, name))
        for module, names in _STORE_TARGETS.items()
        for name in names
    ]
    for p in patchers:
        p.start()
    yield fake
    for p in reversed(patchers):
        p.stop()


@pytest.fixture
def registry():
    ConnectorRegistry.reset()
    reg = ConnectorRegistry()
    reg._discovered = True
    reg.register(NotionConnector(transport=mock_transport(notion_routes())))
    reg.register(ZendeskConnector(transport=mock_transport({})))
    yield reg
    ConnectorRegistry.reset()


@pytest.fixture
def collections_client():
    client = MagicMock()

    async def _list():
        return [Collection(id="col-1", name="Handbook"), Collection(id="col-2", name="Support")]

    client.list_collections = _list
    return client


@pytest.fixture
def db() -> MagicMock:
    """Request session stand-in; ``events`` records each commit."""
    session = MagicMock()
    session.events = []
    session.commit = AsyncMock(side_effect=lambda: session.events.append("commit"))
    return session


@pytest.fixture
def app(registry, collections_client, db):
    application = create_app(init_db=False)
    application.dependency_overrides[db_session] = lambda: db
    application.dependency_overrides[get_collections_client] = lambda: collections_client
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_session_token(USER_EMAIL)}"}
