"""
Tests for the connectors REST API (create / get / delete / list) and the
sync-executor hooks.
"""

import pytest
from fastapi.testclient import TestClient

from auth.session import create_session_token
from config.settings import config
from support import ResponseStartRecorder

from conftest import USER_EMAIL


def _payload(**overrides) -> dict:
    body = {
        "provider": "notion",
        "name": "Product docs",
        "collection_ids": ["col-1", "col-2"],
        "cron_job": "15 4 * * *",
        "cron_job_timezone": "Europe/Berlin",
        "access_token": "ntn-token",
    }
    body.update(overrides)
    return body


class TestCreate:
    def test_creates_connector(self, client, store, auth_headers):
        resp = client.post("/api/v1/connectors", json=_payload(), headers=auth_headers)
        assert resp.status_code == 201
        body = resp.json()
        assert body["name"] == "Product docs"
        assert body["cron_job"] == "15 4 * * *"
        assert body["cron_job_timezone"] == "Europe/Berlin"
        assert body["files"] == []
        assert "access_token" not in body
        assert store.calls == ["create"]

    def test_requires_session(self, client, store):
        resp = client.post("/api/v1/connectors", json=_payload())
        assert resp.status_code == 401
        assert store.calls == []

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": ""},
            {"name": "   "},
            {"collection_ids": []},
            {"cron_job": "*/5 * * * *"},
            {"cron_job_timezone": "Mars/Base"},
        ],
    )
    def test_rejects_invalid_input(self, client, store, auth_headers, overrides):
        resp = client.post("/api/v1/connectors", json=_payload(**overrides), headers=auth_headers)
        assert resp.status_code == 422
        assert store.calls == []

    def test_unknown_provider(self, client, store, auth_headers):
        resp = client.post("/api/v1/connectors", json=_payload(provider="dropbox"), headers=auth_headers)
        assert resp.status_code == 404


class TestGetAndDelete:
    def test_get(self, client, store, auth_headers):
        row = store.add(USER_EMAIL, name="Docs")
        resp = client.get(f"/api/v1/connectors/{row.id}", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["id"] == row.id

    def test_other_users_connector_is_not_found(self, client, store, auth_headers):
        row = store.add("someone@else.com")
        assert client.get(f"/api/v1/connectors/{row.id}", headers=auth_headers).status_code == 404

    def test_delete_then_get_is_404(self, client, store, auth_headers):
        row = store.add(USER_EMAIL)
        resp = client.delete(f"/api/v1/connectors/{row.id}", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json() == {"status": "deleted", "connector_id": row.id}
        assert client.get(f"/api/v1/connectors/{row.id}", headers=auth_headers).status_code == 404

    def test_delete_missing(self, client, store, auth_headers):
        assert client.delete("/api/v1/connectors/nope", headers=auth_headers).status_code == 404

    def test_list_only_own(self, client, store, auth_headers):
        mine = store.add(USER_EMAIL)
        store.add("someone@else.com")
        resp = client.get("/api/v1/connectors", headers=auth_headers)
        assert [c["id"] for c in resp.json()] == [mine.id]


class TestDataSources:
    def test_collections(self, client, auth_headers):
        resp = client.get("/api/v1/collections", headers=auth_headers)
        assert resp.json() == [{"id": "col-1", "name": "Handbook"}, {"id": "col-2", "name": "Support"}]

    def test_preview(self, client, auth_headers):
        resp = client.get(
            "/api/v1/connectors/notion/preview",
            headers={**auth_headers, "X-Provider-Token": "ntn-token"},
        )
        assert resp.status_code == 200
        assert [i["kind"] for i in resp.json()] == ["page", "database"]


class TestWorkerHooks:
    @pytest.fixture(autouse=True)
    def _worker_key(self, monkeypatch):
        monkeypatch.setattr(config, "worker_api_key", "w-key")

    def test_sync_result_requires_worker_key(self, client, store):
        row = store.add(USER_EMAIL)
        resp = client.post(f"/api/v1/connectors/{row.id}/sync-result", json={"error": None})
        assert resp.status_code == 403

    def test_session_token_is_not_a_worker_key(self, client, store):
        row = store.add(USER_EMAIL)
        resp = client.post(
            f"/api/v1/connectors/{row.id}/sync-result",
            json={},
            headers={"X-Worker-Key": create_session_token(USER_EMAIL)},
        )
        assert resp.status_code == 403

    def test_sync_result_appends_files_and_error(self, client, store, auth_headers):
        row = store.add(USER_EMAIL)
        resp = client.post(
            f"/api/v1/connectors/{row.id}/sync-result",
            json={"error": "rate limited", "file_urls": ["https://notion.so/a", "https://notion.so/b"]},
            headers={"X-Worker-Key": "w-key"},
        )
        assert resp.status_code == 200
        detail = client.get(f"/api/v1/connectors/{row.id}", headers=auth_headers).json()
        assert detail["error"] == "rate limited"
        assert [f["url"] for f in detail["files"]] == ["https://notion.so/a", "https://notion.so/b"]

    def test_job_includes_token(self, client, store):
        row = store.add(USER_EMAIL, cron_job="0 3 * * *")
        resp = client.get(f"/api/v1/connectors/{row.id}/job", headers={"X-Worker-Key": "w-key"})
        assert resp.status_code == 200
        assert resp.json()["access_token"] == "secret-token"
        assert resp.json()["cron_job"] == "0 3 * * *"

    def test_unknown_connector(self, client, store):
        resp = client.get("/api/v1/connectors/missing/job", headers={"X-Worker-Key": "w-key"})
        assert resp.status_code == 404


class TestCommitBeforeResponse:
    @pytest.fixture
    def recorded(self, app, db):
        return TestClient(ResponseStartRecorder(app, db.events))

    def test_create_commits_first(self, recorded, store, db, auth_headers):
        resp = recorded.post("/api/v1/connectors", json=_payload(), headers=auth_headers)
        assert resp.status_code == 201
        assert db.events == ["commit", "response.start"]

    def test_delete_commits_first(self, recorded, store, db, auth_headers):
        row = store.add(USER_EMAIL)
        resp = recorded.delete(f"/api/v1/connectors/{row.id}", headers=auth_headers)
        assert resp.status_code == 200
        assert db.events == ["commit", "response.start"]

    def test_missing_delete_does_not_commit(self, recorded, store, db, auth_headers):
        assert recorded.delete("/api/v1/connectors/nope", headers=auth_headers).status_code == 404
        assert db.events == ["response.start"]

    def test_sync_result_commits_first(self, recorded, store, db, monkeypatch):
        monkeypatch.setattr(config, "worker_api_key", "w-key")
        row = store.add(USER_EMAIL)
        resp = recorded.post(
            f"/api/v1/connectors/{row.id}/sync-result",
            json={"file_urls": ["https://notion.so/a"]},
            headers={"X-Worker-Key": "w-key"},
        )
        assert resp.status_code == 200
        assert db.events == ["commit", "response.start"]

    def test_failed_commit_is_not_reported_as_created(self, client, store, db, auth_headers):
        db.commit.side_effect = RuntimeError("commit failed")
        with pytest.raises(RuntimeError, match="commit failed"):
            client.post("/api/v1/connectors", json=_payload(), headers=auth_headers)
