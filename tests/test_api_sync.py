"""
Tests for the extension sync API route.
"""

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from threadkeep.models.db import Conversation, Message


def _batch() -> dict:
    conversation_id = str(uuid.uuid4())
    return {
        "conversations": [
            {
                "id": conversation_id,
                "platform": "claude",
                "title": "Regex help",
                "messages": [
                    {"id": str(uuid.uuid4()), "sender": "user", "content": "regex?"},
                    {
                        "id": str(uuid.uuid4()),
                        "content": "```re\n^a+$\n```",
                    },
                ],
                "codeBlocks": ["```re\n^a+$\n```"],
            }
        ],
        "files": [
            {"id": str(uuid.uuid4()), "conversationId": conversation_id, "name": "x.txt"}
        ],
    }


class TestSyncEndpoint:
    """Tests for POST /extension/sync."""

    def test_sync_batch_success(
        self, api_client: TestClient, db_session: Session, owner_headers: dict
    ):
        batch = _batch()

        response = api_client.post("/extension/sync", json=batch, headers=owner_headers)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "synced": {"conversations": 1, "messages": 2, "files": 1},
        }

        conversation = db_session.get(
            Conversation, uuid.UUID(batch["conversations"][0]["id"])
        )
        assert conversation is not None
        assert conversation.platform == "claude"

    def test_sync_alias_route(self, api_client: TestClient, owner_headers: dict):
        response = api_client.post("/sync", json=_batch(), headers=owner_headers)

        assert response.status_code == 200
        assert response.json()["synced"]["conversations"] == 1

    def test_resubmission_returns_same_counts(
        self, api_client: TestClient, db_session: Session, owner_headers: dict
    ):
        batch = _batch()

        first = api_client.post("/extension/sync", json=batch, headers=owner_headers)
        second = api_client.post("/extension/sync", json=batch, headers=owner_headers)

        assert first.json() == second.json()
        assert db_session.query(Message).count() == 2

    def test_empty_conversations(self, api_client: TestClient, owner_headers: dict):
        response = api_client.post(
            "/extension/sync", json={"conversations": []}, headers=owner_headers
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "synced": {"conversations": 0, "messages": 0, "files": 0},
        }

    def test_partial_failure_still_succeeds(
        self, api_client: TestClient, owner_headers: dict
    ):
        batch = _batch()
        batch["conversations"].insert(0, {"id": "garbage"})

        response = api_client.post("/extension/sync", json=batch, headers=owner_headers)

        assert response.status_code == 200
        assert response.json()["synced"] == {
            "conversations": 1,
            "messages": 2,
            "files": 1,
        }

    @pytest.mark.parametrize(
        "body",
        [{}, {"conversations": "nope"}, {"files": []}, [1, 2]],
    )
    def test_missing_conversations_array(
        self, api_client: TestClient, owner_headers: dict, body
    ):
        response = api_client.post("/extension/sync", json=body, headers=owner_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "conversations array required"

    def test_invalid_json_body(self, api_client: TestClient, owner_headers: dict):
        response = api_client.post(
            "/extension/sync",
            content=b"{not json",
            headers={**owner_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Request body must be JSON"


class TestSyncAuthentication:
    """Authentication on the sync route."""

    def test_missing_token(self, api_client: TestClient, db_session: Session):
        response = api_client.post("/extension/sync", json=_batch())

        assert response.status_code == 401
        assert db_session.query(Conversation).count() == 0

    def test_short_anonymous_device_id(self, api_client: TestClient):
        response = api_client.post(
            "/extension/sync",
            json=_batch(),
            headers={"Authorization": "Bearer anon_tooshort"},
        )

        assert response.status_code == 401

    def test_invalid_jwt(self, api_client: TestClient):
        response = api_client.post(
            "/extension/sync",
            json=_batch(),
            headers={"Authorization": "Bearer not.a.jwt"},
        )

        assert response.status_code == 401

    def test_registered_owner_token(
        self, api_client: TestClient, db_session: Session
    ):
        from threadkeep.api.auth import create_access_token

        token = create_access_token("user-123", email="dev@example.com")

        response = api_client.post(
            "/extension/sync",
            json=_batch(),
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 200
        assert db_session.query(Conversation).one().user_id == "user-123"
