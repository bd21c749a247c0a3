"""Tests for the chat routes."""

from __future__ import annotations

import uuid
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from halo.chat.messages import ChatReply
from halo.chat.session import ChatState
from halo.errors import ChatServiceError
from halo.models import Tenant
from halo.routers import chat as chat_router
from halo.services import chat_svc, workflow_svc


GENERATION = {
    "action": "build_workflow",
    "nodes": [{"id": "n1", "integration": "webhook", "name": "Webhook Trigger", "type": "trigger"}],
    "connections": [],
}


def _session_id() -> str:
    return uuid.uuid4().hex


@pytest.mark.asyncio
async def test_get_new_session(client: AsyncClient, tenant: Tenant):
    res = await client.get(f"/api/t/acme/chat/{_session_id()}")
    assert res.status_code == 200
    body = res.json()
    assert body["state"] == "idle"
    assert body["messages"][0]["role"] == "assistant"
    assert body["canvas"] == {"nodes": [], "edges": []}


@pytest.mark.asyncio
async def test_send_builds_canvas(client: AsyncClient, tenant: Tenant):
    reply = ChatReply(message="Done", workflow_data=GENERATION, action="create_workflow")
    mock = AsyncMock(return_value=reply)
    with patch.object(chat_svc, "generate_reply", mock):
        res = await client.post(
            f"/api/t/acme/chat/{_session_id()}/send", json={"message": "build a webhook flow"}
        )
    assert res.status_code == 200
    body = res.json()
    assert body["message"]["content"] == "Done"
    assert body["state"] == "idle"
    assert body["canvas"]["nodes"][0]["data"]["integration"]["icon"] == "zap"
    assert body["notifications"][0]["title"] == "Workflow Generated!"

    request = mock.call_args.args[0]
    assert request.message == "build a webhook flow"
    assert request.context["tenant"]["name"] == "Acme Corp"


@pytest.mark.asyncio
async def test_send_with_workflow_context(client: AsyncClient, tenant: Tenant, db: AsyncSession):
    wf = await workflow_svc.create_workflow(db, tenant.id, name="Current")
    mock = AsyncMock(return_value=ChatReply(message="ok"))
    with patch.object(chat_svc, "generate_reply", mock):
        res = await client.post(
            f"/api/t/acme/chat/{_session_id()}/send",
            json={"message": "analyze this", "workflow_id": str(wf.id)},
        )
    assert res.status_code == 200
    assert mock.call_args.args[0].context["current_workflow"]["name"] == "Current"


@pytest.mark.asyncio
async def test_send_unknown_workflow(client: AsyncClient, tenant: Tenant):
    res = await client.post(
        f"/api/t/acme/chat/{_session_id()}/send",
        json={"message": "hi", "workflow_id": str(uuid.uuid4())},
    )
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_send_failure_then_retry(client: AsyncClient, tenant: Tenant):
    session_id = _session_id()
    mock = AsyncMock(side_effect=[ChatServiceError("down"), ChatReply(message="recovered")])
    with patch.object(chat_svc, "generate_reply", mock):
        res = await client.post(f"/api/t/acme/chat/{session_id}/send", json={"message": "hello"})
        assert res.json()["state"] == "error"
        assert res.json()["message"]["metadata"]["error"] is True
        assert res.json()["notifications"][0]["title"] == "AI Processing Error"

        res = await client.post(f"/api/t/acme/chat/{session_id}/retry")
    assert res.status_code == 200
    assert res.json()["message"]["content"] == "recovered"
    assert [c.args[0].message for c in mock.call_args_list] == ["hello", "hello"]


@pytest.mark.asyncio
async def test_busy_session_conflicts(client: AsyncClient, tenant: Tenant):
    session_id = _session_id()
    session = chat_router.sessions.get(f"acme:{session_id}")
    session.state = ChatState.SENDING
    try:
        res = await client.post(f"/api/t/acme/chat/{session_id}/send", json={"message": "hi"})
        assert res.status_code == 409
    finally:
        chat_router.sessions.drop(f"acme:{session_id}")


@pytest.mark.asyncio
async def test_stop_when_idle(client: AsyncClient, tenant: Tenant):
    res = await client.post(f"/api/t/acme/chat/{_session_id()}/stop")
    assert res.status_code == 200
    assert res.json()["stopped"] is False


@pytest.mark.asyncio
async def test_clear_session(client: AsyncClient, tenant: Tenant):
    session_id = _session_id()
    with patch.object(chat_svc, "generate_reply", AsyncMock(return_value=ChatReply(message="x"))):
        await client.post(f"/api/t/acme/chat/{session_id}/send", json={"message": "hello"})
    res = await client.delete(f"/api/t/acme/chat/{session_id}")
    assert res.json()["cleared"] is True
    res = await client.get(f"/api/t/acme/chat/{session_id}")
    assert len(res.json()["messages"]) == 1


@pytest.mark.asyncio
async def test_chat_api_key_required(client: AsyncClient, tenant: Tenant):
    with patch.object(chat_router.settings, "chat_api_key", "secret"):
        res = await client.post(f"/api/t/acme/chat/{_session_id()}/send", json={"message": "hi"})
        assert res.status_code == 401

        mock = AsyncMock(return_value=ChatReply(message="ok"))
        with patch.object(chat_svc, "generate_reply", mock):
            res = await client.post(
                f"/api/t/acme/chat/{_session_id()}/send",
                json={"message": "hi"},
                headers={"Authorization": "Bearer secret"},
            )
        assert res.status_code == 200


@pytest.mark.asyncio
async def test_chat_api_key_header(client: AsyncClient, tenant: Tenant):
    with patch.object(chat_router.settings, "chat_api_key", "secret"):
        res = await client.post(
            f"/api/t/acme/chat/{_session_id()}/stop", headers={"X-Chat-Api-Key": "wrong"}
        )
        assert res.status_code == 401
        res = await client.post(
            f"/api/t/acme/chat/{_session_id()}/stop", headers={"X-Chat-Api-Key": "secret"}
        )
        assert res.status_code == 200


@pytest.mark.asyncio
async def test_clear_session_requires_api_key(client: AsyncClient, tenant: Tenant):
    session_id = _session_id()
    with patch.object(chat_router.settings, "chat_api_key", "secret"):
        res = await client.delete(f"/api/t/acme/chat/{session_id}")
        assert res.status_code == 401
        res = await client.delete(
            f"/api/t/acme/chat/{session_id}", headers={"Authorization": "Bearer secret"}
        )
        assert res.status_code == 200
        assert res.json()["cleared"] is True
