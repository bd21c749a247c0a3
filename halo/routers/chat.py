"""Chat router: AI assistant sessions with stop and retry."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..chat.messages import ChatMessage, ChatReply, ChatRequest
from ..chat.session import ChatSession, ChatSessionRegistry
from ..config import settings
from ..database import get_db
from ..errors import ChatBusyError
from ..models.tenant import Tenant
from ..schemas.chat import ChatRetry, ChatSend
from ..security import require_chat_api_key
from ..services import chat_svc, workflow_svc
from ..tenancy import get_current_tenant

router = APIRouter(prefix="/api/t/{subdomain}/chat", tags=["chat"])


async def _respond(request: ChatRequest) -> ChatReply:
    return await chat_svc.generate_reply(request)


sessions = ChatSessionRegistry(
    _respond,
    history_limit=settings.chat_history_limit,
    max_sessions=settings.chat_max_sessions,
)


def _session(tenant: Tenant, session_id: str) -> ChatSession:
    return sessions.get(f"{tenant.subdomain}:{session_id}")


async def _context(
    db: AsyncSession,
    tenant: Tenant,
    session: ChatSession,
    message: str,
    workflow_id: uuid.UUID | None,
) -> dict[str, Any]:
    workflow = None
    if workflow_id is not None:
        workflow = await workflow_svc.get_workflow(db, tenant.id, workflow_id)
        if not workflow:
            raise HTTPException(status_code=404, detail="Workflow not found")
    return await chat_svc.build_context(
        db, tenant, message=message, workflow=workflow, canvas=session.canvas
    )


def _result(session: ChatSession, message: ChatMessage | None) -> dict[str, Any]:
    return {
        "message": message.to_dict() if message else None,
        "state": session.state.value,
        "canvas": session.canvas.to_dict(),
        "notifications": [n.to_dict() for n in session.notifications.drain()],
    }


@router.get("/{session_id}")
async def get_session(session_id: str, tenant: Tenant = Depends(get_current_tenant)):
    return _session(tenant, session_id).to_dict()


@router.post("/{session_id}/send")
async def send_message(
    request: Request,
    session_id: str,
    data: ChatSend,
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    require_chat_api_key(request)
    session = _session(tenant, session_id)
    context = await _context(db, tenant, session, data.message, data.workflow_id)
    try:
        message = await session.send(data.message, context=context, supersede=data.supersede)
    except ChatBusyError as exc:
        raise HTTPException(status_code=409, detail=exc.message) from exc
    return _result(session, message)


@router.post("/{session_id}/retry")
async def retry_message(
    request: Request,
    session_id: str,
    data: ChatRetry | None = None,
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    require_chat_api_key(request)
    session = _session(tenant, session_id)
    last_user = next((m for m in reversed(session.messages) if m.role == "user"), None)
    workflow_id = data.workflow_id if data else None
    context = await _context(
        db, tenant, session, last_user.content if last_user else "", workflow_id
    )
    try:
        message = await session.retry(context=context)
    except ChatBusyError as exc:
        raise HTTPException(status_code=409, detail=exc.message) from exc
    return _result(session, message)


@router.post("/{session_id}/stop")
async def stop_message(
    request: Request,
    session_id: str,
    tenant: Tenant = Depends(get_current_tenant),
):
    require_chat_api_key(request)
    session = _session(tenant, session_id)
    stopped = session.stop()
    result = _result(session, None)
    result["stopped"] = stopped
    return result


@router.delete("/{session_id}")
async def clear_session(
    request: Request,
    session_id: str,
    tenant: Tenant = Depends(get_current_tenant),
):
    require_chat_api_key(request)
    sessions.drop(f"{tenant.subdomain}:{session_id}")
    return {"cleared": True}
