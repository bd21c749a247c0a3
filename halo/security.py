"""Optional shared-key protection for the chat endpoints."""

from __future__ import annotations

import hmac
import logging

from fastapi import HTTPException, Request

from .config import settings

logger = logging.getLogger(__name__)


def presented_key(request: Request) -> str:
    """Key from ``Authorization: Bearer ...`` or ``X-Chat-Api-Key``."""
    scheme, _, value = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return request.headers.get("x-chat-api-key", "").strip()


def require_chat_api_key(request: Request) -> None:
    """Reject the request unless it carries HALO_CHAT_API_KEY. No-op when unset."""
    expected = settings.chat_api_key.strip()
    if not expected:
        return
    provided = presented_key(request)
    if not provided or not hmac.compare_digest(provided.encode(), expected.encode()):
        logger.warning("Rejected chat request to %s", request.url.path)
        raise HTTPException(status_code=401, detail="Invalid chat API key")
