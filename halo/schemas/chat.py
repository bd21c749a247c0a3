"""Pydantic models for the chat API."""

from __future__ import annotations

import uuid

from pydantic import BaseModel


class ChatSend(BaseModel):
    message: str
    workflow_id: uuid.UUID | None = None
    supersede: bool = False


class ChatRetry(BaseModel):
    workflow_id: uuid.UUID | None = None
