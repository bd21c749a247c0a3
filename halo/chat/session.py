"""Chat session orchestration.

A session moves ``idle -> sending -> idle | error``. Only one request is in
flight at a time. Every send takes a generation number; ``stop`` and
superseding sends bump it, so a reply that resolves after its request was
abandoned is dropped instead of being appended to the history.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections import OrderedDict
from enum import Enum
from typing import Any, Awaitable, Callable

from ..errors import ChatBusyError, ChatServiceError
from ..graph.canvas import BUILD_ACTION, Canvas
from ..notifications import Notification, NotificationLog
from .messages import ChatMessage, ChatReply, ChatRequest
from .store import KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)

Responder = Callable[[ChatRequest], Awaitable[ChatReply]]

WELCOME_MESSAGE = (
    "I'm Resonant Directive, your AI automation architect! I can build complete "
    "workflows from your descriptions, analyze your current automation, and suggest "
    "optimizations. What would you like to create?"
)
WELCOME_BACK_MESSAGE = (
    "Welcome back! Ready to build more automations? What can I help you create today?"
)
EMPTY_REPLY_MESSAGE = "I received your message but couldn't process it properly."


class ChatState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    ERROR = "error"


class ChatSession:
    """One conversation plus the canvas it edits."""

    def __init__(
        self,
        key: str,
        responder: Responder,
        store: KeyValueStore | None = None,
        history_limit: int = 10,
        canvas: Canvas | None = None,
    ):
        self.key = key
        self.state = ChatState.IDLE
        self.notifications = NotificationLog()
        self.canvas = canvas or Canvas(notifier=self.notifications)
        self._responder = responder
        self._store = store if store is not None else MemoryStore()
        self._history_limit = history_limit
        self._generation = 0
        self._inflight: asyncio.Future | None = None
        self.messages: list[ChatMessage] = self._load()

    @property
    def storage_key(self) -> str:
        return f"halo-chat-messages:{self.key}"

    @property
    def is_sending(self) -> bool:
        return self.state is ChatState.SENDING

    # ── History ───────────────────────────────────────────────────────────

    def _load(self) -> list[ChatMessage]:
        raw = self._store.get(self.storage_key)
        if raw:
            try:
                return [ChatMessage.from_dict(item) for item in json.loads(raw)]
            except (ValueError, TypeError, AttributeError):
                logger.warning("Discarding unreadable chat history for %s", self.key)
        return [ChatMessage.create("assistant", WELCOME_MESSAGE)]

    def _save(self) -> None:
        self._store.set(
            self.storage_key,
            json.dumps([m.to_dict() for m in self.messages]),
        )

    def _append(self, message: ChatMessage) -> ChatMessage:
        self.messages.append(message)
        self._save()
        return message

    def clear(self) -> None:
        if self.is_sending:
            self.stop()
        self._store.delete(self.storage_key)
        self.messages = [ChatMessage.create("assistant", WELCOME_BACK_MESSAGE)]
        self.state = ChatState.IDLE

    # ── Sending ───────────────────────────────────────────────────────────

    async def send(
        self,
        content: str,
        *,
        context: dict[str, Any] | None = None,
        supersede: bool = False,
    ) -> ChatMessage | None:
        """Send a user message and wait for the assistant reply.

        Returns the appended assistant message, or None when the message was
        blank or the request was cancelled before its reply was accepted.
        """
        if not content or not content.strip():
            return None

        if self.is_sending:
            if not supersede:
                raise ChatBusyError("A chat request is already in progress")
            logger.info("Superseding in-flight chat request for %s", self.key)
            self._abandon_inflight()

        history = [m.to_turn() for m in self.messages[-self._history_limit:]]
        self._append(ChatMessage.create("user", content))

        self._generation += 1
        generation = self._generation
        self.state = ChatState.SENDING

        request = ChatRequest(message=content, history=history, context=context or {})
        task = asyncio.ensure_future(self._responder(request))
        self._inflight = task
        try:
            reply = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.info("Chat request cancelled for %s", self.key)
                return None
            # The caller itself was cancelled; leave the session usable.
            self._generation += 1
            self.state = ChatState.IDLE
            raise
        except ChatServiceError as exc:
            if generation != self._generation:
                return None
            return self._fail(exc)
        except Exception as exc:
            if generation != self._generation:
                return None
            logger.exception("Chat responder crashed for %s", self.key)
            return self._fail(ChatServiceError(str(exc) or type(exc).__name__))
        finally:
            if self._inflight is task:
                self._inflight = None

        if generation != self._generation:
            logger.info("Dropping late chat reply for %s", self.key)
            return None
        return self._complete(reply)

    async def retry(self, *, context: dict[str, Any] | None = None) -> ChatMessage | None:
        """Resend the last user message verbatim."""
        if self.is_sending:
            raise ChatBusyError("A chat request is already in progress")
        for message in reversed(self.messages):
            if message.role == "user":
                return await self.send(message.content, context=context)
        return None

    def stop(self) -> bool:
        """Abandon the in-flight request. Returns False when nothing was pending."""
        if not self.is_sending:
            return False
        self._abandon_inflight()
        self.state = ChatState.IDLE
        self.notifications(
            Notification(title="Request Cancelled", description="AI processing has been stopped.")
        )
        return True

    def _abandon_inflight(self) -> None:
        self._generation += 1
        task, self._inflight = self._inflight, None
        if task is not None and not task.done():
            task.cancel()

    # ── Outcomes ──────────────────────────────────────────────────────────

    def _complete(self, reply: ChatReply) -> ChatMessage:
        message = self._append(
            ChatMessage.create(
                "assistant",
                reply.message or EMPTY_REPLY_MESSAGE,
                action=reply.action,
                suggestions=list(reply.suggestions),
                error=bool(reply.error),
            )
        )
        if reply.error:
            self.state = ChatState.ERROR
            self.notifications(
                Notification(
                    title="Processing Error",
                    description=reply.error,
                    variant="destructive",
                )
            )
            return message

        self.state = ChatState.IDLE
        data = reply.workflow_data
        if isinstance(data, dict) and data.get("action") == BUILD_ACTION:
            self.canvas.apply_generation(data)
        return message

    def _fail(self, exc: ChatServiceError) -> ChatMessage:
        logger.warning("Chat request failed for %s: %s", self.key, exc.message)
        self.state = ChatState.ERROR
        message = self._append(
            ChatMessage.create(
                "assistant",
                f"I apologize, but I encountered an error: {exc.message}. "
                "Please try again or rephrase your request.",
                error=True,
            )
        )
        self.notifications(
            Notification(
                title="AI Processing Error",
                description=exc.message,
                variant="destructive",
            )
        )
        return message

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "state": self.state.value,
            "messages": [m.to_dict() for m in self.messages],
            "canvas": self.canvas.to_dict(),
        }


class ChatSessionRegistry:
    """Holds live chat sessions by key; they share one history store.

    At most ``max_sessions`` are kept in memory. The least recently used idle
    session is evicted first; its history stays in the store and is reloaded
    the next time the key is used.
    """

    def __init__(
        self,
        responder: Responder,
        store: KeyValueStore | None = None,
        history_limit: int = 10,
        max_sessions: int = 1000,
    ):
        self._responder = responder
        self._store = store if store is not None else MemoryStore()
        self._history_limit = history_limit
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, ChatSession] = OrderedDict()

    def get(self, key: str) -> ChatSession:
        session = self._sessions.get(key)
        if session is not None:
            self._sessions.move_to_end(key)
            return session
        session = ChatSession(
            key,
            self._responder,
            store=self._store,
            history_limit=self._history_limit,
        )
        self._sessions[key] = session
        self._evict(keep=key)
        return session

    def _evict(self, keep: str) -> None:
        idle = [k for k, s in self._sessions.items() if k != keep and not s.is_sending]
        for key in idle[: max(len(self._sessions) - self._max_sessions, 0)]:
            logger.info("Evicting idle chat session %s", key)
            del self._sessions[key]

    def drop(self, key: str) -> None:
        """Forget a session and its stored history, evicted or not."""
        session = self._sessions.pop(key, None)
        if session is None:
            session = ChatSession(key, self._responder, store=self._store)
        session.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
