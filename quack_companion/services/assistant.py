# quack_companion/services/assistant.py
import asyncio
import logging
from contextlib import aclosing
from typing import AsyncGenerator

from ..schemas.auth import QuackCredentials
from ..schemas.chat import ChatMessage
from ..utils.errors import ChatCancelledError
from .auth import AuthService
from .quack import QuackClient
from .session import MESSAGES_KEY, Scope, SessionStore

logger = logging.getLogger(__name__)


class AssistantService:
    def __init__(self, session: SessionStore, client: QuackClient, auth: AuthService):
        self.session = session
        self.client = client
        self.auth = auth
        self._cancel_events: set[asyncio.Event] = set()

    def get_history(self) -> list[ChatMessage]:
        return [
            ChatMessage.model_validate(m)
            for m in self.session.get(MESSAGES_KEY, [], scope=Scope.WORKSPACE)
        ]

    def _append(self, message: ChatMessage) -> list[ChatMessage]:
        history = self.get_history() + [message]
        self.session.update(MESSAGES_KEY, [m.model_dump() for m in history], scope=Scope.WORKSPACE)
        return history

    def clear_history(self) -> None:
        self.session.update(MESSAGES_KEY, [], scope=Scope.WORKSPACE)

    def cancel(self) -> bool:
        """Stop every chat stream currently being read."""
        if not self._cancel_events:
            return False
        for event in self._cancel_events:
            event.set()
        return True

    def send_chat_message(self, content: str) -> AsyncGenerator[str, None]:
        """Record ``content`` and return a generator over the streamed answer.

        Credentials are checked before anything is recorded, the request is
        only sent once the generator is iterated.
        """
        credentials = self.auth.credentials()
        history = self._append(ChatMessage(role="user", content=content))
        return self._stream_answer(history, credentials)

    async def _stream_answer(self, history: list[ChatMessage], credentials: QuackCredentials) -> AsyncGenerator[str, None]:
        cancel_event = asyncio.Event()
        self._cancel_events.add(cancel_event)
        parts: list[str] = []
        try:
            stream = self.client.stream_chat(history, credentials, cancel_event=cancel_event)
            async with aclosing(stream):
                async for chunk in stream:
                    parts.append(chunk)
                    yield chunk
        except ChatCancelledError:
            logger.info("Chat stream cancelled by user")
            if parts:
                self._append(ChatMessage(role="assistant", content="".join(parts)))
            raise
        finally:
            self._cancel_events.discard(cancel_event)

        self._append(ChatMessage(role="assistant", content="".join(parts)))
        logger.debug(f"Assistant answered with {len(parts)} chunks")
