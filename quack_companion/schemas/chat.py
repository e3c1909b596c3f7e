# quack_companion/schemas/chat.py
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class ParseErrorPolicy(str, Enum):
    SKIP = "skip"
    ABORT = "abort"


class ChatMessage(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    messages: list[ChatMessage]


class StreamingContent(BaseModel):
    role: str | None = None
    content: str


class StreamingMessage(BaseModel):
    """One chunk of the chat stream, as emitted by the Quack API."""
    model_config = ConfigDict(extra="allow", protected_namespaces=())

    model: str | None = None
    created_at: datetime | str | None = None
    message: StreamingContent
    done: bool = False


class ChatInput(BaseModel):
    content: str
