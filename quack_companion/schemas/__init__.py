from .auth import (
    AccessStatus,
    EndpointUpdate,
    LoginRequest,
    QuackCredentials,
    QuackToken,
    SessionStatus,
    TokenRequest
)

from .chat import (
    ChatInput,
    ChatMessage,
    ChatRequest,
    ParseErrorPolicy,
    StreamingMessage
)

from .diagnostics import (
    EnvInfo,
    Notification,
    NotificationLevel
)

from .guideline import (
    Guideline,
    GuidelineContent
)

__all__ = [
    'AccessStatus',
    'EndpointUpdate',
    'LoginRequest',
    'QuackCredentials',
    'QuackToken',
    'SessionStatus',
    'TokenRequest',
    'ChatInput',
    'ChatMessage',
    'ChatRequest',
    'ParseErrorPolicy',
    'StreamingMessage',
    'EnvInfo',
    'Notification',
    'NotificationLevel',
    'Guideline',
    'GuidelineContent'
]
