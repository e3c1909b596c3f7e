# quack_companion/utils/errors.py
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class ErrorCode:
    # Remote API errors
    QUACK_API_ERROR = "QUACK_API_ERROR"  # Non-success HTTP status
    QUACK_TRANSPORT_ERROR = "QUACK_TRANSPORT_ERROR"  # Connection / network failure
    QUACK_PARSE_ERROR = "QUACK_PARSE_ERROR"  # Malformed body or stream chunk

    # Session errors
    QUACK_MISSING_CREDENTIALS = "QUACK_MISSING_CREDENTIALS"  # Endpoint or token missing
    QUACK_CHAT_CANCELLED = "QUACK_CHAT_CANCELLED"  # Stream stopped by caller


class QuackError(Exception):
    """Base exception for Quack API client errors."""
    code = ErrorCode.QUACK_API_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details
            },
            "success": False,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }


class ApiError(QuackError):
    """Raised when the Quack API answers with a non-success status."""
    code = ErrorCode.QUACK_API_ERROR

    def __init__(self, status_code: int, message: str, details: Optional[Dict[str, Any]] = None):
        self.status_code = status_code
        super().__init__(message, details)


class TransportError(QuackError):
    """Raised when the Quack API cannot be reached."""
    code = ErrorCode.QUACK_TRANSPORT_ERROR


class ParseError(QuackError):
    """Raised when a response body or stream chunk cannot be decoded."""
    code = ErrorCode.QUACK_PARSE_ERROR

    def __init__(self, message: str, raw: Optional[str] = None):
        self.raw = raw
        super().__init__(message, {"raw": raw} if raw is not None else None)


class MissingCredentialsError(QuackError):
    code = ErrorCode.QUACK_MISSING_CREDENTIALS


class ChatCancelledError(QuackError):
    code = ErrorCode.QUACK_CHAT_CANCELLED
