# quack_companion/schemas/auth.py
from enum import Enum

from pydantic import BaseModel, ConfigDict


class AccessStatus(str, Enum):
    OK = "ok"
    UNKNOWN_ROUTE = "unknown-route"
    EXPIRED_TOKEN = "expired-token"
    UNREACHABLE_ENDPOINT = "unreachable-endpoint"
    OTHER = "other"


class QuackCredentials(BaseModel):
    """Endpoint and bearer token for a single authenticated call."""
    model_config = ConfigDict(frozen=True)

    endpoint_url: str
    token: str


class TokenRequest(BaseModel):
    github_token: str


class QuackToken(BaseModel):
    access_token: str
    token_type: str | None = None


class LoginRequest(BaseModel):
    github_token: str | None = None


class EndpointUpdate(BaseModel):
    endpoint_url: str


class SessionStatus(BaseModel):
    endpoint_url: str | None
    is_valid_endpoint: bool
    is_valid_token: bool
    has_token: bool
