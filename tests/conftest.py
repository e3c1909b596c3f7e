"""Shared fixtures: an in-memory Quack API served through httpx.MockTransport."""

import asyncio
import json

import httpx
import pytest

from quack_companion.core.config import Settings
from quack_companion.schemas.auth import QuackCredentials
from quack_companion.services.notifications import NotificationCenter
from quack_companion.services.quack import QuackClient

ENDPOINT = "http://quack.test"
TOKEN = "quack-token"
GITHUB_TOKEN = "gh-token"
TIMESTAMP = "2024-01-01T00:00:00"


class TrackingStream(httpx.AsyncByteStream):
    """Response body that records whether it was closed, optionally failing mid-way."""

    def __init__(self, chunks: list[bytes], error: Exception | None = None, delay: float = 0.0):
        self.chunks = chunks
        self.error = error
        self.delay = delay
        self.closed = False

    async def __aiter__(self):
        for index, chunk in enumerate(self.chunks):
            if index and self.delay:
                await asyncio.sleep(self.delay)
            yield chunk
        if self.error is not None:
            raise self.error

    async def aclose(self) -> None:
        self.closed = True


class FakeQuackAPI:
    """Minimal stand-in for the remote service."""

    def __init__(self):
        self.token = TOKEN
        self.guidelines: dict[int, dict] = {}
        self.next_id = 1
        self.requests: list[httpx.Request] = []
        self.validate_status: int | None = None
        self.fail_status: int | None = None
        self.chat_status = 200
        self.chat_chunks: list[bytes] = [
            json.dumps({"model": "quack", "created_at": TIMESTAMP,
                        "message": {"role": "assistant", "content": "Hel"}, "done": False}).encode() + b"\n",
            json.dumps({"model": "quack", "created_at": TIMESTAMP,
                        "message": {"role": "assistant", "content": "lo"}, "done": True}).encode() + b"\n",
        ]
        self.chat_error: Exception | None = None
        self.chat_delay = 0.0
        self.chat_stream: TrackingStream | None = None

    def add_guideline(self, content: str) -> dict:
        guideline = {
            "id": self.next_id,
            "content": content,
            "creator_id": 1,
            "created_at": TIMESTAMP,
            "updated_at": TIMESTAMP,
        }
        self.guidelines[self.next_id] = guideline
        self.next_id += 1
        return guideline

    def _authorized(self, request: httpx.Request) -> bool:
        return request.headers.get("Authorization") == f"Bearer {self.token}"

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/api/v1/login/validate":
            if self.validate_status is not None:
                return httpx.Response(self.validate_status)
            if not self._authorized(request):
                return httpx.Response(401, json={"detail": "Not authenticated"})
            return httpx.Response(200, json={"status": "ok"})

        if path == "/api/v1/login/token":
            body = json.loads(request.content)
            if body.get("github_token") != GITHUB_TOKEN:
                return httpx.Response(401, json={"detail": "Invalid GitHub token"})
            return httpx.Response(200, json={"access_token": self.token, "token_type": "bearer"})

        if not self._authorized(request):
            return httpx.Response(401, json={"detail": "Invalid credentials"})

        if path == "/api/v1/code/chat":
            if self.chat_status != 200:
                return httpx.Response(self.chat_status, json={"detail": "chat failed"})
            self.chat_stream = TrackingStream(self.chat_chunks, self.chat_error, self.chat_delay)
            return httpx.Response(200, stream=self.chat_stream)

        if self.fail_status is not None:
            return httpx.Response(self.fail_status, json={"detail": "failure"})

        if path == "/api/v1/guidelines/" and request.method == "GET":
            return httpx.Response(200, json=list(self.guidelines.values()))
        if path == "/api/v1/guidelines" and request.method == "POST":
            body = json.loads(request.content)
            return httpx.Response(201, json=self.add_guideline(body["content"]))
        if path.startswith("/api/v1/guidelines/"):
            guideline_id = int(path.rsplit("/", 1)[-1])
            if guideline_id not in self.guidelines:
                return httpx.Response(404, json={"detail": "Guideline not found"})
            if request.method == "PATCH":
                body = json.loads(request.content)
                self.guidelines[guideline_id] = {
                    **self.guidelines[guideline_id],
                    "content": body["content"],
                    "updated_at": "2024-01-02T00:00:00",
                }
                return httpx.Response(200, json=self.guidelines[guideline_id])
            if request.method == "DELETE":
                return httpx.Response(200, json=self.guidelines.pop(guideline_id))

        return httpx.Response(404, json={"detail": "Not Found"})


@pytest.fixture
def fake_api() -> FakeQuackAPI:
    return FakeQuackAPI()


@pytest.fixture
def transport(fake_api) -> httpx.MockTransport:
    return httpx.MockTransport(fake_api.handler)


@pytest.fixture
def notifier() -> NotificationCenter:
    return NotificationCenter()


@pytest.fixture
def client(transport, notifier) -> QuackClient:
    return QuackClient(request_timeout=5.0, stream_read_timeout=5.0, notifier=notifier, transport=transport)


@pytest.fixture
def credentials() -> QuackCredentials:
    return QuackCredentials(endpoint_url=ENDPOINT, token=TOKEN)


@pytest.fixture
def settings() -> Settings:
    return Settings(ENDPOINT=ENDPOINT, GITHUB_TOKEN="", STATE_PATH="", LOG_LEVEL="DEBUG")


def failing_transport(error_cls: type[Exception]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise error_cls("connection refused", request=request)

    return httpx.MockTransport(handler)
