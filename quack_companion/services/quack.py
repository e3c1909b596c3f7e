# quack_companion/services/quack.py
import asyncio
import inspect
import logging
from contextlib import aclosing
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, Sequence, Union
from urllib.parse import urljoin

import httpx
from pydantic import ValidationError

from ..schemas.auth import AccessStatus, QuackCredentials, QuackToken, TokenRequest
from ..schemas.chat import ChatMessage, ChatRequest, ParseErrorPolicy, StreamingMessage
from ..schemas.guideline import Guideline, GuidelineContent
from ..utils.errors import (
    ApiError, ChatCancelledError, MissingCredentialsError, ParseError, QuackError, TransportError
)
from .notifications import LoggingNotifier, Notifier

logger = logging.getLogger(__name__)

VALIDATE_ROUTE = "/api/v1/login/validate"
TOKEN_ROUTE = "/api/v1/login/token"
GUIDELINES_ROUTE = "/api/v1/guidelines"
CHAT_ROUTE = "/api/v1/code/chat"

ChunkCallback = Callable[[str], Union[None, Awaitable[None]]]
EndCallback = Callable[[], Union[None, Awaitable[None]]]


def route_url(endpoint_url: str, path: str) -> str:
    """Resolve an absolute API path against the configured endpoint."""
    return urljoin(endpoint_url, path)


async def _call(callback: Callable[..., Any], *args) -> None:
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


async def _next_line(lines: AsyncIterator[str], cancel_event: Optional[asyncio.Event]) -> Optional[str]:
    """Next line of the body, or ``None`` at the end; stops waiting once ``cancel_event`` is set."""
    if cancel_event is None:
        return await anext(lines, None)
    if cancel_event.is_set():
        raise ChatCancelledError("Chat stream cancelled")

    async def read() -> Optional[str]:
        return await anext(lines, None)

    read_task = asyncio.ensure_future(read())
    cancel_task = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({read_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        pending = [task for task in (read_task, cancel_task) if not task.done()]
        for task in pending:
            task.cancel()
        # The read must be unwound before the response is closed
        await asyncio.gather(*pending, return_exceptions=True)
    if cancel_event.is_set():
        if not read_task.cancelled():
            read_task.exception()
        raise ChatCancelledError("Chat stream cancelled")
    return read_task.result()


class QuackClient:
    """HTTP client for the Quack API.

    The client never stores credentials: the endpoint and bearer token are
    passed to every call as a ``QuackCredentials`` value.
    """

    def __init__(
            self,
            request_timeout: Optional[float] = 30.0,
            stream_read_timeout: Optional[float] = 120.0,
            parse_error_policy: ParseErrorPolicy = ParseErrorPolicy.SKIP,
            notifier: Optional[Notifier] = None,
            transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.request_timeout = request_timeout
        self.stream_read_timeout = stream_read_timeout
        self.parse_error_policy = parse_error_policy
        self.notifier = notifier or LoggingNotifier()
        self._transport = transport

    def _client(self, timeout: Optional[httpx.Timeout] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout or httpx.Timeout(self.request_timeout),
            transport=self._transport
        )

    @staticmethod
    def _headers(token: Optional[str] = None) -> dict:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    @staticmethod
    def _check_credentials(credentials: Optional[QuackCredentials]) -> QuackCredentials:
        if credentials is None or not credentials.endpoint_url:
            raise MissingCredentialsError("Quack endpoint is not configured")
        if not credentials.token:
            raise MissingCredentialsError("Quack token is missing, authenticate first")
        return credentials

    def _raise_for_status(self, response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        self.notifier.show_error(f"Quack API returned status code {response.status_code}")
        raise ApiError(
            status_code=response.status_code,
            message=f"Unable to {action}",
            details={"status_code": response.status_code, "url": str(response.request.url)}
        )

    def _transport_failure(self, error: Exception, action: str) -> TransportError:
        logger.error(f"Error trying to {action}: {str(error)}")
        self.notifier.show_error(f"Failed to {action}. Make sure the Quack endpoint is reachable.")
        return TransportError(f"Unable to {action}", details={"reason": str(error)})

    async def _request(
            self,
            method: str,
            url: str,
            action: str,
            token: Optional[str] = None,
            payload: Optional[dict] = None
    ) -> Any:
        try:
            async with self._client() as client:
                response = await client.request(method, url, headers=self._headers(token), json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise self._transport_failure(e, action)

        self._raise_for_status(response, action)
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Failed to decode Quack API response: {response.text} - {str(e)}")
            raise ParseError(f"Unable to {action}: malformed response", raw=response.text)

    @staticmethod
    def _parse(model, data: Any, action: str):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ParseError(f"Unable to {action}: unexpected response shape ({e.error_count()} errors)", raw=str(data))

    # Token / endpoint validation

    async def verify_endpoint(self, endpoint_url: str) -> bool:
        """Check that the endpoint answers the validation route."""
        if not endpoint_url:
            return False
        try:
            async with self._client() as client:
                response = await client.get(route_url(endpoint_url, VALIDATE_ROUTE))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"Endpoint {endpoint_url} could not be verified: {str(e)}")
            return False
        # 401 still means the route exists and the service is a Quack API
        return response.is_success or response.status_code == 401

    async def get_access_status(self, credentials: QuackCredentials) -> AccessStatus:
        self._check_credentials(credentials)
        try:
            async with self._client() as client:
                response = await client.get(
                    route_url(credentials.endpoint_url, VALIDATE_ROUTE),
                    headers={"Authorization": f"Bearer {credentials.token}"}
                )
        except httpx.NetworkError as e:
            logger.warning(f"Quack endpoint unreachable: {str(e)}")
            return AccessStatus.UNREACHABLE_ENDPOINT
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Unable to check API access: {str(e)}")
            return AccessStatus.OTHER

        if response.is_success:
            return AccessStatus.OK
        if response.status_code == 404:
            return AccessStatus.UNKNOWN_ROUTE
        if response.status_code == 401:
            return AccessStatus.EXPIRED_TOKEN
        return AccessStatus.OTHER

    async def get_token(self, github_token: str, endpoint_url: str) -> str:
        """Exchange a GitHub token for a Quack access token."""
        if not endpoint_url:
            raise MissingCredentialsError("Quack endpoint is not configured")
        data = await self._request(
            "POST",
            route_url(endpoint_url, TOKEN_ROUTE),
            "authenticate",
            payload=TokenRequest(github_token=github_token).model_dump()
        )
        return self._parse(QuackToken, data, "authenticate").access_token

    # Guidelines

    async def fetch_guidelines(self, credentials: QuackCredentials) -> list[Guideline]:
        self._check_credentials(credentials)
        data = await self._request(
            "GET",
            route_url(credentials.endpoint_url, f"{GUIDELINES_ROUTE}/"),
            "fetch guidelines",
            token=credentials.token
        )
        if not isinstance(data, list):
            raise ParseError("Unable to fetch guidelines: expected a list", raw=str(data))
        return [self._parse(Guideline, item, "fetch guidelines") for item in data]

    async def post_guideline(self, content: str, credentials: QuackCredentials) -> Guideline:
        self._check_credentials(credentials)
        data = await self._request(
            "POST",
            route_url(credentials.endpoint_url, GUIDELINES_ROUTE),
            "create guideline",
            token=credentials.token,
            payload=GuidelineContent(content=content).model_dump()
        )
        return self._parse(Guideline, data, "create guideline")

    async def patch_guideline(self, guideline_id: int, content: str, credentials: QuackCredentials) -> Guideline:
        self._check_credentials(credentials)
        data = await self._request(
            "PATCH",
            route_url(credentials.endpoint_url, f"{GUIDELINES_ROUTE}/{guideline_id}"),
            "patch guideline",
            token=credentials.token,
            payload=GuidelineContent(content=content).model_dump()
        )
        return self._parse(Guideline, data, "patch guideline")

    async def delete_guideline(self, guideline_id: int, credentials: QuackCredentials) -> Guideline:
        self._check_credentials(credentials)
        data = await self._request(
            "DELETE",
            route_url(credentials.endpoint_url, f"{GUIDELINES_ROUTE}/{guideline_id}"),
            "delete guideline",
            token=credentials.token
        )
        return self._parse(Guideline, data, "delete guideline")

    # Chat

    def _decode_chunk(self, line: str, policy: ParseErrorPolicy) -> Optional[str]:
        try:
            chunk = StreamingMessage.model_validate_json(line)
        except ValidationError as e:
            if policy == ParseErrorPolicy.ABORT:
                raise ParseError("Unable to decode chat stream chunk", raw=line)
            logger.warning(f"Skipping undecodable chat chunk: {line} - {e.error_count()} errors")
            return None
        return chunk.message.content

    async def stream_chat(
            self,
            messages: Sequence[Union[ChatMessage, dict]],
            credentials: QuackCredentials,
            on_parse_error: Optional[ParseErrorPolicy] = None,
            cancel_event: Optional[asyncio.Event] = None
    ) -> AsyncIterator[str]:
        """Yield the assistant's answer increments in arrival order."""
        self._check_credentials(credentials)
        policy = on_parse_error or self.parse_error_policy
        payload = ChatRequest(
            messages=[ChatMessage.model_validate(m) for m in messages]
        ).model_dump()
        timeout = httpx.Timeout(self.request_timeout, read=self.stream_read_timeout)

        streaming = False
        try:
            async with self._client(timeout) as client:
                async with client.stream(
                        "POST",
                        route_url(credentials.endpoint_url, CHAT_ROUTE),
                        headers=self._headers(credentials.token),
                        json=payload
                ) as response:
                    if not response.is_success:
                        await response.aread()
                        logger.error(f"Quack chat error: {response.status_code} - {response.text}")
                        self._raise_for_status(response, "send chat message")

                    streaming = True
                    lines = response.aiter_lines()
                    while True:
                        line = await _next_line(lines, cancel_event)
                        if line is None:
                            break
                        if not line.strip():
                            continue
                        content = self._decode_chunk(line, policy)
                        if content is not None:
                            yield content
        except QuackError:
            raise
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            if streaming:
                logger.error(f"Chat stream interrupted: {str(e)}")
                self.notifier.show_error("The chat stream was interrupted.")
                raise TransportError("Chat stream interrupted", details={"reason": str(e)})
            raise self._transport_failure(e, "send chat message")

    async def post_chat_message(
            self,
            messages: Sequence[Union[ChatMessage, dict]],
            credentials: QuackCredentials,
            on_chunk: ChunkCallback,
            on_end: EndCallback,
            on_parse_error: Optional[ParseErrorPolicy] = None,
            cancel_event: Optional[asyncio.Event] = None
    ) -> None:
        """Relay each streamed increment to ``on_chunk`` then call ``on_end`` once."""
        stream = self.stream_chat(
            messages,
            credentials,
            on_parse_error=on_parse_error,
            cancel_event=cancel_event
        )
        async with aclosing(stream):
            async for content in stream:
                await _call(on_chunk, content)
        await _call(on_end)
