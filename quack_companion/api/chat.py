# quack_companion/api/chat.py
import json
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from ..dependencies import get_assistant_service
from ..schemas.chat import ChatInput, ChatMessage
from ..services.assistant import AssistantService
from ..utils.errors import QuackError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat")


def _event(payload: dict) -> str:
    return json.dumps(payload) + "\n"


@router.get("/messages")
async def get_messages(
        assistant_service: AssistantService = Depends(get_assistant_service)
) -> list[ChatMessage]:
    return assistant_service.get_history()


@router.delete("/messages")
async def clear_messages(
        assistant_service: AssistantService = Depends(get_assistant_service)
):
    assistant_service.clear_history()
    return {"status": "success"}


@router.post("/messages")
async def send_message(
        request: ChatInput,
        assistant_service: AssistantService = Depends(get_assistant_service)
) -> StreamingResponse:
    stream = assistant_service.send_chat_message(request.content)

    # Pull the first chunk here so request failures still map to an error status
    try:
        first = await anext(stream)
    except StopAsyncIteration:
        first = None

    # One JSON event per line, always closed by a "done" or an "error" event
    async def relay() -> AsyncGenerator[str, None]:
        try:
            if first is not None:
                yield _event({"content": first})
                async for chunk in stream:
                    yield _event({"content": chunk})
        except QuackError as e:
            logger.error(f"Chat stream ended early: {e.message}")
            yield _event({"error": e.to_dict()["error"], "done": False})
            return
        finally:
            await stream.aclose()
        yield _event({"done": True})

    return StreamingResponse(relay(), media_type="application/x-ndjson")


@router.post("/cancel")
async def cancel_message(
        assistant_service: AssistantService = Depends(get_assistant_service)
):
    return {"cancelled": assistant_service.cancel()}
