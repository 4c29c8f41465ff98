"""Chat and history endpoints."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from fastapi import APIRouter, BackgroundTasks, Header, Request
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from fodmap_helper.api.models import ChatRequestPayload, FoodPayload
from fodmap_helper.api.streaming import NDJSON_MEDIA_TYPE, ndjson_stream
from fodmap_helper.domain.chat import ChatMessage, ChatTurn

if TYPE_CHECKING:
    from fodmap_helper.containers import AppContainer
    from fodmap_helper.services.chat import ChatStream

router = APIRouter(tags=["chat"])
_logger = logging.getLogger(__name__)

ANONYMOUS_USER = "anonymous"


@router.post("/chat")
async def chat(
    payload: ChatRequestPayload,
    request: Request,
    x_user_id: str | None = Header(default=None),
) -> StreamingResponse:
    """Stream a grounded assistant reply as newline-delimited JSON."""
    container: AppContainer = request.app.state.container
    turn = _to_turn(payload, x_user_id)
    stream = await container.chat_service.start_stream(turn)
    return StreamingResponse(
        ndjson_stream(stream.deltas()),
        media_type=NDJSON_MEDIA_TYPE,
        background=BackgroundTask(_finish_stream, container, turn.user_id, stream),
    )


@router.post("/chat/complete")
async def chat_complete(
    payload: ChatRequestPayload,
    request: Request,
    background_tasks: BackgroundTasks,
    x_user_id: str | None = Header(default=None),
) -> dict[str, object]:
    """Return the whole assistant reply as a single completion."""
    container: AppContainer = request.app.state.container
    turn = _to_turn(payload, x_user_id)
    reply = await container.chat_service.reply(turn)
    background_tasks.add_task(
        _record_exchange,
        container,
        turn.user_id,
        reply.session_id,
        turn.messages[-1].content,
        reply.content,
    )
    context: dict[str, object] = {"sessionId": reply.session_id}
    if reply.food_results:
        context["foodResults"] = [
            FoodPayload.from_record(food).to_json_dict() for food in reply.food_results
        ]
    return {
        "id": reply.session_id,
        "object": "chat.completion",
        "created": int(time.time()),
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": reply.content},
                "finishReason": "stop",
            }
        ],
        "context": context,
    }


@router.get("/history")
def list_history(
    request: Request, x_user_id: str | None = Header(default=None)
) -> list[dict[str, object]]:
    """Return the caller's chat sessions."""
    container: AppContainer = request.app.state.container
    sessions = container.history_service.list_sessions(x_user_id or ANONYMOUS_USER)
    return [{"id": session.id, "title": session.title} for session in sessions]


@router.get("/history/{session_id}")
def session_history(
    session_id: str, request: Request, x_user_id: str | None = Header(default=None)
) -> list[dict[str, str]]:
    """Return the ordered messages of one session."""
    container: AppContainer = request.app.state.container
    messages = container.history_service.get_messages(
        x_user_id or ANONYMOUS_USER, session_id
    )
    return [
        {
            "role": "user" if message.role == "user" else "assistant",
            "content": message.content,
        }
        for message in messages
    ]


def _to_turn(payload: ChatRequestPayload, header_user_id: str | None) -> ChatTurn:
    """Convert the request body into a chat turn for the caller."""
    context = payload.context
    body_user_id = context.user_id if context else None
    return ChatTurn(
        messages=[
            ChatMessage(role=message.role, content=message.content or "")
            for message in payload.messages
        ],
        user_id=header_user_id or body_user_id or ANONYMOUS_USER,
        session_id=context.session_id if context else None,
    )


async def _finish_stream(
    container: AppContainer, user_id: str, stream: ChatStream
) -> None:
    """Persist a streamed exchange once the body has been sent."""
    if not stream.completed:
        _logger.warning("Skipping history for incomplete stream %s", stream.session_id)
        return
    await _record_exchange(
        container, user_id, stream.session_id, stream.question, stream.text
    )


async def _record_exchange(
    container: AppContainer,
    user_id: str,
    session_id: str,
    question: str,
    answer: str,
) -> None:
    """Append the exchange and derive a title; failures are logged only."""
    try:
        container.history_service.record_exchange(user_id, session_id, question, answer)
    except Exception:
        _logger.exception(
            "Failed to record chat history", extra={"session_id": session_id}
        )
        return
    try:
        await container.chat_service.ensure_title(user_id, session_id, question)
    except Exception:
        _logger.exception(
            "Failed to create session title", extra={"session_id": session_id}
        )
