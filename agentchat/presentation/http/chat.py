"""Chat endpoints - submit turns and read their protocol timelines."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from agentchat.application.pipelines.turn_pipeline import TurnPipeline
from agentchat.domain.errors import TurnNotFoundError
from agentchat.presentation.http.dependencies import get_pipeline

router = APIRouter(tags=["chat"])


class ChatMessageRequest(BaseModel):
    """Request to submit a user message.

    Length is not validated here; the pipeline sanitizes and truncates.
    """

    message: str
    conversation_id: str | None = None
    agent_id: str | None = None


@router.post("/chat/messages")
async def send_message(
    request: ChatMessageRequest,
    pipeline: TurnPipeline = Depends(get_pipeline),
) -> dict[str, Any]:
    """Run one turn and return both messages with the turn's protocol steps."""
    result = await pipeline.submit(
        request.message,
        conversation_id=request.conversation_id,
        agent_id=request.agent_id,
    )
    turn = pipeline.get_turn(result.turn_id)

    return {
        "turnId": result.turn_id,
        "path": result.path,
        "fallback": result.fallback,
        "fallbackReason": result.fallback_reason,
        "userMessage": result.user_message.to_dict(),
        "reply": result.reply.to_dict(),
        "steps": [s.to_dict() for s in turn.steps] if turn is not None else [],
    }


@router.get("/turns/{turn_id}")
async def get_turn(
    turn_id: str,
    pipeline: TurnPipeline = Depends(get_pipeline),
) -> dict[str, Any]:
    turn = pipeline.get_turn(turn_id)
    if turn is None:
        raise TurnNotFoundError(turn_id)
    return turn.to_dict()
