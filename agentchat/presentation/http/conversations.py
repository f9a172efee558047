"""Conversation endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from agentchat.infrastructure.stores.conversations import ConversationStore
from agentchat.presentation.http.dependencies import get_conversations

router = APIRouter(prefix="/conversations", tags=["conversations"])


class CreateConversationRequest(BaseModel):
    """Request to start a new conversation."""

    title: str = Field(default="New Chat", min_length=1, max_length=200)


class SetActiveConversationRequest(BaseModel):
    conversation_id: str = Field(..., min_length=1)


@router.get("")
async def list_conversations(
    store: ConversationStore = Depends(get_conversations),
) -> dict[str, Any]:
    """All conversations, newest first, plus the active conversation id."""
    return {
        "activeConversationId": store.active_conversation_id,
        "conversations": [c.to_dict() for c in store.list_conversations()],
    }


@router.post("", status_code=201)
async def create_conversation(
    request: CreateConversationRequest | None = None,
    store: ConversationStore = Depends(get_conversations),
) -> dict[str, Any]:
    """Create a conversation for the active agent and make it active."""
    title = request.title if request is not None else "New Chat"
    return store.new_conversation(title).to_dict()


@router.put("/active")
async def set_active_conversation(
    request: SetActiveConversationRequest,
    store: ConversationStore = Depends(get_conversations),
) -> dict[str, Any]:
    return store.set_active_conversation(request.conversation_id).to_dict()


@router.get("/{conversation_id}")
async def get_conversation(
    conversation_id: str,
    store: ConversationStore = Depends(get_conversations),
) -> dict[str, Any]:
    return store.get(conversation_id).to_dict()
