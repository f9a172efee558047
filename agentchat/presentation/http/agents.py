"""Agent roster endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from agentchat.infrastructure.stores.conversations import ConversationStore
from agentchat.presentation.http.dependencies import get_conversations

router = APIRouter(prefix="/agents", tags=["agents"])


class SetActiveAgentRequest(BaseModel):
    """Request to select the agent for subsequent turns."""

    agent_id: str = Field(..., min_length=1)


@router.get("")
async def list_agents(
    store: ConversationStore = Depends(get_conversations),
) -> dict[str, Any]:
    """Roster with live state, plus the active agent id."""
    return {
        "activeAgentId": store.active_agent_id,
        "agents": [a.to_dict() for a in store.agents.list_agents()],
    }


@router.put("/active")
async def set_active_agent(
    request: SetActiveAgentRequest,
    store: ConversationStore = Depends(get_conversations),
) -> dict[str, Any]:
    store.set_active_agent(request.agent_id)
    return {
        "activeAgentId": store.active_agent_id,
        "conversation": store.active.to_dict(),
    }
