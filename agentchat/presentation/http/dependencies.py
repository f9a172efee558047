"""Request-scoped access to the application's pipeline and stores."""

from fastapi import Request

from agentchat.application.pipelines.turn_pipeline import TurnPipeline
from agentchat.infrastructure.stores.conversations import ConversationStore


def get_pipeline(request: Request) -> TurnPipeline:
    return request.app.state.pipeline


def get_conversations(request: Request) -> ConversationStore:
    return request.app.state.pipeline.conversations
