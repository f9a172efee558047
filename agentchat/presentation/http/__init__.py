"""HTTP presentation layer - REST API routes."""

from fastapi import APIRouter

from agentchat.presentation.http.agents import router as agents_router
from agentchat.presentation.http.chat import router as chat_router
from agentchat.presentation.http.conversations import router as conversations_router
from agentchat.presentation.http.health import router as health_router
from agentchat.presentation.http.metrics import router as metrics_router

# Main API router
api_router = APIRouter()

api_router.include_router(health_router, tags=["Health"])
api_router.include_router(metrics_router, tags=["Metrics"])
api_router.include_router(agents_router)
api_router.include_router(conversations_router)
api_router.include_router(chat_router)

__all__ = ["api_router"]
