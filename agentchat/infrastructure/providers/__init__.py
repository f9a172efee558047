"""Generation backend providers."""

from agentchat.infrastructure.providers.remote import RemoteBackend, compose_url

__all__ = ["RemoteBackend", "compose_url"]
