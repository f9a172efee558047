"""Pytest configuration and fixtures."""

import pytest

from agentchat.application.pipelines.turn_pipeline import TurnPipeline, create_turn_pipeline
from agentchat.config import Settings
from agentchat.infrastructure.providers.remote import RemoteBackend


@pytest.fixture
def settings() -> Settings:
    """Test settings: no remote backend, no simulated latency."""
    return Settings(
        _env_file=None,
        environment="development",
        llm_api_url="",
        llm_api_key="",
        simulator_latency_ms=0,
        log_level="DEBUG",
        log_format="text",
    )


@pytest.fixture
def remote_settings(settings: Settings) -> Settings:
    """Settings with a remote backend configured."""
    return settings.model_copy(
        update={
            "llm_api_url": "https://llm.example.test/",
            "llm_api_key": "test-key",
            "llm_timeout_ms": 50,
        }
    )


@pytest.fixture
def pipeline(settings: Settings) -> TurnPipeline:
    """Local-only pipeline with fresh stores."""
    return create_turn_pipeline(settings, remote=RemoteBackend())
