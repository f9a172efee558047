"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from agentchat.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    version: str = "0.1.0"

    # Server
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)

    # ==========================================================================
    # Remote generation backend
    # ==========================================================================
    llm_api_url: str = Field(
        default="",
        description="Base URL of the chat-completions backend. Empty disables remote generation.",
    )
    llm_api_key: str = Field(
        default="",
        description="Optional bearer credential sent to the backend",
    )
    llm_chat_completions_path: str = Field(
        default="/v1/chat/completions",
        description="Path appended to the base URL for chat completions",
    )
    llm_timeout_ms: int = Field(
        default=20000,
        ge=1,
        description="Timeout in milliseconds for a remote generation call",
    )

    # ==========================================================================
    # Retrieval / packing / simulation
    # ==========================================================================
    retrieval_top_k: int = Field(default=5, ge=1, description="Evidence items kept per retrieval")
    context_max_retrieval_items: int = Field(
        default=3,
        ge=0,
        le=3,
        description="Retrieval items packed into the context window",
    )
    max_input_length: int = Field(
        default=4000,
        ge=1,
        description="Hard cap on sanitized user text length (characters)",
    )
    simulator_latency_ms: int = Field(
        default=600,
        ge=0,
        description="Artificial latency of the local simulator",
    )
    generation_temperature: float = Field(default=0.2, ge=0, le=2)
    default_agent_id: str = "planner"

    # Observability
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_debug_namespaces: str = Field(
        default="",
        description="Comma-separated list of namespaces to enable debug logging",
    )
    prometheus_enabled: bool = True

    @computed_field
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @computed_field
    @property
    def remote_configured(self) -> bool:
        """Remote generation is attempted only when a base URL is set."""
        return bool(self.llm_api_url.strip())

    @computed_field
    @property
    def debug_namespaces(self) -> list[str]:
        """Parse debug namespaces into a list."""
        if not self.log_debug_namespaces:
            return []
        return [ns.strip() for ns in self.log_debug_namespaces.split(",") if ns.strip()]

    def log_config_summary(self) -> None:
        """Log a summary of the configuration (redacting secrets)."""
        logger.info(
            "Configuration loaded",
            extra={
                "environment": self.environment,
                "llm_api_url": self.llm_api_url or None,
                "llm_api_key_configured": bool(self.llm_api_key),
                "llm_chat_completions_path": self.llm_chat_completions_path,
                "llm_timeout_ms": self.llm_timeout_ms,
                "retrieval_top_k": self.retrieval_top_k,
                "simulator_latency_ms": self.simulator_latency_ms,
                "log_level": self.log_level,
            },
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
