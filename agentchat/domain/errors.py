"""Typed error hierarchy for the chat core.

All application errors inherit from AppError and provide:
- code: Machine-readable error code
- message: Human-readable description
- details: Additional context as dict
- retryable: Whether the operation can be retried

Exception Hierarchy:
- AppError (base)
  ├── NotFoundError
  │   ├── ConversationNotFoundError
  │   ├── AgentNotFoundError
  │   └── TurnNotFoundError
  ├── ProviderError
  │   ├── ProviderNotConfiguredError
  │   ├── ProviderTimeoutError
  │   ├── ProviderRateLimitError
  │   ├── ProviderUnavailableError
  │   ├── ProviderInvalidRequestError
  │   └── ProviderInvalidResponseError
  └── PipelineError
      └── StageFailedError

Provider errors never escape a turn: the pipeline records them as an
``error`` protocol step and falls back to the local simulator.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any


class AppError(Exception):
    """Base exception for application errors."""

    code: str = "APP_ERROR"
    message: str = "An unexpected error occurred"
    retryable: bool = False

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool | None = None,
    ) -> None:
        self.message = message or type(self).message
        self.details = details or {}
        if retryable is not None:
            self.retryable = retryable
        self.timestamp = datetime.now(UTC)
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize error for API responses and logging."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


# --- Not Found Errors ---


class NotFoundError(AppError):
    """Base exception for resource not found errors."""

    code = "NOT_FOUND"
    message = "Resource not found"
    resource = "Resource"

    def __init__(self, identifier: str, details: dict[str, Any] | None = None) -> None:
        self.identifier = identifier
        full_details = {"resource": self.resource, "identifier": str(identifier)}
        if details:
            full_details.update(details)
        super().__init__(
            message=f"{self.resource} not found: {identifier}",
            details=full_details,
        )


class ConversationNotFoundError(NotFoundError):
    """Conversation not found."""

    code = "CONVERSATION_NOT_FOUND"
    resource = "Conversation"


class AgentNotFoundError(NotFoundError):
    """Agent not found in the roster."""

    code = "AGENT_NOT_FOUND"
    resource = "Agent"


class TurnNotFoundError(NotFoundError):
    """No protocol timeline exists for the turn."""

    code = "TURN_NOT_FOUND"
    resource = "Turn"


# --- Provider Errors ---


class ProviderError(AppError):
    """Generation backend failed."""

    code = "PROVIDER_ERROR"
    message = "Generation backend failed"

    def __init__(
        self,
        message: str | None = None,
        provider: str = "",
        operation: str = "",
        details: dict[str, Any] | None = None,
        retryable: bool | None = None,
    ) -> None:
        self.provider = provider
        self.operation = operation
        full_details = {"provider": provider, "operation": operation}
        if details:
            full_details.update(details)
        super().__init__(message=message, details=full_details, retryable=retryable)


class ProviderNotConfiguredError(ProviderError):
    """Backend has no base URL; callers should route elsewhere."""

    code = "PROVIDER_NOT_CONFIGURED"
    message = "LLM backend not configured"


class ProviderTimeoutError(ProviderError):
    """Provider call timed out."""

    code = "PROVIDER_TIMEOUT"
    message = "Generation backend timed out"
    retryable = True


class ProviderRateLimitError(ProviderError):
    """Provider rate limit exceeded."""

    code = "PROVIDER_RATE_LIMITED"
    message = "Generation backend rate limit exceeded"
    retryable = True


class ProviderUnavailableError(ProviderError):
    """Provider unreachable or returned a server error."""

    code = "PROVIDER_UNAVAILABLE"
    message = "Generation backend unavailable"
    retryable = True


class ProviderInvalidRequestError(ProviderError):
    """Provider rejected the request."""

    code = "PROVIDER_INVALID_REQUEST"
    message = "Generation backend rejected the request"


class ProviderInvalidResponseError(ProviderError):
    """Provider returned a body that is not a JSON object."""

    code = "PROVIDER_INVALID_RESPONSE"
    message = "Generation backend returned an invalid response"


# --- Pipeline Errors ---


class PipelineError(AppError):
    """Pipeline execution failed."""

    code = "PIPELINE_ERROR"
    message = "Pipeline execution failed"

    def __init__(
        self,
        message: str | None = None,
        stage: str = "",
        turn_id: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.stage = stage
        self.turn_id = turn_id
        full_details = {"stage": stage, "turn_id": turn_id}
        if details:
            full_details.update(details)
        super().__init__(message=message, details=full_details)


class StageFailedError(PipelineError):
    """A stage in the pipeline failed."""

    code = "STAGE_FAILED"


__all__ = [
    "AppError",
    "NotFoundError",
    "ConversationNotFoundError",
    "AgentNotFoundError",
    "TurnNotFoundError",
    "ProviderError",
    "ProviderNotConfiguredError",
    "ProviderTimeoutError",
    "ProviderRateLimitError",
    "ProviderUnavailableError",
    "ProviderInvalidRequestError",
    "ProviderInvalidResponseError",
    "PipelineError",
    "StageFailedError",
]
