"""Telemetry infrastructure (logging, metrics)."""

from agentchat.infrastructure.telemetry.logging import (
    ContextLogger,
    NamespaceFilter,
    StructuredFormatter,
    TextFormatter,
    clear_request_context,
    configure_logging,
    context_ids,
    conversation_id_var,
    get_logger,
    request_id_var,
    set_request_context,
    turn_id_var,
)
from agentchat.infrastructure.telemetry.metrics import (
    record_backend_request,
    record_fallback,
    record_stage_execution,
    record_turn_run,
    set_service_info,
)

__all__ = [
    # Logging
    "ContextLogger",
    "NamespaceFilter",
    "StructuredFormatter",
    "TextFormatter",
    "configure_logging",
    "get_logger",
    "set_request_context",
    "clear_request_context",
    "context_ids",
    "request_id_var",
    "conversation_id_var",
    "turn_id_var",
    # Metrics
    "set_service_info",
    "record_turn_run",
    "record_stage_execution",
    "record_backend_request",
    "record_fallback",
]
