"""Binds per-request correlation ids for logging."""

import time
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from agentchat.infrastructure.telemetry.logging import (
    clear_request_context,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
CONVERSATION_ID_HEADER = "X-Conversation-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Echoes or assigns ``X-Request-ID`` and binds it, plus an optional
    ``X-Conversation-ID``, to every log record emitted while serving the request.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        set_request_context(
            request_id=request_id,
            conversation_id=request.headers.get(CONVERSATION_ID_HEADER),
        )
        request.state.request_id = request_id
        start = time.perf_counter()

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            logger.debug(
                f"{request.method} {request.url.path} -> {response.status_code}",
                extra={"duration_ms": int((time.perf_counter() - start) * 1000)},
            )
            return response
        finally:
            clear_request_context()
