"""Exception handlers rendering every failure as one JSON error envelope."""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from agentchat.domain.errors import AppError, NotFoundError, ProviderError
from agentchat.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)

# First match wins; anything else is a 500.
_STATUS_BY_ERROR: tuple[tuple[type[AppError], int], ...] = (
    (NotFoundError, 404),
    (ProviderError, 502),
)


def status_for(error: AppError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return 500


def error_envelope(
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    retryable: bool = False,
) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
            "retryable": retryable,
        }
    }


def error_handler_middleware(app: FastAPI) -> None:
    """Register the exception handlers on ``app``."""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        status_code = status_for(exc)
        log = logger.warning if status_code < 500 else logger.error
        log(
            f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
            extra={
                "error_code": exc.code,
                "error_details": exc.details,
                "status_code": status_code,
            },
        )
        return JSONResponse(
            status_code=status_code,
            content=error_envelope(exc.code, exc.message, exc.details, exc.retryable),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")}
            for e in exc.errors()
        ]
        logger.info(
            f"Rejected request body on {request.url.path}",
            extra={"error_count": len(errors)},
        )
        return JSONResponse(
            status_code=422,
            content=error_envelope(
                "VALIDATION_ERROR", "Request body is invalid", {"errors": errors}
            ),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
            extra={"error_type": type(exc).__name__},
        )
        return JSONResponse(
            status_code=500,
            content=error_envelope("INTERNAL_ERROR", "An unexpected error occurred"),
        )
