"""Standardized error responses and domain exceptions across all API endpoints."""
from typing import Any

import sentry_sdk
import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException


class ErrorResponse(BaseModel):
    """Standard error envelope returned by all API error handlers."""
    error: str
    message: str
    detail: Any = None
    request_id: str = "unknown"

logger = structlog.get_logger()


# ── Domain exceptions ────────────────────────────────────────────────────────


class ESGError(Exception):
    """Base class for failures that map onto a client-visible status."""

    status_code: int = 500
    error: str = "internal_server_error"

    def __init__(self, message: str, detail: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class InvalidResponseError(ESGError):
    """Submitted response breaks a field or cross-field invariant."""

    status_code = 400
    error = "bad_request"


class ResponseNotFoundError(ESGError, LookupError):
    """Response does not exist or belongs to another user."""

    status_code = 404
    error = "not_found"

    def __init__(self, message: str = "Response not found") -> None:
        super().__init__(message)


class RelatedDataConflictError(ESGError):
    status_code = 400
    error = "related_data_conflict"

    def __init__(self, message: str = "Cannot delete response due to related data") -> None:
        super().__init__(message)


class EmptyDatasetError(ESGError):
    """Export requested with nothing to export."""

    status_code = 404
    error = "no_data"

    def __init__(self, message: str = "No data to export") -> None:
        super().__init__(message)


class StorageError(ESGError):
    """The database could not serve the request."""

    status_code = 500
    error = "storage_error"


class ExportRenderError(ESGError):
    """A document library failed while rendering an export."""

    status_code = 500
    error = "export_failed"


# ── Handlers ─────────────────────────────────────────────────────────────────

_GENERIC_MESSAGE = "An unexpected error occurred. Our team has been notified."


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", "unknown")


def _envelope(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    detail: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=error,
        message=message,
        detail=jsonable_encoder(detail),
        request_id=_request_id(request),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the real error, answer with the generic 500."""
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        request_id=_request_id(request),
    )
    sentry_sdk.capture_exception(exc)
    return _envelope(request, 500, "internal_server_error", _GENERIC_MESSAGE)


async def esg_exception_handler(request: Request, exc: ESGError) -> JSONResponse:
    """Domain errors keep their message below 500; 5xx bodies never carry internal text."""
    if exc.status_code >= 500:
        logger.error(
            "domain_error",
            error=exc.message,
            error_type=type(exc).__name__,
            cause=repr(exc.__cause__) if exc.__cause__ else None,
            path=request.url.path,
            request_id=_request_id(request),
        )
        sentry_sdk.capture_exception(exc)
        return _envelope(request, exc.status_code, exc.error, _GENERIC_MESSAGE)

    logger.info(
        "request_rejected",
        error=exc.error,
        status_code=exc.status_code,
        path=request.url.path,
    )
    return _envelope(request, exc.status_code, exc.error, exc.message, exc.detail)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """HTTPException (ours and the router's 404/405) in the same envelope."""
    if isinstance(exc.detail, dict):
        error = exc.detail.get("error", f"http_{exc.status_code}")
        message = exc.detail.get("message", str(exc.detail))
        detail: Any = exc.detail.get("detail")
    else:
        error = f"http_{exc.status_code}"
        message = str(exc.detail)
        detail = exc.detail

    return _envelope(
        request, exc.status_code, error, message, detail, headers=dict(exc.headers or {})
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed or missing input is a 400, not FastAPI's default 422."""
    # Raw input is never echoed: it can be a password or a non-finite float
    errors = jsonable_encoder(
        [{k: v for k, v in e.items() if k not in ("input", "url")} for e in exc.errors()]
    )
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", [])[1:]) or "request"
    return _envelope(
        request,
        400,
        "bad_request",
        f"Invalid value for {field}: {first.get('msg', 'invalid input')}",
        errors,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ESGError, esg_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)
