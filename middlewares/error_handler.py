import logging
import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from schemas.common import ErrorDetail, ErrorResponse
from services.exceptions import DomainError

logger = logging.getLogger(__name__)

_HTTP_CODES = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
}


def _latency_ms(request: Request) -> int:
    started = getattr(request.state, "started_at", None)
    return int((time.perf_counter() - started) * 1000) if started else 0


def error_response(request: Request, status_code: int, code: str, message: str, details=None, headers=None):
    body = ErrorResponse(
        error=ErrorDetail(code=code, message=message, details=details),
        generated_at=datetime.now(timezone.utc),
        latency_ms=_latency_ms(request),
    )
    # details is omitted rather than sent as null
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", exclude_none=True),
                        headers=headers)


def add_error_handlers(app: FastAPI):
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if any(e.get("type") == "json_invalid" for e in errors):
            return error_response(request, 400, "INVALID_JSON", "Request body must be valid JSON")

        details = [
            {
                "field": ".".join(str(p) for p in e.get("loc", ()) if p != "body"),
                "message": e.get("msg", "Invalid value"),
            }
            for e in errors
        ]
        return error_response(request, 400, "VALIDATION_ERROR", "Invalid request data", details)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(
            request,
            exc.status_code,
            _HTTP_CODES.get(exc.status_code, "HTTP_ERROR"),
            str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError):
        if exc.status_code >= 500:
            logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
        return error_response(request, exc.status_code, exc.code, exc.message, exc.details)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return error_response(request, 500, "INTERNAL_ERROR", "An unexpected error occurred")
