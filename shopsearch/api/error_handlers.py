"""Exception handlers that render errors in the shared envelope."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shopsearch.api.response_utils import build_meta
from shopsearch.core.exceptions import (
    DecodeError,
    EmptyInputError,
    FeatureDisabledError,
    NoVariantsError,
    RecordNotFoundError,
    RetrievalError,
    ShopSearchException,
    UpstreamError,
    ValidationError,
    VectorStoreError,
)
from shopsearch.core.logging import get_logger
from shopsearch.schemas.response import ResponseEnvelope, ResponseError

logger = get_logger(__name__)

# Looked up along the exception MRO, so subclasses without an entry inherit
# their parent's status.
EXCEPTION_RESPONSE_MAP: dict[type[Exception], tuple[int, str]] = {
    RecordNotFoundError: (status.HTTP_404_NOT_FOUND, "RecordNotFoundError"),
    ValidationError: (status.HTTP_400_BAD_REQUEST, "ValidationError"),
    EmptyInputError: (status.HTTP_400_BAD_REQUEST, "EmptyInputError"),
    FeatureDisabledError: (status.HTTP_403_FORBIDDEN, "FeatureDisabledError"),
    NoVariantsError: (status.HTTP_422_UNPROCESSABLE_ENTITY, "NoVariantsError"),
    UpstreamError: (status.HTTP_502_BAD_GATEWAY, "UpstreamError"),
    DecodeError: (status.HTTP_502_BAD_GATEWAY, "DecodeError"),
    VectorStoreError: (status.HTTP_503_SERVICE_UNAVAILABLE, "VectorStoreError"),
    RetrievalError: (status.HTTP_503_SERVICE_UNAVAILABLE, "RetrievalError"),
}
DEFAULT_ERROR_CODE = "INTERNAL.UNEXPECTED"


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShopSearchException, _domain_exception_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_error_handler)
    app.add_exception_handler(HTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)


def resolve_status(exc: Exception) -> tuple[int, str]:
    for cls in type(exc).__mro__:
        if cls in EXCEPTION_RESPONSE_MAP:
            return EXCEPTION_RESPONSE_MAP[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR, DEFAULT_ERROR_CODE


def _error_response(
    request: Request,
    status_code: int,
    *,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    envelope = ResponseEnvelope[None](
        success=False,
        error=ResponseError(code=code, message=message, details=details),
        meta=build_meta(request),
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope, by_alias=True),
    )


def _format_validation_message(errors: list[dict[str, Any]]) -> str:
    if not errors:
        return "Validation error"

    parts: list[str] = []
    for error in errors:
        loc = error.get("loc", [])
        msg = error.get("msg", "Validation error")
        loc_path = ".".join(str(item) for item in loc) if loc else None
        parts.append(f"{loc_path}: {msg}" if loc_path else msg)
    return "; ".join(parts)


async def _domain_exception_handler(request: Request, exc: ShopSearchException) -> JSONResponse:
    status_code, error_code = resolve_status(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log("request_failed", path=request.url.path, code=error_code, error=exc.message)
    return _error_response(request, status_code, code=error_code, message=exc.message)


async def _request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors() or []
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        code="RequestValidationError",
        message=_format_validation_message(errors),
        details={"errors": jsonable_encoder(errors)},
    )


async def _http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message, details = str(detail.get("message", detail)), detail
    else:
        message, details = str(detail), None
    return _error_response(
        request, exc.status_code, code=f"HTTP.{exc.status_code}", message=message, details=details
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", path=request.url.path, error=str(exc))
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=DEFAULT_ERROR_CODE,
        message="Unexpected server error.",
    )
