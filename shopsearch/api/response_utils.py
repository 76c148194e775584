"""Helpers for building API response envelopes."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from fastapi import Request

from shopsearch.core.config import settings
from shopsearch.schemas.response import ResponseMeta

REQUEST_ID_HEADER = "X-Request-ID"


def request_id_for(request: Request) -> str:
    """Request id from the header, else one generated and kept on ``request.state``."""
    request_id = getattr(request.state, "request_id", None)
    if request_id is None:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
    return request_id


def build_meta(request: Request) -> ResponseMeta:
    request_id = request_id_for(request)
    return ResponseMeta(
        requestId=request_id,
        timestamp=datetime.now(timezone.utc),
        path=request.url.path,
        version=settings.app_version,
    )
