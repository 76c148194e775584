"""Wraps successful JSON responses in the shared envelope."""

from __future__ import annotations

import json
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from shopsearch.api.response_utils import REQUEST_ID_HEADER, build_meta, request_id_for
from shopsearch.core.logging import log_context
from shopsearch.schemas.response import ResponseEnvelope

# Recomputed for the wrapped body.
_DROPPED_HEADERS = {"content-length", "content-type"}


class SuccessEnvelopeMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Any) -> Response:
        with log_context(request_id=request_id_for(request), path=request.url.path):
            return await self._dispatch(request, call_next)

    async def _dispatch(self, request: Request, call_next: Any) -> Response:
        response = await call_next(request)
        if not self._should_wrap(response):
            return response

        body = await self._read_body(response)
        if not body:
            return response

        try:
            payload = json.loads(body)
        except ValueError:
            return Response(
                content=body,
                status_code=response.status_code,
                headers=dict(response.headers),
            )

        meta = build_meta(request)
        if isinstance(payload, dict) and {"success", "meta"} <= payload.keys():
            wrapped = payload
        else:
            wrapped = jsonable_encoder(
                ResponseEnvelope(success=True, data=payload, meta=meta), by_alias=True
            )

        headers = {
            key: value
            for key, value in response.headers.items()
            if key.lower() not in _DROPPED_HEADERS
        }
        headers[REQUEST_ID_HEADER] = meta.request_id
        return JSONResponse(status_code=response.status_code, content=wrapped, headers=headers)

    @staticmethod
    async def _read_body(response: Response) -> bytes:
        body = getattr(response, "body", None)
        if body:
            return body

        chunks: list[bytes] = []
        async for chunk in response.body_iterator:
            chunks.append(chunk if isinstance(chunk, bytes) else chunk.encode("utf-8"))
        return b"".join(chunks)

    @staticmethod
    def _should_wrap(response: Response) -> bool:
        if response.status_code >= 400 or response.status_code in (204, 304):
            return False
        return "application/json" in response.headers.get("content-type", "")
