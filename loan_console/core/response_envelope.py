from __future__ import annotations

import json
from http import HTTPStatus
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

_SKIPPED_HEADERS = {"content-length", "content-type"}


def _success_code(status_code: int) -> str:
    mapping = {
        200: "ok",
        201: "created",
        202: "accepted",
    }
    return mapping.get(status_code, "ok")


def _success_message(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Success"


def envelope(data: Any, message: str, *, code: str = "ok") -> dict[str, Any]:
    """Build a success envelope carrying a user-facing notification message."""
    return {"code": code, "message": message, "data": data, "details": {}}


def _is_enveloped(payload: Any) -> bool:
    if not isinstance(payload, dict):
        return False
    return "code" in payload and "message" in payload and ("data" in payload or "details" in payload)


def _normalize(payload: Any, status_code: int) -> dict[str, Any]:
    if _is_enveloped(payload):
        normalized = dict(payload)
        normalized.setdefault("data", None)
        normalized.setdefault("details", {})
        return normalized
    return {
        "code": _success_code(status_code),
        "message": _success_message(status_code),
        "data": payload,
        "details": {},
    }


def _rebuild(response: Response, status_code: int, content: dict[str, Any]) -> JSONResponse:
    new_response = JSONResponse(status_code=status_code, content=content)
    for key, value in response.headers.items():
        if key.lower() in _SKIPPED_HEADERS:
            continue
        new_response.headers[key] = value
    return new_response


class ResponseEnvelopeMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next) -> Response:
        response = await call_next(request)

        if response.status_code < 200 or response.status_code >= 300:
            return response

        if response.status_code == 204:
            return _rebuild(response, 200, _normalize(None, 200))

        if response.headers.get("content-type", "").split(";")[0] != "application/json":
            return response

        body = b""
        async for chunk in response.body_iterator:
            body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")
        try:
            payload = json.loads(body) if body else None
        except ValueError:
            return Response(
                content=body,
                status_code=response.status_code,
                headers=dict(response.headers),
                media_type=response.media_type,
            )

        normalized = _normalize(payload, response.status_code)
        return _rebuild(response, response.status_code, normalized)


def register_response_envelope(app) -> None:
    app.add_middleware(ResponseEnvelopeMiddleware)
