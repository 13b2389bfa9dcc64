"""ASGI middleware: request body cap and per-request log context."""

from __future__ import annotations

import uuid

from fastapi import HTTPException, status
from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from studentms.core.logging import REQUEST_ID_HEADER, bind_request_context

LIMITED_CONTENT_TYPES = ("application/json", "application/x-www-form-urlencoded")


def _too_large_detail(max_bytes: int) -> str:
    return f"Request body exceeds the {max_bytes // 1024}KB limit"


class _BodyTooLarge(HTTPException):
    """Raised from receive(); an HTTPException so body parsing re-raises it untouched."""

    def __init__(self, max_bytes: int) -> None:
        super().__init__(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=_too_large_detail(max_bytes),
        )


class BodySizeLimitMiddleware:
    """Reject JSON / urlencoded bodies larger than *max_bytes* with 413.

    Content-Length is checked up front; chunked bodies are counted as they
    are received.
    """

    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        content_type = headers.get("content-type", "").split(";", 1)[0].strip().lower()
        if content_type not in LIMITED_CONTENT_TYPES:
            await self.app(scope, receive, send)
            return

        declared = headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > self.max_bytes:
            await self._reject(scope, receive, send)
            return

        received = 0
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    raise _BodyTooLarge(self.max_bytes)
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except _BodyTooLarge:
            if response_started:
                raise
            await self._reject(scope, receive, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = JSONResponse(
            {"detail": _too_large_detail(self.max_bytes)},
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
        )
        await response(scope, receive, send)


class RequestContextMiddleware:
    """Bind a request id to the log context and echo it in the response headers.

    A well-formed incoming X-Request-ID is reused so ids can be followed
    across a proxy; anything else is replaced by a fresh one.
    """

    max_id_length = 128

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        incoming = Headers(scope=scope).get(REQUEST_ID_HEADER, "")
        if incoming and len(incoming) <= self.max_id_length and incoming.isprintable():
            request_id = incoming
        else:
            request_id = uuid.uuid4().hex
        bind_request_context(request_id)

        async def send_with_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers[REQUEST_ID_HEADER] = request_id
            await send(message)

        await self.app(scope, receive, send_with_id)
