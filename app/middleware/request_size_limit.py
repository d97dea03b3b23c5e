"""Request body size limit middleware.

Rejects uploads larger than max_upload_size with 413. A declared
Content-Length is checked before the app runs; bodies without one
(Transfer-Encoding: chunked) are counted as they stream in, without
buffering. Uses raw ASGI (no BaseHTTPMiddleware) for production-safe
streaming and background tasks.
"""

import json
from typing import Any, Callable

from app.middleware.request_id import get_header


class _BodyTooLarge(Exception):
    """Raised from receive() once the streamed body passes the limit."""


async def _send_413(send: Callable, max_bytes: int, actual: int | None = None) -> None:
    """Send 413 Payload Too Large response."""
    details: dict[str, Any] = {"maxBytes": max_bytes}
    if actual is not None:
        details["receivedBytes"] = actual
    body = json.dumps(
        {
            "error": "PAYLOAD_TOO_LARGE",
            "message": f"Request body must be at most {max_bytes} bytes",
            "details": details,
        }
    ).encode()
    await send({
        "type": "http.response.start",
        "status": 413,
        "headers": [
            (b"content-type", b"application/json"),
            (b"content-length", str(len(body)).encode()),
        ],
    })
    await send({"type": "http.response.body", "body": body, "more_body": False})


def RequestSizeLimitMiddleware(app: Callable, max_bytes: int) -> Callable:
    """Reject requests whose body exceeds max_bytes (Content-Length or streamed). Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        content_length = get_header(scope, "content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                declared = None
            if declared is not None and declared > max_bytes:
                await _send_413(send, max_bytes, declared)
                return

        received = 0
        exceeded = False
        response_started = False

        async def counting_receive() -> dict:
            nonlocal received, exceeded
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > max_bytes:
                    exceeded = True
                    raise _BodyTooLarge()
            return message

        async def guarded_send(message: dict) -> None:
            nonlocal response_started
            if exceeded:
                # The app is reporting its own failure to read the body; replaced by 413.
                return
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await app(scope, counting_receive, guarded_send)
        except Exception:
            if not exceeded:
                raise
        if exceeded and not response_started:
            await _send_413(send, max_bytes, received)

    return asgi_app
