"""Request and correlation ID middleware.

Forwards or generates X-Request-ID and X-Correlation-ID, stores both on
scope state for handlers and log records, and echoes them on the response.
Client-provided ids are sanitized (length + character set) to prevent log
injection. Raw ASGI (no BaseHTTPMiddleware).
"""

import re
import uuid
from typing import Callable

from wastesearch.middleware._headers import append_header, get_header

ID_MAX_LENGTH = 64
ID_ALLOWED_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{1," + str(ID_MAX_LENGTH) + r"}$")


def sanitize_id(raw: str | None) -> str | None:
    """Return the stripped id when safe to log, else None."""
    if raw is None:
        return None
    raw = raw.strip()
    return raw if ID_ALLOWED_PATTERN.match(raw) else None


def RequestContextMiddleware(
    app: Callable,
    request_id_header: str = "X-Request-ID",
    correlation_id_header: str = "X-Correlation-ID",
) -> Callable:
    """Attach request_id and correlation_id to every HTTP request. Raw ASGI.

    The correlation id falls back to the request id when the caller sends none.
    """

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = sanitize_id(get_header(scope, request_id_header)) or str(uuid.uuid4())
        correlation_id = (
            sanitize_id(get_header(scope, correlation_id_header)) or request_id
        )
        state = scope.setdefault("state", {})
        state["request_id"] = request_id
        state["correlation_id"] = correlation_id

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                append_header(message, request_id_header, request_id)
                append_header(message, correlation_id_header, correlation_id)
            await send(message)

        await app(scope, receive, send_wrapper)

    return asgi_app
