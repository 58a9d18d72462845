"""Request timeout middleware.

Cancels a request that runs longer than the configured timeout and answers
504, unless the response has already started. Raw ASGI.
"""

import asyncio
import json
import logging
from typing import Callable

logger = logging.getLogger(__name__)


def TimeoutMiddleware(app: Callable, timeout_seconds: float) -> Callable:
    """Bound every HTTP request to timeout_seconds. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        started = False

        async def send_wrapper(message: dict) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            async with asyncio.timeout(float(timeout_seconds)):
                await app(scope, receive, send_wrapper)
        except TimeoutError:
            logger.warning(
                "Request timed out after %s seconds: %s %s",
                timeout_seconds,
                scope.get("method", ""),
                scope.get("path", ""),
            )
            if started:
                raise
            body = json.dumps(
                {
                    "error": "REQUEST_TIMEOUT",
                    "message": f"Request timed out after {timeout_seconds} seconds",
                    "details": {"timeout_seconds": timeout_seconds},
                }
            ).encode()
            await send({
                "type": "http.response.start",
                "status": 504,
                "headers": [(b"content-type", b"application/json")],
            })
            await send({"type": "http.response.body", "body": body, "more_body": False})

    return asgi_app
